"""Secret materialization from resolved parameters."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, SecretStr

if TYPE_CHECKING:
    from collections.abc import Mapping

# Characters left as-is besides letters, digits and "_.-~" (same set as
# JavaScript's encodeURIComponent).
_URI_COMPONENT_SAFE = "!*'()"


def encode_credential(value: str) -> str:
    """Percent-encode a value for use inside a connection string."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


class SecretBundle(BaseModel):
    """Credential and connection values handed to the init job and the workload.

    ``mongo_user`` and ``mongo_pass`` are stored already percent-encoded;
    every other field is the resolved value verbatim.
    """

    model_config = ConfigDict(frozen=True)

    mongo_user: str
    mongo_pass: SecretStr
    mongo_host: str
    mongo_port: str
    mongo_dbname: str
    mongo_authsource: str
    root_username: str
    root_password: SecretStr

    def string_data(self) -> dict[str, SecretStr]:
        """Application credentials keyed by the environment variable they feed."""
        return {
            "MONGO_USER": SecretStr(self.mongo_user),
            "MONGO_PASS": self.mongo_pass,
            "MONGO_HOST": SecretStr(self.mongo_host),
            "MONGO_PORT": SecretStr(self.mongo_port),
            "MONGO_DBNAME": SecretStr(self.mongo_dbname),
            "MONGO_AUTHSOURCE": SecretStr(self.mongo_authsource),
        }

    def admin_env(self) -> dict[str, SecretStr]:
        """Administrative credentials used by the database init job."""
        return {
            "MONGODB_ROOT_USERNAME": SecretStr(self.root_username),
            "MONGODB_ROOT_PASSWORD": self.root_password,
        }


def materialize(cfg: Mapping[str, str]) -> SecretBundle:
    """Derive the secret bundle from resolved parameters.

    Encoding is applied here and only here; values are never re-encoded.
    """
    return SecretBundle(
        mongo_user=encode_credential(cfg["mongoUser"]),
        mongo_pass=SecretStr(encode_credential(cfg["mongoPassword"])),
        mongo_host=cfg["mongoHost"],
        mongo_port=cfg["mongoPort"],
        mongo_dbname=cfg["mongoDbName"],
        mongo_authsource=cfg["mongoAuthSource"],
        root_username=cfg["mongoRootUser"],
        root_password=SecretStr(cfg["mongoRootPassword"]),
    )

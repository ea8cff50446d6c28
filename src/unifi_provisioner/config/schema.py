"""Configuration models for the YAML stack file."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

from unifi_provisioner.config.resolver import ConfigError, ResolvedConfig
from unifi_provisioner.engine.executor import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT


class ClusterConfig(BaseSettings):
    """Kubernetes connection settings.

    Fields can be set via YAML (constructor kwargs) or environment variables
    with the ``KUBE_`` prefix. Constructor kwargs take precedence.
    """

    model_config = SettingsConfigDict(env_prefix="KUBE_")

    kubeconfig: Path | None = None
    context: str | None = None
    in_cluster: bool = False


class ExecutorConfig(BaseModel):
    """How the provisioning executor schedules and waits."""

    model_config = ConfigDict(extra="forbid")

    parallelism: int = Field(default=1, ge=1)
    # None defers entirely to the control plane's restart policy
    timeout: float | None = Field(default=DEFAULT_TIMEOUT, gt=0)
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)


def _none_to_dict(v: Any) -> Any:
    return v if v is not None else {}


def _scalar_to_str(v: Any) -> Any:
    # YAML turns `memLimit: 1024` into an int; parameters are strings.
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, int | float):
        return str(v)
    return v


class Config(BaseModel):
    """Stack configuration: validates YAML structure directly."""

    model_config = ConfigDict(extra="forbid")

    config: Annotated[
        dict[str, Annotated[str, BeforeValidator(_scalar_to_str)]],
        BeforeValidator(_none_to_dict),
    ] = {}
    cluster: Annotated[ClusterConfig, BeforeValidator(_none_to_dict)] = Field(
        default_factory=ClusterConfig
    )
    executor: Annotated[ExecutorConfig, BeforeValidator(_none_to_dict)] = Field(
        default_factory=ExecutorConfig
    )
    init_script: Path = Path("scripts/init-unifi-db.sh")
    config_dir: Path = Path()

    _resolved: ResolvedConfig | None = PrivateAttr(default=None)
    _init_script_text: str | None = PrivateAttr(default=None)

    @property
    def resolved(self) -> ResolvedConfig:
        """Parameters after layering explicit values, environment and defaults."""
        if self._resolved is None:
            raise ConfigError("Configuration has not been resolved; use load_config()")
        return self._resolved

    @property
    def init_script_path(self) -> Path:
        if self.init_script.is_absolute():
            return self.init_script
        return self.config_dir / self.init_script

    @property
    def init_script_text(self) -> str:
        if self._init_script_text is None:
            raise ConfigError("Init script has not been loaded; use load_config()")
        return self._init_script_text

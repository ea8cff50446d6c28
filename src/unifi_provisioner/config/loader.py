"""YAML stack file loader."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import dotenv_values
from pydantic import ValidationError
from ruamel.yaml import YAML

from unifi_provisioner.config.parameters import DEFAULTS
from unifi_provisioner.config.resolver import ConfigError, resolve
from unifi_provisioner.config.schema import ClusterConfig, Config

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

__all__ = ["ConfigError", "capture_environment", "load_config"]


def capture_environment(
    config_dir: Path, environ: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Snapshot environment overrides once.

    Priority (highest wins): process environment > ``.env`` file next to the
    stack file.
    """
    env_file = config_dir / ".env"
    dotenv_vals = dotenv_values(env_file, encoding="utf-8-sig") if env_file.is_file() else {}

    captured: dict[str, str] = {k: v for k, v in dotenv_vals.items() if v is not None}
    source = os.environ if environ is None else environ
    captured.update({k: v for k, v in source.items() if v})
    return captured


def _read_init_script(path: Path) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read init script {path}: {exc}") from exc
    if not text.strip():
        raise ConfigError(f"Init script {path} is empty")
    return text


def load_config(path: Path | str, *, environ: Mapping[str, str] | None = None) -> Config:
    """Load a YAML stack file and return a resolved ``Config`` object.

    Environment overrides are read once here (from *environ*, or the process
    environment, plus a ``.env`` file beside the stack file) and never again
    downstream.

    Raises:
        ConfigError: On YAML parse errors, validation failures, unknown or
            missing parameters, or an unreadable init script.
    """
    path = Path(path)

    try:
        raw = YAML(typ="safe").load(path)
    except Exception as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    try:
        cluster_raw: dict[str, Any] = raw.get("cluster") or {}
        raw["cluster"] = ClusterConfig(**cluster_raw)
        config = Config.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    config.config_dir = path.parent
    environment = capture_environment(config.config_dir, environ)
    config._resolved = resolve(config.config, environment, DEFAULTS)
    config._init_script_text = _read_init_script(config.init_script_path)

    logger.info(
        "Loaded config from %s (namespace=%s)", path, config.resolved["namespace"]
    )
    return config

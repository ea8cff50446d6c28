"""Layered resolution of stack parameters."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from unifi_provisioner.config.parameters import DEFAULTS, PARAMETERS, Parameter

logger = logging.getLogger(__name__)

Source = Literal["explicit", "environment", "default"]


class ConfigError(Exception):
    """Raised for configuration loading / validation errors."""


@dataclass(frozen=True, eq=False)
class ResolvedConfig(Mapping[str, str]):
    """Immutable parameter name -> value mapping, with the layer each value came from."""

    values: Mapping[str, str]
    sources: Mapping[str, Source] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(self, "sources", MappingProxyType(dict(self.sources)))

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def source(self, key: str) -> Source:
        return self.sources[key]


def _present(value: str | None) -> bool:
    # Empty strings count as unset, like an exported-but-empty variable.
    return value is not None and value != ""


def resolve(
    explicit: Mapping[str, str],
    environment: Mapping[str, str],
    defaults: Mapping[str, str] | None = None,
    *,
    parameters: tuple[Parameter, ...] = PARAMETERS,
) -> ResolvedConfig:
    """Resolve every recognized parameter.

    Priority (highest wins): explicit value > environment variable > default.
    ``environment`` is keyed by environment variable name (see
    :class:`~unifi_provisioner.config.parameters.Parameter`).

    Raises:
        ConfigError: On unknown explicit keys, or when a parameter without a
            default is set in neither ``explicit`` nor ``environment``.
    """
    if defaults is None:
        defaults = DEFAULTS

    known = {p.key for p in parameters}
    unknown = sorted(set(explicit) - known)
    if unknown:
        raise ConfigError(f"Unknown parameter(s): {', '.join(unknown)}")

    values: dict[str, str] = {}
    sources: dict[str, Source] = {}
    missing: list[str] = []
    for p in parameters:
        layers: tuple[tuple[Source, str | None], ...] = (
            ("explicit", explicit.get(p.key)),
            ("environment", environment.get(p.env_var)),
            ("default", defaults.get(p.key)),
        )
        for source, value in layers:
            if _present(value):
                assert value is not None
                values[p.key] = value
                sources[p.key] = source
                break
        else:
            missing.append(f"{p.key} (set it in the stack file or via {p.env_var})")

    if missing:
        raise ConfigError("Missing required parameter(s): " + "; ".join(missing))

    logger.debug(
        "Resolved %d parameters (%d explicit, %d from environment)",
        len(values),
        sum(1 for s in sources.values() if s == "explicit"),
        sum(1 for s in sources.values() if s == "environment"),
    )
    return ResolvedConfig(values=values, sources=sources)

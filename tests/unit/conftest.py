"""Shared fixtures for unit tests."""

from __future__ import annotations

import os
import threading
from typing import TYPE_CHECKING

import pytest

from unifi_provisioner.config import load
from unifi_provisioner.config.parameters import PARAMETERS
from unifi_provisioner.core.control_plane import ObservedStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from pathlib import Path

    from unifi_provisioner.config.schema import Config
    from unifi_provisioner.resources.base import Resource

INIT_SCRIPT = """#!/bin/bash
set -e
mongosh --host "$MONGO_HOST" -u "$MONGODB_ROOT_USERNAME" -p "$MONGODB_ROOT_PASSWORD" <<JS
db.getSiblingDB("$MONGO_DBNAME").createUser({user: "$MONGO_USER", pwd: "$MONGO_PASS"})
JS
"""

_EXTRA_ENV_VARS = ("UNIFI_LOG", "NO_COLOR")


@pytest.fixture(autouse=True)
def _clean_unifi_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove parameter and cluster env vars so unit tests don't leak host config."""
    for var in (*(p.env_var for p in PARAMETERS), *_EXTRA_ENV_VARS):
        monkeypatch.delenv(var, raising=False)
    for var in list(os.environ):
        if var.startswith("KUBE_"):
            monkeypatch.delenv(var, raising=False)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML, init script + optional .env, return loaded Config."""

    def _make(
        yaml_str: str = "",
        *,
        dotenv: str | None = None,
        init_script: str | None = INIT_SCRIPT,
    ) -> Config:
        (tmp_path / "config.yaml").write_text(yaml_str)
        if init_script is not None:
            scripts = tmp_path / "scripts"
            scripts.mkdir(exist_ok=True)
            (scripts / "init-unifi-db.sh").write_text(init_script)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "config.yaml")

    return _make


class SimulatedControlPlane:
    """In-memory control plane that records every call in order.

    ``script`` maps an identity to the statuses successive observations
    return; the last one repeats. Unscripted resources are PRESENT, except
    init jobs, which run once and then succeed.
    """

    def __init__(
        self,
        script: Mapping[str, Sequence[ObservedStatus]] | None = None,
        *,
        reject: Mapping[str, Exception] | None = None,
        on_observe: Callable[[Resource], None] | None = None,
    ) -> None:
        self._script = {k: list(v) for k, v in (script or {}).items()}
        self._reject = dict(reject or {})
        self._on_observe = on_observe
        self._lock = threading.Lock()
        self.events: list[tuple[str, str, ObservedStatus | None]] = []

    def submit(self, resource: Resource) -> None:
        with self._lock:
            self.events.append(("submit", resource.identity, None))
        exc = self._reject.get(resource.identity)
        if exc is not None:
            raise exc

    def observe(self, resource: Resource) -> ObservedStatus:
        if self._on_observe is not None:
            self._on_observe(resource)
        with self._lock:
            statuses = self._script.get(resource.identity)
            if statuses is None:
                if resource.kind == "InitJob":
                    statuses = [ObservedStatus.RUNNING, ObservedStatus.SUCCEEDED]
                else:
                    statuses = [ObservedStatus.PRESENT]
                self._script[resource.identity] = statuses
            status = statuses.pop(0) if len(statuses) > 1 else statuses[0]
            self.events.append(("observe", resource.identity, status))
        return status

    @property
    def submitted(self) -> list[str]:
        return [identity for event, identity, _ in self.events if event == "submit"]

    def index(self, event: str, identity: str, status: ObservedStatus | None = None) -> int:
        for i, (e, ident, s) in enumerate(self.events):
            if e == event and ident == identity and (status is None or s == status):
                return i
        raise ValueError(f"no {event} event for {identity}")


@pytest.fixture
def make_control_plane() -> Callable[..., SimulatedControlPlane]:
    return SimulatedControlPlane


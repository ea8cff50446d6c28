"""Engine error types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unifi_provisioner.engine.types import ProvisioningReport


class EngineError(Exception):
    """Base exception for engine errors."""


class UnknownResourceKindError(EngineError):
    """Raised when a resource kind has no registration/handler."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Unknown resource kind: {kind}")
        self.kind = kind


class GraphError(EngineError):
    """Raised for a malformed resource graph. Nothing has been submitted."""


class DuplicateIdentityError(GraphError):
    """Raised when multiple resources share the same identity."""

    def __init__(self, identity: str) -> None:
        super().__init__(f"Duplicate resource identity: {identity}")
        self.identity = identity


class DanglingDependencyError(GraphError):
    """Raised when a resource depends on an identity that is not in the graph."""

    def __init__(self, identity: str, missing: list[str]) -> None:
        super().__init__(
            f"Resource '{identity}' depends on unknown resource(s): {', '.join(missing)}"
        )
        self.identity = identity
        self.missing = missing


class DependencyCycleError(GraphError):
    """Raised when dependencies contain a cycle."""

    def __init__(self, identities: list[str]) -> None:
        msg = "Dependency cycle detected"
        if identities:
            msg += f": {', '.join(identities)}"
        super().__init__(msg)
        self.identities = identities


class ProvisioningError(EngineError):
    """Raised when a resource could not be provisioned.

    Carries the report (what was provisioned, what failed, what was left
    pending) so callers can inspect progress. When the failure came from an
    unexpected exception, it is chained via ``__cause__``.
    """

    def __init__(
        self,
        *,
        identity: str,
        kind: str,
        message: str,
        report: ProvisioningReport | None = None,
    ) -> None:
        self.identity = identity
        self.kind = kind
        self.report = report
        super().__init__(f"{kind} '{identity}' failed: {message}")


class ProvisioningCanceled(EngineError):
    """Raised when provisioning is canceled (e.g., Ctrl-C).

    Submitted resources are left as the control plane reports them.
    """

    def __init__(self, message: str, *, report: ProvisioningReport | None = None) -> None:
        super().__init__(message)
        self.report = report

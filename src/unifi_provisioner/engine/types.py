"""Engine types (node status, provisioning report)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from unifi_provisioner.engine.errors import ProvisioningError


class NodeStatus(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    READY = "ready"
    FAILED = "failed"


class NodeResult(BaseModel):
    identity: str
    kind: str
    status: NodeStatus = NodeStatus.PENDING
    error: str | None = None
    # Failed/blocked dependencies that kept this node from being submitted
    blocked_by: list[str] = Field(default_factory=list)
    submitted_at: datetime | None = None
    finished_at: datetime | None = None


class ProvisioningReport(BaseModel):
    results: list[NodeResult] = Field(default_factory=list)
    outputs: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(r.status == NodeStatus.READY for r in self.results)

    @property
    def failures(self) -> list[NodeResult]:
        return [r for r in self.results if r.status == NodeStatus.FAILED]

    @property
    def blocked(self) -> list[NodeResult]:
        return [r for r in self.results if r.blocked_by]

    def get(self, identity: str) -> NodeResult:
        for r in self.results:
            if r.identity == identity:
                return r
        raise KeyError(identity)

    def summary(self) -> dict[str, int]:
        counts = {s.value: 0 for s in NodeStatus}
        for r in self.results:
            counts[r.status.value] += 1
        return counts

    def raise_for_failures(self) -> None:
        """Raise ``ProvisioningError`` for the first failed node, if any."""
        failures = self.failures
        if not failures:
            return
        first = failures[0]
        raise ProvisioningError(
            identity=first.identity,
            kind=first.kind,
            message=first.error or "unknown error",
            report=self,
        )

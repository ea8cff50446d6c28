"""Provisioning executor.

Walks a :class:`~unifi_provisioner.engine.graph.ResourceGraph` in dependency
order, submitting each resource to the control plane and waiting for it to
become ready before its dependents are released. A failure stops only the
resources that (transitively) depend on the failed one; independent branches
run to completion.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from unifi_provisioner.core.control_plane import ControlPlaneError
from unifi_provisioner.engine.errors import ProvisioningCanceled, ProvisioningError
from unifi_provisioner.engine.types import NodeResult, NodeStatus, ProvisioningReport
from unifi_provisioner.resources.base import Resource

if TYPE_CHECKING:
    from unifi_provisioner.core.control_plane import ControlPlane
    from unifi_provisioner.engine.graph import ResourceGraph

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Resource, NodeStatus], None]

DEFAULT_TIMEOUT = 900.0
DEFAULT_POLL_INTERVAL = 2.0


class ProvisioningExecutor:
    """Submit a resource graph to a control plane, honoring dependency edges.

    Args:
        control_plane: Where resources are submitted and observed.
        parallelism: Maximum number of resources submitted/observed at once.
            ``1`` gives a fully deterministic order.
        timeout: Seconds to wait for a submitted resource to become ready
            before marking it failed. ``None`` waits for as long as the
            control plane keeps reporting the resource as in progress.
        poll_interval: Seconds between two observations of a resource.
        progress: Called on every node status transition (from worker threads).
    """

    def __init__(
        self,
        control_plane: ControlPlane,
        *,
        parallelism: int = 1,
        timeout: float | None = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        progress: ProgressCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if parallelism < 1:
            raise ValueError("parallelism must be at least 1")
        self._control_plane = control_plane
        self._parallelism = parallelism
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._progress = progress
        self._clock = clock
        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._results: dict[str, NodeResult] = {}

    def cancel(self) -> None:
        """Interrupt every in-flight wait. Safe to call from any thread."""
        self._cancel.set()

    # -- state ---------------------------------------------------------------

    def _transition(
        self, resource: Resource, status: NodeStatus, *, error: str | None = None
    ) -> None:
        now = datetime.now(UTC)
        with self._lock:
            result = self._results[resource.identity]
            result.status = status
            if status == NodeStatus.SUBMITTED:
                result.submitted_at = now
            elif status in (NodeStatus.READY, NodeStatus.FAILED):
                result.finished_at = now
                result.error = error
        if status == NodeStatus.FAILED:
            logger.warning("%s failed: %s", resource.identity, error)
        else:
            logger.debug("%s -> %s", resource.identity, status.value)
        if self._progress is not None:
            self._progress(resource, status)

    def _status(self, identity: str) -> NodeStatus:
        with self._lock:
            return self._results[identity].status

    def _is_blocked(self, identity: str) -> bool:
        with self._lock:
            return bool(self._results[identity].blocked_by)

    def _block(self, resource: Resource, blockers: list[str]) -> None:
        with self._lock:
            self._results[resource.identity].blocked_by = blockers
        logger.warning(
            "Skipping %s: dependency %s did not become ready",
            resource.identity,
            ", ".join(blockers),
        )

    def _report(self, graph: ResourceGraph) -> ProvisioningReport:
        with self._lock:
            results = [self._results[r.identity].model_copy(deep=True) for r in graph.order()]
        return ProvisioningReport(results=results, outputs=graph.outputs)

    # -- per-node work -------------------------------------------------------

    def _run_node(self, resource: Resource) -> None:
        """Submit one resource and wait until it is ready, failed or timed out."""
        try:
            self._control_plane.submit(resource)
        except ControlPlaneError as exc:
            self._transition(resource, NodeStatus.FAILED, error=f"submission rejected: {exc}")
            return
        self._transition(resource, NodeStatus.SUBMITTED)

        deadline = None if self._timeout is None else self._clock() + self._timeout
        while True:
            try:
                status = self._control_plane.observe(resource)
            except ControlPlaneError as exc:
                self._transition(resource, NodeStatus.FAILED, error=f"observation failed: {exc}")
                return

            if resource.is_ready(status):
                self._transition(resource, NodeStatus.READY)
                return
            if resource.is_failed(status):
                self._transition(
                    resource,
                    NodeStatus.FAILED,
                    error=f"control plane reports {resource.kind} as {status.value}",
                )
                return
            if deadline is not None and self._clock() >= deadline:
                self._transition(
                    resource,
                    NodeStatus.FAILED,
                    error=f"not ready after {self._timeout:g}s (last status: {status.value})",
                )
                return

            logger.debug("Waiting for %s (status: %s)", resource.identity, status.value)
            if self._cancel.wait(self._poll_interval):
                raise ProvisioningCanceled(f"Canceled while waiting for {resource.identity}")

    # -- scheduling ----------------------------------------------------------

    def _schedulable(self, graph: ResourceGraph, resource: Resource) -> bool | None:
        """True when every dependency is ready, None when one can never be."""
        deps = graph.dependencies(resource.identity)
        blockers = sorted(
            d for d in deps if self._status(d) == NodeStatus.FAILED or self._is_blocked(d)
        )
        if blockers:
            self._block(resource, blockers)
            return None
        return all(self._status(d) == NodeStatus.READY for d in deps)

    def provision(self, graph: ResourceGraph) -> ProvisioningReport:
        """Provision every resource of *graph*.

        Returns a report; the report is not ``ok`` if any resource failed.
        Only unexpected exceptions (not control-plane rejections) are raised,
        wrapped in ``ProvisioningError``. A :meth:`cancel` issued before the
        run starts cancels it before anything is submitted; the cancel flag is
        reset once the run ends, so the executor can be reused.

        Raises:
            ProvisioningCanceled: If :meth:`cancel` was called or the caller
                was interrupted.
            ProvisioningError: If a resource raised an unexpected exception.
        """
        order = graph.order()
        with self._lock:
            self._results = {
                r.identity: NodeResult(identity=r.identity, kind=r.kind) for r in order
            }
        logger.info(
            "Provisioning %d resources (parallelism=%d)", len(order), self._parallelism
        )

        try:
            self._drive(graph, list(order))
        finally:
            self._cancel.clear()

        report = self._report(graph)
        logger.info("Provisioning finished: %s", report.summary())
        return report

    def _drive(self, graph: ResourceGraph, waiting: list[Resource]) -> None:
        running: dict[Future[None], Resource] = {}
        with ThreadPoolExecutor(
            max_workers=self._parallelism, thread_name_prefix="provision"
        ) as pool:
            try:
                while waiting or running:
                    if self._cancel.is_set():
                        raise ProvisioningCanceled("Provisioning canceled")
                    for resource in list(waiting):
                        if len(running) >= self._parallelism:
                            break
                        ready = self._schedulable(graph, resource)
                        if ready is None:
                            waiting.remove(resource)
                        elif ready:
                            waiting.remove(resource)
                            logger.info("Submitting %s", resource.identity)
                            running[pool.submit(self._run_node, resource)] = resource

                    if not running:
                        break

                    done, _ = wait(running, return_when=FIRST_COMPLETED)
                    for future in done:
                        resource = running.pop(future)
                        exc = future.exception()
                        if exc is None:
                            continue
                        if isinstance(exc, ProvisioningCanceled):
                            raise exc
                        self._transition(resource, NodeStatus.FAILED, error=str(exc))
                        self.cancel()
                        raise ProvisioningError(
                            identity=resource.identity,
                            kind=resource.kind,
                            message=str(exc),
                            report=self._report(graph),
                        ) from exc
            except KeyboardInterrupt as e:
                self.cancel()
                raise ProvisioningCanceled(
                    "Provisioning canceled", report=self._report(graph)
                ) from e
            except ProvisioningCanceled as e:
                self.cancel()
                e.report = self._report(graph)
                raise

"""Control plane backed by a Kubernetes cluster."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from unifi_provisioner.core.control_plane import ControlPlaneError
from unifi_provisioner.engine.handlers import HandlerContext

if TYPE_CHECKING:
    from unifi_provisioner.core.control_plane import ObservedStatus
    from unifi_provisioner.core.provider import KubernetesProvider
    from unifi_provisioner.engine.registry import HandlerRegistry
    from unifi_provisioner.resources.base import Resource

logger = logging.getLogger(__name__)


def _api_error(action: str, resource: Resource, exc: ApiException) -> ControlPlaneError:
    detail = f"{exc.status} {exc.reason}" if exc.status else str(exc)
    return ControlPlaneError(
        f"Kubernetes API refused to {action} {resource.identity}: {detail}",
        status=exc.status,
    )


def _connection_error(action: str, resource: Resource, exc: HTTPError) -> ControlPlaneError:
    return ControlPlaneError(
        f"Could not reach the Kubernetes API to {action} {resource.identity}: {exc}"
    )


class KubernetesControlPlane:
    """Dispatches submit/observe calls to the handler registered for each kind.

    API refusals and transport failures (connection refused, retries
    exhausted) both surface as ``ControlPlaneError``, so they fail the node
    concerned rather than the whole run.
    """

    def __init__(self, *, provider: KubernetesProvider, registry: HandlerRegistry) -> None:
        self._ctx = HandlerContext(provider=provider)
        self._registry = registry

    def submit(self, resource: Resource) -> None:
        handler = self._registry.handler_for(resource)
        logger.debug("Creating %s", resource.identity)
        try:
            handler.create(self._ctx, resource)
        except ApiException as exc:
            raise _api_error("create", resource, exc) from exc
        except HTTPError as exc:
            raise _connection_error("create", resource, exc) from exc

    def observe(self, resource: Resource) -> ObservedStatus:
        handler = self._registry.handler_for(resource)
        try:
            return handler.read(self._ctx, resource)
        except ApiException as exc:
            raise _api_error("read", resource, exc) from exc
        except HTTPError as exc:
            raise _connection_error("read", resource, exc) from exc

"""Kind -> handler dispatch for the Kubernetes control plane."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from unifi_provisioner.engine.errors import UnknownResourceKindError

if TYPE_CHECKING:
    from unifi_provisioner.engine.handlers import ResourceHandler
    from unifi_provisioner.resources.base import Resource


class HandlerRegistry:
    """Pairs each resource model with the handler that manages it in the cluster.

    Lookups go by the resource's ``kind``. A resource that is not an instance
    of the model registered for its kind is refused, so a handler only ever
    sees the shape it was written for.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[type[Resource], ResourceHandler[Any]]] = {}

    def register(self, model: type[Resource], handler: ResourceHandler[Any]) -> None:
        kind = getattr(model, "kind", None)
        if not isinstance(kind, str) or not kind:
            raise ValueError(f"{model.__name__} does not declare a resource kind")
        if kind in self._entries:
            raise ValueError(f"A handler is already registered for kind {kind}")
        self._entries[kind] = (model, handler)

    def handler_for(self, resource: Resource) -> ResourceHandler[Any]:
        """Return the handler for *resource*.

        Raises:
            UnknownResourceKindError: If nothing is registered for the kind, or
                the resource is not an instance of the registered model.
        """
        try:
            model, handler = self._entries[resource.kind]
        except KeyError as e:
            raise UnknownResourceKindError(resource.kind) from e
        if not isinstance(resource, model):
            raise UnknownResourceKindError(
                f"{resource.kind} ({type(resource).__name__} is not a {model.__name__})"
            )
        return handler

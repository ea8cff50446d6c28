"""Tests for kind -> handler dispatch."""

from __future__ import annotations

from typing import ClassVar

import pytest

from unifi_provisioner.engine.errors import UnknownResourceKindError
from unifi_provisioner.engine.handlers import ResourceHandler
from unifi_provisioner.engine.registry import HandlerRegistry
from unifi_provisioner.resources import NamespaceResource
from unifi_provisioner.resources.base import Resource


class WidgetResource(Resource):
    kind: ClassVar[str] = "Widget"


class ImpostorNamespace(Resource):
    kind: ClassVar[str] = "Namespace"


class WidgetHandler(ResourceHandler[WidgetResource]):
    pass


@pytest.fixture
def registry() -> HandlerRegistry:
    registry = HandlerRegistry()
    registry.register(WidgetResource, WidgetHandler())
    return registry


def test_handler_for_registered_kind(registry: HandlerRegistry) -> None:
    assert isinstance(registry.handler_for(WidgetResource(name="a")), WidgetHandler)


def test_one_handler_per_kind(registry: HandlerRegistry) -> None:
    with pytest.raises(ValueError, match="already registered for kind Widget"):
        registry.register(WidgetResource, WidgetHandler())


def test_model_must_declare_kind() -> None:
    with pytest.raises(ValueError, match="Resource does not declare a resource kind"):
        HandlerRegistry().register(Resource, WidgetHandler())


def test_unregistered_kind(registry: HandlerRegistry) -> None:
    with pytest.raises(UnknownResourceKindError, match="Namespace") as exc_info:
        registry.handler_for(NamespaceResource(name="unifi"))
    assert exc_info.value.kind == "Namespace"


def test_resource_must_match_registered_model() -> None:
    registry = HandlerRegistry()
    registry.register(NamespaceResource, ResourceHandler())
    with pytest.raises(UnknownResourceKindError, match="ImpostorNamespace is not a"):
        registry.handler_for(ImpostorNamespace(name="unifi"))

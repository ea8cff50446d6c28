"""Kubernetes handlers for every provisioned resource kind."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from kubernetes.client.exceptions import ApiException

from unifi_provisioner.core.control_plane import ObservedStatus
from unifi_provisioner.engine.handlers import ResourceHandler

if TYPE_CHECKING:
    from collections.abc import Callable

    from kubernetes.client import V1Job

    from unifi_provisioner.engine.handlers import HandlerContext
    from unifi_provisioner.resources.base import Resource
    from unifi_provisioner.resources.config_bundle import ConfigBundleResource
    from unifi_provisioner.resources.init_job import InitJobResource
    from unifi_provisioner.resources.namespace import NamespaceResource
    from unifi_provisioner.resources.secret import SecretResource
    from unifi_provisioner.resources.volume_claim import VolumeClaimResource
    from unifi_provisioner.resources.workload import WorkloadResource

logger = logging.getLogger(__name__)


def _create(resource: Resource, create: Callable[..., Any], **kwargs: Any) -> None:
    """Call a ``create_*`` API method, treating "already exists" as accepted."""
    try:
        create(**kwargs)
    except ApiException as exc:
        if exc.status != 409:
            raise
        logger.info("%s already exists, leaving it unchanged", resource.identity)


def _exists(read: Callable[..., Any], **kwargs: Any) -> bool:
    try:
        read(**kwargs)
    except ApiException as exc:
        if exc.status == 404:
            return False
        raise
    return True


def _presence(*found: bool) -> ObservedStatus:
    return ObservedStatus.PRESENT if all(found) else ObservedStatus.ABSENT


class NamespaceHandler(ResourceHandler["NamespaceResource"]):
    def create(self, ctx: HandlerContext, desired: NamespaceResource) -> None:
        _create(desired, ctx.provider.core.create_namespace, body=desired.manifest())

    def read(self, ctx: HandlerContext, desired: NamespaceResource) -> ObservedStatus:
        return _presence(_exists(ctx.provider.core.read_namespace, name=desired.name))


class SecretHandler(ResourceHandler["SecretResource"]):
    def create(self, ctx: HandlerContext, desired: SecretResource) -> None:
        _create(
            desired,
            ctx.provider.core.create_namespaced_secret,
            namespace=desired.namespace,
            body=desired.manifest(),
        )

    def read(self, ctx: HandlerContext, desired: SecretResource) -> ObservedStatus:
        found = _exists(
            ctx.provider.core.read_namespaced_secret,
            name=desired.name,
            namespace=desired.namespace,
        )
        return _presence(found)


class ConfigBundleHandler(ResourceHandler["ConfigBundleResource"]):
    def create(self, ctx: HandlerContext, desired: ConfigBundleResource) -> None:
        _create(
            desired,
            ctx.provider.core.create_namespaced_config_map,
            namespace=desired.namespace,
            body=desired.manifest(),
        )

    def read(self, ctx: HandlerContext, desired: ConfigBundleResource) -> ObservedStatus:
        found = _exists(
            ctx.provider.core.read_namespaced_config_map,
            name=desired.name,
            namespace=desired.namespace,
        )
        return _presence(found)


class VolumeClaimHandler(ResourceHandler["VolumeClaimResource"]):
    def create(self, ctx: HandlerContext, desired: VolumeClaimResource) -> None:
        _create(
            desired,
            ctx.provider.core.create_namespaced_persistent_volume_claim,
            namespace=desired.namespace,
            body=desired.manifest(),
        )

    def read(self, ctx: HandlerContext, desired: VolumeClaimResource) -> ObservedStatus:
        found = _exists(
            ctx.provider.core.read_namespaced_persistent_volume_claim,
            name=desired.name,
            namespace=desired.namespace,
        )
        return _presence(found)


def job_status(job: V1Job) -> ObservedStatus:
    """Map a Job's status block onto an observed status."""
    status = job.status
    if status is None:
        return ObservedStatus.PRESENT
    if status.succeeded:
        return ObservedStatus.SUCCEEDED
    conditions = {c.type: c.status for c in status.conditions or []}
    if conditions.get("Complete") == "True":
        return ObservedStatus.SUCCEEDED
    if conditions.get("Failed") == "True":
        return ObservedStatus.FAILED
    if status.active:
        return ObservedStatus.RUNNING
    return ObservedStatus.PRESENT


class InitJobHandler(ResourceHandler["InitJobResource"]):
    """Handler for the init job; reads back the job's completion status."""

    def create(self, ctx: HandlerContext, desired: InitJobResource) -> None:
        _create(
            desired,
            ctx.provider.batch.create_namespaced_job,
            namespace=desired.namespace,
            body=desired.manifest(),
        )

    def read(self, ctx: HandlerContext, desired: InitJobResource) -> ObservedStatus:
        try:
            job = ctx.provider.batch.read_namespaced_job_status(
                name=desired.name, namespace=desired.namespace
            )
        except ApiException as exc:
            if exc.status == 404:
                return ObservedStatus.ABSENT
            raise
        return job_status(job)


class WorkloadHandler(ResourceHandler["WorkloadResource"]):
    """Handler for the workload's Deployment and Service pair."""

    def create(self, ctx: HandlerContext, desired: WorkloadResource) -> None:
        _create(
            desired,
            ctx.provider.apps.create_namespaced_deployment,
            namespace=desired.namespace,
            body=desired.deployment_manifest(),
        )
        _create(
            desired,
            ctx.provider.core.create_namespaced_service,
            namespace=desired.namespace,
            body=desired.service_manifest(),
        )

    def read(self, ctx: HandlerContext, desired: WorkloadResource) -> ObservedStatus:
        deployment = _exists(
            ctx.provider.apps.read_namespaced_deployment,
            name=desired.name,
            namespace=desired.namespace,
        )
        service = _exists(
            ctx.provider.core.read_namespaced_service,
            name=desired.service_name,
            namespace=desired.namespace,
        )
        return _presence(deployment, service)

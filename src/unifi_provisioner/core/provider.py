"""Kubernetes Provider - Connection configuration for a cluster."""

from functools import cached_property
from pathlib import Path
from typing import Self

from kubernetes import client, config
from pydantic import BaseModel, ConfigDict


class KubernetesProvider(BaseModel):
    """Connection configuration for a Kubernetes cluster.

    For external use, point at a kubeconfig (or rely on the default
    ``~/.kube/config``). Inside a pod, set ``in_cluster=True``. For testing,
    use the `from_client` classmethod to inject a client.

    Examples:
        provider = KubernetesProvider(context="homelab")

        provider = KubernetesProvider.from_client(MagicMock())
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kubeconfig: Path | None = None
    context: str | None = None
    in_cluster: bool = False

    # Injected client (for testing)
    _injected_client: client.ApiClient | None = None

    @classmethod
    def from_client(cls, api_client: client.ApiClient) -> Self:
        """Create a provider with an injected API client."""
        provider = cls.model_construct()
        provider._injected_client = api_client
        return provider

    @cached_property
    def api_client(self) -> client.ApiClient:
        """Get the Kubernetes API client."""
        if self._injected_client is not None:
            return self._injected_client

        if self.in_cluster:
            config.load_incluster_config()
            return client.ApiClient()

        return config.new_client_from_config(
            config_file=str(self.kubeconfig) if self.kubeconfig else None,
            context=self.context,
        )

    # API groups used by the handlers
    @cached_property
    def core(self) -> client.CoreV1Api:
        return client.CoreV1Api(self.api_client)

    @cached_property
    def apps(self) -> client.AppsV1Api:
        return client.AppsV1Api(self.api_client)

    @cached_property
    def batch(self) -> client.BatchV1Api:
        return client.BatchV1Api(self.api_client)

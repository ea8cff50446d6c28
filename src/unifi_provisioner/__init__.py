"""Dependency-aware provisioning of the UniFi Network Application on Kubernetes."""

__version__ = "0.1.0"

"""Dependency graph utilities."""

from __future__ import annotations

import heapq
from typing import TYPE_CHECKING

from unifi_provisioner.engine.errors import (
    DanglingDependencyError,
    DependencyCycleError,
    DuplicateIdentityError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping, Sequence

    from unifi_provisioner.resources.base import Resource


class DependencyGraph:
    """A directed graph where nodes depend on other nodes.

    Node order is significant: it breaks ties in :meth:`topological_order`.
    Every dependency must name a node of the graph.
    """

    def __init__(
        self,
        nodes: Sequence[str],
        dependencies: Mapping[str, Iterable[str]],
    ) -> None:
        self._position: dict[str, int] = {}
        for node in nodes:
            if node in self._position:
                raise DuplicateIdentityError(node)
            self._position[node] = len(self._position)

        self._deps: dict[str, frozenset[str]] = {}
        for node in self._position:
            deps = frozenset(dependencies.get(node, ()))
            missing = sorted(deps - self._position.keys())
            if missing:
                raise DanglingDependencyError(node, missing)
            self._deps[node] = deps

    def dependencies(self, node: str) -> frozenset[str]:
        return self._deps[node]

    def dependents(self, node: str) -> list[str]:
        return [n for n, deps in self._deps.items() if node in deps]

    def topological_order(self) -> list[str]:
        """Return deterministic topo order (declaration order tie-break)."""
        indegree: dict[str, int] = {n: len(deps) for n, deps in self._deps.items()}
        ready: list[tuple[int, str]] = [
            (self._position[n], n) for n, deg in indegree.items() if deg == 0
        ]
        heapq.heapify(ready)

        order: list[str] = []
        while ready:
            _, node = heapq.heappop(ready)
            order.append(node)
            for child in self.dependents(node):
                indegree[child] -= 1
                if indegree[child] == 0:
                    heapq.heappush(ready, (self._position[child], child))

        if len(order) != len(self._position):
            done = set(order)
            remaining = [n for n in self._position if n not in done]
            raise DependencyCycleError(remaining)

        return order


class ResourceGraph:
    """Immutable set of resources plus the dependency edges between them.

    Construction validates the graph (unique identities, no dangling
    dependencies, no cycles), so a built graph is always safe to provision.
    """

    def __init__(
        self,
        resources: Sequence[Resource],
        *,
        outputs: Mapping[str, str] | None = None,
    ) -> None:
        self._graph = DependencyGraph(
            [r.identity for r in resources],
            {r.identity: r.depends_on for r in resources},
        )
        self._resources: dict[str, Resource] = {r.identity: r for r in resources}
        self._order = self._graph.topological_order()
        self._outputs = dict(outputs or {})

    def __getitem__(self, identity: str) -> Resource:
        return self._resources[identity]

    def __contains__(self, identity: object) -> bool:
        return identity in self._resources

    def __iter__(self) -> Iterator[Resource]:
        return iter(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)

    @property
    def outputs(self) -> dict[str, str]:
        return dict(self._outputs)

    def order(self) -> list[Resource]:
        """Resources in provisioning order."""
        return [self._resources[i] for i in self._order]

    def dependencies(self, identity: str) -> frozenset[str]:
        return self._graph.dependencies(identity)

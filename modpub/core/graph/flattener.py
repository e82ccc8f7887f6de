"""
Hierarchy flattener — the effective view of a configuration.

The hierarchy of C is C followed by its ancestors in a depth-first,
pre-order walk: parents in declared order, each configuration recorded
the first time it is seen. For the diamond

    d extends b, c;  b extends a;  c extends a

the hierarchy of ``d`` is ``d, b, a, c``.

A node revisited while still on the current walk path means the graph
has a cycle; the walk stops with CyclicInheritanceError instead of
looping.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Iterator, Sequence
from typing import TypeVar

from modpub.core.errors import ConfigurationGraphError, CyclicInheritanceError
from modpub.core.graph.configuration_graph import ConfigurationGraph
from modpub.core.models.configuration import EffectiveConfiguration

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


def _ordered_union(groups: Iterable[Sequence[T]]) -> tuple[T, ...]:
    """Concatenate sequences, dropping repeats, keeping first occurrence."""
    seen: dict[T, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return tuple(seen)


class HierarchyFlattener:
    """Computes EffectiveConfigurations over one configuration graph.

    Results are memoized per instance. The graph must not change while a
    flattener is in use; create a new flattener after adding
    configurations.
    """

    def __init__(self, graph: ConfigurationGraph, memoize: bool = True):
        self._graph = graph
        self._memoize = memoize
        self._cache: dict[str, EffectiveConfiguration] = {}

    @property
    def graph(self) -> ConfigurationGraph:
        return self._graph

    def hierarchy(self, name: str) -> tuple[str, ...]:
        """Ordered hierarchy of one configuration (itself first)."""
        order: list[str] = []
        visited: set[str] = set()
        on_path: set[str] = set()
        # (configuration, remaining parents) for each node on the walk path
        stack: list[tuple[str, Iterator[str]]] = []

        def enter(current: str) -> None:
            conf = self._graph.configuration(current)
            visited.add(current)
            order.append(current)
            on_path.add(current)
            stack.append((current, iter(conf.extends_from)))

        enter(name)
        while stack:
            current, parents = stack[-1]
            parent = next(parents, None)
            if parent is None:
                stack.pop()
                on_path.discard(current)
            elif parent in on_path:
                path = [n for n, _ in stack]
                raise CyclicInheritanceError(path[path.index(parent):] + [parent])
            elif parent not in visited:
                enter(parent)

        return tuple(order)

    def flatten(self, name: str) -> EffectiveConfiguration:
        """Compute the effective configuration for ``name``.

        Raises:
            UnknownConfigurationError: ``name`` or an ancestor is unknown.
            CyclicInheritanceError: ``name`` transitively extends itself.
        """
        if self._memoize and name in self._cache:
            return self._cache[name]

        hierarchy = self.hierarchy(name)
        confs = [self._graph.configuration(n) for n in hierarchy]
        effective = EffectiveConfiguration(
            name=name,
            hierarchy=hierarchy,
            artifacts=_ordered_union(c.artifacts for c in confs),
            dependencies=_ordered_union(c.dependencies for c in confs),
            excludes=_ordered_union(c.excludes for c in confs),
        )
        logger.debug("Flattened '%s' → %s", name, " → ".join(hierarchy))

        if self._memoize:
            self._cache[name] = effective
        return effective

    def hierarchy_of(self, names: Iterable[str]) -> tuple[str, ...]:
        """Ordered union of the hierarchies of several configurations.

        Flattening a flattened hierarchy reproduces it:
        ``hierarchy_of(flatten(x).hierarchy) == flatten(x).hierarchy``.
        """
        return _ordered_union(self.flatten(n).hierarchy for n in names)

    def check_all(self) -> list[ConfigurationGraphError]:
        """Flatten every configuration, collecting structural errors."""
        errors: list[ConfigurationGraphError] = []
        for name in self._graph.names():
            try:
                self.flatten(name)
            except ConfigurationGraphError as e:
                errors.append(e)
        return errors

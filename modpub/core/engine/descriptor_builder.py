"""
Descriptor builder — configurations → one immutable ModuleDescriptor.

Flow:
    requested names → flatten each → merge items, tagging each with the
    requested configurations that reach it → freeze

Requested names are treated as a set and processed in sorted order, so
the same graph and the same names always produce the same descriptor.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable
from typing import TypeVar

from modpub.core.errors import EmptyPublicationError
from modpub.core.graph.configuration_graph import ConfigurationGraph
from modpub.core.graph.flattener import HierarchyFlattener
from modpub.core.models.configuration import (
    ArtifactDescriptor,
    DependencyDescriptor,
    EffectiveConfiguration,
    ExcludeRule,
)
from modpub.core.models.descriptor import (
    AttributedDependency,
    ModuleDescriptor,
    PublishedConfiguration,
)
from modpub.core.models.identity import ModuleIdentity

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


def _attribute(target: dict[K, set[str]], items: Iterable[K], configuration: str) -> None:
    for item in items:
        target.setdefault(item, set()).add(configuration)


class DescriptorBuilder:
    """Builds module descriptors from a configuration graph."""

    def __init__(self, graph: ConfigurationGraph):
        self._graph = graph

    def build(
        self,
        module: ModuleIdentity,
        configuration_names: Iterable[str],
        *,
        status: str = "integration",
    ) -> ModuleDescriptor:
        """Build the descriptor for publishing ``configuration_names``.

        Args:
            module: Identity of the module being published.
            configuration_names: Configurations to publish (a set; order
                and repeats are ignored).
            status: Publication status recorded in the descriptor.

        Returns:
            A fully populated, immutable ModuleDescriptor.

        Raises:
            EmptyPublicationError: No configuration names were given.
            UnknownConfigurationError: A name (or an ancestor) is unknown.
            CyclicInheritanceError: A requested hierarchy has a cycle.
        """
        requested = sorted(set(configuration_names))
        if not requested:
            raise EmptyPublicationError()

        # Flatten everything before merging; any structural error aborts
        # the build without a partial descriptor.
        flattener = HierarchyFlattener(self._graph)
        effective: list[EffectiveConfiguration] = [flattener.flatten(n) for n in requested]

        configurations: dict[str, PublishedConfiguration] = {}
        artifacts: dict[ArtifactDescriptor, set[str]] = {}
        dependencies: dict[DependencyDescriptor, set[str]] = {}
        excludes: dict[ExcludeRule, set[str]] = {}

        for eff in effective:
            conf = self._graph.configuration(eff.name)
            configurations[eff.name] = PublishedConfiguration(
                name=conf.name,
                extends_from=frozenset(conf.extends_from),
                description=conf.description,
                visible=conf.visible,
                transitive=conf.transitive,
            )
            _attribute(artifacts, eff.artifacts, eff.name)
            _attribute(dependencies, eff.dependencies, eff.name)
            _attribute(excludes, eff.excludes, eff.name)

        descriptor = ModuleDescriptor(
            module=module,
            configurations=configurations,
            artifacts={a: frozenset(c) for a, c in artifacts.items()},
            dependencies=tuple(
                AttributedDependency(dependency=d, configurations=frozenset(c))
                for d, c in dependencies.items()
            ),
            excludes={r: frozenset(c) for r, c in excludes.items()},
            status=status,
        )

        logger.info(
            "Built descriptor for %s: %d configurations, %d artifacts, %d dependencies",
            module,
            len(configurations),
            len(descriptor.artifacts),
            len(descriptor.dependencies),
        )
        return descriptor

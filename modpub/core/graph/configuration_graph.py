"""
Configuration graph — named configurations and their "extends" DAG.

The graph is append-only for the lifetime of one descriptor build.
add_configuration() requires parents to be declared before children,
which rules out cycles by construction. from_configurations() accepts a
whole snapshot at once (forward references allowed) and leaves cycle
detection to the flattener.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from modpub.core.errors import (
    ConfigurationGraphError,
    DuplicateConfigurationError,
    UnknownConfigurationError,
    UnknownParentError,
)
from modpub.core.models.configuration import (
    ArtifactDescriptor,
    Configuration,
    DependencyDescriptor,
    ExcludeRule,
)

logger = logging.getLogger(__name__)


def _bind_dependencies(configuration: Configuration) -> Configuration:
    """Set each dependency's source configuration to the declaring one."""
    bound: list[DependencyDescriptor] = []
    for dep in configuration.dependencies:
        if dep.source_configuration is None:
            dep = dep.model_copy(update={"source_configuration": configuration.name})
        elif dep.source_configuration != configuration.name:
            raise ConfigurationGraphError(
                f"Dependency {dep.module} is declared on configuration "
                f"'{configuration.name}' but names source configuration "
                f"'{dep.source_configuration}'"
            )
        bound.append(dep)
    return configuration.model_copy(update={"dependencies": tuple(bound)})


class ConfigurationGraph:
    """Holds configuration nodes and validates structural integrity."""

    def __init__(self) -> None:
        self._configurations: dict[str, Configuration] = {}

    @classmethod
    def from_configurations(cls, configurations: Iterable[Configuration]) -> ConfigurationGraph:
        """Build a graph from a complete snapshot.

        Parents may be declared after their children. Duplicate names and
        parents missing from the whole snapshot are still rejected.
        """
        graph = cls()
        batch = list(configurations)
        for conf in batch:
            if conf.name in graph._configurations:
                raise DuplicateConfigurationError(conf.name)
            graph._configurations[conf.name] = _bind_dependencies(conf)
        for conf in batch:
            for parent in conf.extends_from:
                if parent not in graph._configurations:
                    raise UnknownParentError(conf.name, parent)
        logger.debug("Loaded %d configurations into graph", len(batch))
        return graph

    def add(self, configuration: Configuration) -> Configuration:
        """Add a pre-built configuration node.

        Raises:
            DuplicateConfigurationError: The name is already taken.
            UnknownParentError: A parent has not been added yet.
        """
        if configuration.name in self._configurations:
            raise DuplicateConfigurationError(configuration.name)
        for parent in configuration.extends_from:
            if parent not in self._configurations:
                raise UnknownParentError(configuration.name, parent)
        configuration = _bind_dependencies(configuration)
        self._configurations[configuration.name] = configuration
        logger.debug(
            "Added configuration '%s' (extends: %s)",
            configuration.name,
            ", ".join(configuration.extends_from) or "-",
        )
        return configuration

    def add_configuration(
        self,
        name: str,
        extends_from: Iterable[str] = (),
        artifacts: Iterable[ArtifactDescriptor] = (),
        dependencies: Iterable[DependencyDescriptor] = (),
        excludes: Iterable[ExcludeRule] = (),
        *,
        description: str = "",
        visible: bool = True,
        transitive: bool = True,
    ) -> Configuration:
        """Declare a configuration. Parents must already exist."""
        return self.add(
            Configuration(
                name=name,
                extends_from=tuple(extends_from),
                artifacts=tuple(artifacts),
                dependencies=tuple(dependencies),
                excludes=tuple(excludes),
                description=description,
                visible=visible,
                transitive=transitive,
            )
        )

    def configuration(self, name: str) -> Configuration:
        """Look up a configuration by name.

        Raises:
            UnknownConfigurationError: No configuration has this name.
        """
        try:
            return self._configurations[name]
        except KeyError:
            raise UnknownConfigurationError(name) from None

    def names(self) -> list[str]:
        """All configuration names, in declaration order."""
        return list(self._configurations)

    def all(self) -> list[Configuration]:
        """Every configuration of the module (not a hierarchy)."""
        return list(self._configurations.values())

    def __contains__(self, name: object) -> bool:
        return name in self._configurations

    def __iter__(self) -> Iterator[Configuration]:
        return iter(list(self._configurations.values()))

    def __len__(self) -> int:
        return len(self._configurations)

    def __repr__(self) -> str:
        return f"<ConfigurationGraph configurations={self.names()!r}>"

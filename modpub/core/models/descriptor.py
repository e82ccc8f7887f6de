"""
Module descriptor — the immutable, publish-ready metadata document.

Built once per publish call by the DescriptorBuilder, never mutated
afterwards. Mappings are exposed as read-only proxies so the descriptor
can be handed to several publication targets at once.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict

from modpub.core.models.configuration import (
    ArtifactDescriptor,
    DependencyDescriptor,
    ExcludeRule,
)
from modpub.core.models.identity import ModuleIdentity


class PublishedConfiguration(BaseModel):
    """A requested configuration as documented in the descriptor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    extends_from: frozenset[str] = frozenset()
    description: str = ""
    visible: bool = True
    transitive: bool = True


class AttributedDependency(BaseModel):
    """A dependency tagged with the requested configurations that pulled it in."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    dependency: DependencyDescriptor
    configurations: frozenset[str]


@dataclass(frozen=True)
class ModuleDescriptor:
    """Immutable description of one module publication.

    Attributes:
        module: The module being published.
        configurations: Requested configuration name → its documentation,
            including the names it extends.
        artifacts: Artifact → requested configurations it is visible under.
            An artifact inherited by two requested configurations is
            recorded once with both names.
        dependencies: Dependencies in first-seen order, each tagged with
            the requested configurations that pulled it in.
        excludes: Exclude rule → requested configurations it applies to.
        status: Publication status (integration, milestone, release).
    """

    module: ModuleIdentity
    configurations: Mapping[str, PublishedConfiguration] = field(
        default_factory=lambda: MappingProxyType({})
    )
    artifacts: Mapping[ArtifactDescriptor, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    dependencies: tuple[AttributedDependency, ...] = ()
    excludes: Mapping[ExcludeRule, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    status: str = "integration"

    def __post_init__(self) -> None:
        # Freeze whatever mappings the caller handed in.
        for name in ("configurations", "artifacts", "excludes"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    @property
    def published_configurations(self) -> dict[str, frozenset[str]]:
        """Requested configuration name → the names it extends."""
        return {name: conf.extends_from for name, conf in self.configurations.items()}

    def artifacts_for(self, configuration: str) -> list[ArtifactDescriptor]:
        """Artifacts visible under one requested configuration."""
        return [a for a, confs in self.artifacts.items() if configuration in confs]

    def dependencies_for(self, configuration: str) -> list[DependencyDescriptor]:
        """Dependencies pulled in by one requested configuration."""
        return [d.dependency for d in self.dependencies if configuration in d.configurations]

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible document, used by the descriptor codecs."""
        return {
            "module": {
                "group": self.module.group,
                "name": self.module.name,
                "version": self.module.version,
            },
            "status": self.status,
            "configurations": [
                {
                    "name": conf.name,
                    "extends": sorted(conf.extends_from),
                    "description": conf.description,
                    "visible": conf.visible,
                    "transitive": conf.transitive,
                }
                for conf in self.configurations.values()
            ],
            "artifacts": [
                {
                    "name": artifact.name,
                    "type": artifact.type,
                    "extension": artifact.extension,
                    "classifier": artifact.classifier,
                    "file": artifact.file,
                    "configurations": sorted(confs),
                }
                for artifact, confs in self.artifacts.items()
            ],
            "dependencies": [
                {
                    "group": item.dependency.module.group,
                    "name": item.dependency.module.name,
                    "version": item.dependency.module.version,
                    "conf": item.dependency.conf_mapping,
                    "transitive": item.dependency.transitive,
                    "force": item.dependency.force,
                    "changing": item.dependency.changing,
                    "excludes": [
                        {"group": rule.group, "module": rule.module}
                        for rule in item.dependency.excludes
                    ],
                    "configurations": sorted(item.configurations),
                }
                for item in self.dependencies
            ],
            "excludes": [
                {
                    "group": rule.group,
                    "module": rule.module,
                    "configurations": sorted(confs),
                }
                for rule, confs in self.excludes.items()
            ],
        }

"""
Describe use cases — flatten one configuration or build the descriptor
without publishing anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from modpub.core.config.loader import (
    PROJECT_CONFIG_FILE,
    build_graph,
    find_project_file,
    load_project,
)
from modpub.core.engine.descriptor_builder import DescriptorBuilder
from modpub.core.errors import ModpubError
from modpub.core.graph.flattener import HierarchyFlattener
from modpub.core.models.configuration import EffectiveConfiguration
from modpub.core.models.descriptor import ModuleDescriptor
from modpub.core.models.project import Project

logger = logging.getLogger(__name__)


@dataclass
class HierarchyResult:
    """A flattened configuration."""

    effective: EffectiveConfiguration | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        assert self.effective is not None
        return {
            "name": self.effective.name,
            "hierarchy": list(self.effective.hierarchy),
            "artifacts": [str(a) for a in self.effective.artifacts],
            "dependencies": [str(d) for d in self.effective.dependencies],
            "excludes": [str(e) for e in self.effective.excludes],
        }


@dataclass
class DescribeResult:
    """A descriptor built from the current configuration."""

    project: Project | None = None
    descriptor: ModuleDescriptor | None = None
    configurations: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        assert self.descriptor is not None
        return self.descriptor.to_dict()


def describe_hierarchy(name: str, config_path: Path | None = None) -> HierarchyResult:
    """Flatten one configuration of the project."""
    result = HierarchyResult()

    if config_path is None:
        config_path = find_project_file()
    if config_path is None:
        result.error = f"No {PROJECT_CONFIG_FILE} found."
        return result

    try:
        graph = build_graph(load_project(config_path))
        result.effective = HierarchyFlattener(graph).flatten(name)
    except ModpubError as e:
        result.error = str(e)

    return result


def describe_module(
    configurations: list[str] | None = None,
    config_path: Path | None = None,
) -> DescribeResult:
    """Build the descriptor for the given (or configured) configurations.

    Args:
        configurations: Configuration names to publish. None or empty
            means ``publish.configurations`` from modpub.yml.
        config_path: Optional explicit path to modpub.yml.
    """
    result = DescribeResult()

    if config_path is None:
        config_path = find_project_file()
    if config_path is None:
        result.error = f"No {PROJECT_CONFIG_FILE} found."
        return result

    try:
        project = load_project(config_path)
        result.project = project
        names = list(configurations) if configurations else list(project.publish.configurations)
        result.configurations = sorted(set(names))
        result.descriptor = DescriptorBuilder(build_graph(project)).build(
            project.module,
            names,
            status=project.publish.status,
        )
    except ModpubError as e:
        result.error = str(e)

    return result

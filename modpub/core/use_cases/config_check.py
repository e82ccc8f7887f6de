"""
Config check use case — validate modpub.yml and report issues.

Beyond schema validation this builds the configuration graph and
flattens every configuration, so cycles and dangling parents are
reported before anything is published.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from modpub.core.config.loader import (
    PROJECT_CONFIG_FILE,
    ConfigError,
    build_graph,
    find_project_file,
    load_project,
)
from modpub.core.errors import ConfigurationGraphError
from modpub.core.graph.flattener import HierarchyFlattener
from modpub.core.models.project import Project


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    project: Project | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "module": str(self.project.module) if self.project else None,
            "configuration_count": len(self.project.configurations) if self.project else 0,
            "target_count": len(self.project.targets) if self.project else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate publish configuration and report issues.

    Args:
        config_path: Optional explicit path to modpub.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_project_file()
    if config_path is None:
        result.errors.append(f"No {PROJECT_CONFIG_FILE} found.")
        return result
    result.config_path = config_path

    # Load and validate
    try:
        project = load_project(config_path)
        result.project = project
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Graph structure
    try:
        graph = build_graph(project)
    except ConfigurationGraphError as e:
        result.errors.append(str(e))
        return result

    for error in HierarchyFlattener(graph).check_all():
        result.errors.append(str(error))

    # Publish section
    requested = project.publish.configurations
    if not requested:
        result.warnings.append(
            "No configurations listed under publish.configurations; "
            "pass them with -C when publishing."
        )
    for name in requested:
        if name not in graph:
            result.errors.append(f"publish.configurations names unknown configuration '{name}'")
        elif not graph.configuration(name).visible:
            result.warnings.append(f"Publishing non-visible configuration '{name}'")

    # Targets
    if not project.targets:
        result.warnings.append("No targets defined. Nothing can be published.")

    target_names = [t.name for t in project.targets]
    dupes = {n for n in target_names if target_names.count(n) > 1}
    if dupes:
        result.errors.append(f"Duplicate target names: {', '.join(sorted(dupes))}")

    for spec in project.targets:
        if spec.type == "filesystem" and not spec.path:
            result.errors.append(f"Target '{spec.name}' of type 'filesystem' needs a 'path'")

    # Artifact files (relative to the artifacts directory)
    artifacts_dir = config_path.parent / project.publish.artifacts_dir
    for conf in project.configurations:
        for artifact in conf.artifacts:
            if not (artifacts_dir / artifact.file).is_file():
                result.warnings.append(
                    f"Artifact '{artifact}' of configuration '{conf.name}' "
                    f"does not exist yet: {artifact.file}"
                )

    result.valid = len(result.errors) == 0
    return result

"""
Configuration loader — reads modpub.yml into domain models.

This is the configuration source that populates the configuration
graph. It reads YAML, normalizes the short-hand notations, validates
against Pydantic schemas, and returns typed domain objects.

Short-hands accepted in modpub.yml:

    configurations:
      - name: runtime
        extends: [compile]                # or a single name
        artifacts:
          - build/libs/native.so          # file reference only
        dependencies:
          - org.slf4j:slf4j-api:2.0.9     # group:name:version
          - module: org.acme:core:1.2
            conf: [default, sources]      # or "default"
            exclude: [{group: commons-logging}]
        excludes:
          - log4j:log4j                   # group:module
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from modpub.core.errors import ModpubError
from modpub.core.graph.configuration_graph import ConfigurationGraph
from modpub.core.models.identity import ModuleIdentity
from modpub.core.models.project import Project

logger = logging.getLogger(__name__)

# Default config filename
PROJECT_CONFIG_FILE = "modpub.yml"


class ConfigError(ModpubError):
    """Raised when publish configuration is invalid or missing."""


def find_project_file(start_dir: Path | None = None) -> Path | None:
    """Search for modpub.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to modpub.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / PROJECT_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _normalize_exclude(raw: Any) -> Any:
    if isinstance(raw, str):
        group, _, module = raw.partition(":")
        return {"group": group or None, "module": module or None}
    return raw


def _normalize_dependency(raw: Any) -> Any:
    if isinstance(raw, str):
        return {"module": raw}
    if not isinstance(raw, dict):
        return raw
    dep = dict(raw)
    if "conf" in dep:
        dep["target_configurations"] = _as_list(dep.pop("conf"))
    if "exclude" in dep:
        dep["excludes"] = [_normalize_exclude(e) for e in _as_list(dep.pop("exclude"))]
    return dep


def _normalize_configuration(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    conf = dict(raw)
    if "extends" in conf:
        conf["extends_from"] = _as_list(conf.pop("extends"))
    conf["artifacts"] = [
        {"file": a} if isinstance(a, str) else a for a in _as_list(conf.get("artifacts"))
    ]
    conf["dependencies"] = [_normalize_dependency(d) for d in _as_list(conf.get("dependencies"))]
    conf["excludes"] = [_normalize_exclude(e) for e in _as_list(conf.get("excludes"))]
    return conf


def parse_project(data: dict[str, Any]) -> Project:
    """Validate an already-parsed configuration mapping.

    Raises:
        ConfigError: The mapping does not match the schema.
    """
    data = dict(data)

    module = data.get("module")
    if isinstance(module, str):
        try:
            data["module"] = ModuleIdentity.parse(module)
        except ValueError as e:
            raise ConfigError(f"Invalid publish configuration: {e}") from e

    data["configurations"] = [
        _normalize_configuration(c) for c in _as_list(data.get("configurations"))
    ]

    try:
        return Project.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid publish configuration: {e}") from e


def load_project(path: Path | None = None) -> Project:
    """Load and validate publish configuration.

    Args:
        path: Explicit path to modpub.yml. If None, searches upward.

    Returns:
        Validated Project model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_project_file()

    if path is None:
        raise ConfigError(f"No {PROJECT_CONFIG_FILE} found. Specify one with --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading publish config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    project = parse_project(data)
    logger.info(
        "Loaded module %s with %d configurations and %d targets",
        project.module,
        len(project.configurations),
        len(project.targets),
    )
    return project


def build_graph(project: Project) -> ConfigurationGraph:
    """Populate a configuration graph from the loaded configuration.

    Configurations may be declared in any order in the file.

    Raises:
        ConfigurationGraphError: Duplicate names or unknown parents.
    """
    graph = ConfigurationGraph.from_configurations(project.configurations)
    logger.debug("Configuration graph: %s", ", ".join(graph.names()) or "(empty)")
    return graph


def project_root(config_path: Path) -> Path:
    """Get the project root directory from a config file path."""
    return config_path.parent.resolve()

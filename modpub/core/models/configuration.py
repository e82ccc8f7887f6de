"""
Configuration models — named, inheritable bundles of artifacts and dependencies.

Every model here is frozen and hashable by value. Artifact and dependency
identity is structural: two descriptors with the same fields are the same
item, which is what lets the flattener take unions across a hierarchy.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modpub.core.models.identity import ModuleIdentity

_FROZEN = ConfigDict(frozen=True, extra="forbid")


class ArtifactDescriptor(BaseModel):
    """A file published by a configuration.

    ``name``, ``extension`` and ``type`` default from the file reference:
    ``build/libs/lib.jar`` becomes name ``lib``, extension ``jar``,
    type ``jar``.
    """

    model_config = _FROZEN

    file: str
    name: str = ""
    classifier: str | None = None
    extension: str = ""
    type: str = ""

    @model_validator(mode="before")
    @classmethod
    def _derive_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not data.get("file"):
            return data
        data = dict(data)
        path = PurePosixPath(str(data["file"]))
        if not data.get("name"):
            data["name"] = path.stem
        if not data.get("extension"):
            data["extension"] = path.suffix.lstrip(".")
        if not data.get("type"):
            data["type"] = data["extension"]
        return data

    @field_validator("file", "name", "extension", "type")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @property
    def file_name(self) -> str:
        """Base name of the referenced file."""
        return PurePosixPath(self.file).name

    def __str__(self) -> str:
        classifier = f"-{self.classifier}" if self.classifier else ""
        return f"{self.name}{classifier}.{self.extension}"


class ExcludeRule(BaseModel):
    """Exclude transitive dependencies by group and/or module name."""

    model_config = _FROZEN

    group: str | None = None
    module: str | None = None

    @model_validator(mode="after")
    def _requires_one(self) -> ExcludeRule:
        if not self.group and not self.module:
            raise ValueError("exclude rule needs a group or a module")
        return self

    def matches(self, identity: ModuleIdentity) -> bool:
        """Whether the rule excludes the given module."""
        if self.group and self.group != identity.group:
            return False
        if self.module and self.module != identity.name:
            return False
        return True

    def __str__(self) -> str:
        return f"{self.group or '*'}:{self.module or '*'}"


class DependencyDescriptor(BaseModel):
    """A dependency declared by a configuration on another module.

    ``source_configuration`` is the declaring configuration; the graph
    binds it when the configuration is added. ``target_configurations``
    names the configurations of the target module that are pulled in.
    """

    model_config = _FROZEN

    module: ModuleIdentity
    source_configuration: str | None = None
    target_configurations: tuple[str, ...] = ("default",)
    excludes: tuple[ExcludeRule, ...] = ()
    transitive: bool = True
    force: bool = False
    changing: bool = False

    @field_validator("module", mode="before")
    @classmethod
    def _parse_notation(cls, value: Any) -> Any:
        if isinstance(value, str):
            return ModuleIdentity.parse(value)
        return value

    @field_validator("target_configurations")
    @classmethod
    def _has_targets(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one target configuration is required")
        return value

    @property
    def conf_mapping(self) -> str:
        """Configuration mapping, e.g. ``runtime->default,sources``."""
        source = self.source_configuration or "*"
        return f"{source}->{','.join(self.target_configurations)}"

    def __str__(self) -> str:
        return f"{self.module} ({self.conf_mapping})"


class Configuration(BaseModel):
    """A named node in the configuration graph.

    ``artifacts``, ``dependencies`` and ``excludes`` are the ones declared
    directly on this configuration; inherited items are only visible
    through the flattened EffectiveConfiguration.
    """

    model_config = _FROZEN

    name: str
    extends_from: tuple[str, ...] = ()
    artifacts: tuple[ArtifactDescriptor, ...] = ()
    dependencies: tuple[DependencyDescriptor, ...] = ()
    excludes: tuple[ExcludeRule, ...] = ()
    description: str = ""
    visible: bool = True
    transitive: bool = True

    @field_validator("name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("configuration name must be a non-empty string")
        return value

    @field_validator("extends_from")
    @classmethod
    def _dedupe_parents(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(value))


class EffectiveConfiguration(BaseModel):
    """Flattened view of a configuration: itself plus all its ancestors.

    ``hierarchy`` starts with the configuration itself; items are unions
    over the hierarchy in hierarchy order, first occurrence kept.
    """

    model_config = _FROZEN

    name: str
    hierarchy: tuple[str, ...]
    artifacts: tuple[ArtifactDescriptor, ...] = ()
    dependencies: tuple[DependencyDescriptor, ...] = ()
    excludes: tuple[ExcludeRule, ...] = ()

    @property
    def ancestors(self) -> tuple[str, ...]:
        """The hierarchy without the configuration itself."""
        return self.hierarchy[1:]

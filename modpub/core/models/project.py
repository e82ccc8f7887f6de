"""
Project model — the publish configuration loaded from modpub.yml.

This is the configuration source: module identity, declared
configurations, what to publish and where. Unknown keys are rejected
so a typo never silently changes what gets published.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modpub.core.models.configuration import Configuration
from modpub.core.models.identity import ModuleIdentity

_STRICT = ConfigDict(extra="forbid")


class TargetSpec(BaseModel):
    """A publication target declared in modpub.yml."""

    model_config = _STRICT

    name: str
    type: Literal["filesystem", "mock"] = "filesystem"
    path: str | None = None
    layout: str | None = None
    m2compatible: bool = False
    overwrite: bool = True
    checksums: bool = True
    workers: int = Field(default=1, ge=1)
    fail: bool = False  # mock only

    @field_validator("name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("target name must be a non-empty string")
        return value


class PublishSettings(BaseModel):
    """The ``publish:`` section."""

    model_config = _STRICT

    configurations: list[str] = Field(default_factory=list)
    descriptor: str = "build/publications/descriptor.json"
    format: Literal["json", "yaml"] = "json"
    status: str = "integration"
    artifacts_dir: str = "."


class Project(BaseModel):
    """Root publish configuration — loaded from modpub.yml."""

    model_config = _STRICT

    version: int = 1

    module: ModuleIdentity
    configurations: list[Configuration] = Field(default_factory=list)
    publish: PublishSettings = Field(default_factory=PublishSettings)
    targets: list[TargetSpec] = Field(default_factory=list)

    def get_target(self, name: str) -> TargetSpec | None:
        """Look up a target declaration by name."""
        for target in self.targets:
            if target.name == name:
                return target
        return None

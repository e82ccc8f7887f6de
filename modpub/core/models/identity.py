"""
Module identity — the (group, name, version) coordinate of a module.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class ModuleIdentity(BaseModel):
    """Immutable module coordinate.

    Used both for the module being published and for the target
    module of a dependency. Never mutated after creation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    group: str
    name: str
    version: str

    @field_validator("group", "name", "version")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @classmethod
    def parse(cls, notation: str) -> ModuleIdentity:
        """Parse ``group:name:version`` notation."""
        parts = notation.split(":")
        if len(parts) != 3:
            raise ValueError(
                f"Invalid module notation '{notation}', expected group:name:version"
            )
        group, name, version = parts
        return cls(group=group, name=name, version=version)

    def __str__(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"

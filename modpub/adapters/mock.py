"""
Mock target — universal test double for publication.

Used in mock mode to simulate publishing without touching a
repository. Succeeds by default; can be configured to fail or to
raise.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from modpub.adapters.base import PublicationTarget
from modpub.core.models.configuration import ArtifactDescriptor
from modpub.core.models.descriptor import ModuleDescriptor
from modpub.core.models.outcome import TargetReceipt


@dataclass(frozen=True)
class PublishCall:
    """One recorded call to MockTarget.publish()."""

    descriptor: ModuleDescriptor
    artifact_files: Mapping[ArtifactDescriptor, Path]
    descriptor_location: Path


class MockTarget(PublicationTarget):
    """Universal mock target for testing."""

    def __init__(
        self,
        target_name: str = "mock",
        available: bool = True,
        fail: bool = False,
        error: str = "Mock failure",
        raises: BaseException | None = None,
    ):
        self._name = target_name
        self._available = available
        self._fail = fail
        self._error = error
        self._raises = raises
        self._call_log: list[PublishCall] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[PublishCall]:
        """All publish calls this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        """Number of times publish has been called."""
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, error: str = "Mock failure") -> None:
        """Make subsequent publishes fail with ``error``."""
        self._fail = True
        self._error = error

    def set_raises(self, exc: BaseException) -> None:
        """Make subsequent publishes raise ``exc``."""
        self._raises = exc

    def publish(
        self,
        descriptor: ModuleDescriptor,
        artifact_files: Mapping[ArtifactDescriptor, Path],
        descriptor_location: Path,
    ) -> TargetReceipt:
        self._call_log.append(PublishCall(descriptor, artifact_files, descriptor_location))

        if self._raises is not None:
            raise self._raises

        if self._fail:
            return TargetReceipt.failure(target=self._name, error=self._error)

        return TargetReceipt.success(
            target=self._name,
            output=f"[mock] published {descriptor.module} to {self._name}",
            metadata={"mock": True, "artifacts": len(artifact_files)},
        )

    def reset(self) -> None:
        """Clear call log and configured failures."""
        self._call_log.clear()
        self._fail = False
        self._raises = None

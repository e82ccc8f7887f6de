"""
Publication target base — the contract between the coordinator and repositories.

The coordinator only talks to repositories through this interface.
Each target decides its own protocol (filesystem copy, HTTP PUT, ...)
and owns its own connection or session.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from modpub.core.models.configuration import ArtifactDescriptor
from modpub.core.models.descriptor import ModuleDescriptor
from modpub.core.models.outcome import TargetReceipt


class PublicationTarget(ABC):
    """Abstract base class for all publication targets.

    Targets perform the actual upload and return receipts. They should
    not raise: failures belong in the TargetReceipt. The coordinator
    still wraps anything raised into a PublishError.

    To create a new target:
        1. Subclass PublicationTarget
        2. Implement name, is_available, validate, publish
        3. Register it in the TargetRegistry
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The target identifier (e.g., 'local', 'release')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying repository is reachable.

        Should be fast and never raise.
        """

    def validate(
        self,
        descriptor: ModuleDescriptor,
        artifact_files: Mapping[ArtifactDescriptor, Path],
        descriptor_location: Path | None = None,
    ) -> tuple[bool, str]:
        """Validate that the publication can be accepted.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """
        return True, ""

    @abstractmethod
    def publish(
        self,
        descriptor: ModuleDescriptor,
        artifact_files: Mapping[ArtifactDescriptor, Path],
        descriptor_location: Path,
    ) -> TargetReceipt:
        """Publish the descriptor file and artifacts; return a receipt.

        SHOULD never raise. All failures are captured in the receipt
        with status='failed'.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"

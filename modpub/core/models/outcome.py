"""
Publication results — per-target receipts and the overall outcome.

Targets return TargetReceipts; the coordinator folds them into one
PublishOutcome. The outcome always tells the caller how far the publish
got: fully succeeded, partially succeeded up to some target, or failed
before any target was attempted.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

from modpub.core.errors import DescriptorWriteError, PublishError
from modpub.core.models.configuration import ArtifactDescriptor
from modpub.core.models.descriptor import ModuleDescriptor

if TYPE_CHECKING:
    from modpub.adapters.base import PublicationTarget


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class TargetReceipt(BaseModel):
    """Result of publishing to one target.

    Targets report failures here instead of raising.
    """

    target: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the target acknowledged the publish."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the target failed."""
        return self.status == "failed"

    @classmethod
    def success(cls, target: str, output: str = "", **kwargs: Any) -> TargetReceipt:
        """Create a success receipt."""
        return cls(target=target, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, target: str, error: str, **kwargs: Any) -> TargetReceipt:
        """Create a failure receipt."""
        return cls(target=target, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, target: str, reason: str = "", **kwargs: Any) -> TargetReceipt:
        """Create a skip receipt."""
        return cls(target=target, status="skipped", output=reason, **kwargs)


@dataclass(frozen=True)
class PublishRequest:
    """One publish invocation's unit of work. Not retained after completion."""

    descriptor: ModuleDescriptor
    artifact_files: Mapping[ArtifactDescriptor, Path]
    targets: Sequence[PublicationTarget]
    descriptor_destination: Path


@dataclass
class PublishOutcome:
    """What happened during one publish call.

    ``succeeded_targets`` holds the target objects in the order they
    acknowledged, so a caller can retry with ``remaining_targets``.
    """

    succeeded_targets: list[PublicationTarget] = field(default_factory=list)
    failed_target: PublicationTarget | None = None
    cause: PublishError | DescriptorWriteError | None = None
    skipped_targets: list[PublicationTarget] = field(default_factory=list)
    receipts: list[TargetReceipt] = field(default_factory=list)
    descriptor_written: bool = False
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        """Every target acknowledged the publish."""
        return self.cause is None and not self.cancelled

    @property
    def remaining_targets(self) -> list[PublicationTarget]:
        """Targets that did not acknowledge: the failed one, then skipped ones."""
        remaining = [self.failed_target] if self.failed_target is not None else []
        return remaining + list(self.skipped_targets)

    @property
    def status(self) -> str:
        if not self.descriptor_written:
            return "not_attempted"
        if self.ok:
            return "ok"
        if self.succeeded_targets:
            return "partial"
        if self.cancelled:
            return "cancelled"
        return "failed"

    def raise_for_status(self) -> None:
        """Re-raise the failure cause, if any."""
        if self.cause is not None:
            raise self.cause

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "descriptor_written": self.descriptor_written,
            "cancelled": self.cancelled,
            "succeeded_targets": [t.name for t in self.succeeded_targets],
            "failed_target": self.failed_target.name if self.failed_target else None,
            "skipped_targets": [t.name for t in self.skipped_targets],
            "error": str(self.cause) if self.cause else None,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }

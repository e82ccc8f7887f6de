"""
Publication coordinator — the publish fan-out loop.

Flow:
    write descriptor → for each target, in order: publish → stop at first failure

Target order is meaningful (e.g. a local install before a remote
release). Targets run one after another and the first failure stops the
run. Nothing is retried or rolled back; the outcome tells the caller
which targets still need the publish.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from modpub.adapters.base import PublicationTarget
from modpub.core.codec.descriptor_codec import DescriptorCodec
from modpub.core.errors import DescriptorWriteError, PublishError
from modpub.core.models.configuration import ArtifactDescriptor
from modpub.core.models.descriptor import ModuleDescriptor
from modpub.core.models.outcome import PublishOutcome, PublishRequest, TargetReceipt

logger = logging.getLogger(__name__)


class PublicationCoordinator:
    """Publishes a descriptor and its artifacts to an ordered list of targets.

    Args:
        codec: Writes the descriptor before any target is touched.
    """

    def __init__(self, codec: DescriptorCodec):
        self._codec = codec

    def publish(
        self,
        descriptor: ModuleDescriptor,
        artifact_files: Mapping[ArtifactDescriptor, Path],
        targets: Sequence[PublicationTarget],
        descriptor_destination: Path,
        *,
        cancel_event: threading.Event | None = None,
    ) -> PublishOutcome:
        """Write the descriptor, then publish to each target in order.

        Args:
            descriptor: The descriptor to publish.
            artifact_files: Local file for each artifact.
            targets: Targets in publish order.
            descriptor_destination: Where the serialized descriptor goes.
            cancel_event: Checked before each target; once set, the
                remaining targets are skipped.

        Returns:
            PublishOutcome. Failures are reported in ``outcome.cause``
            (DescriptorWriteError or PublishError), not raised.
        """
        outcome = PublishOutcome()
        targets = list(targets)

        # ── Descriptor ───────────────────────────────────────────
        try:
            self._codec.write(descriptor, descriptor_destination)
        except Exception as e:
            outcome.cause = DescriptorWriteError(descriptor_destination, e)
            outcome.skipped_targets = targets
            logger.error("%s", outcome.cause)
            return outcome
        outcome.descriptor_written = True

        # ── Targets, strictly in order ───────────────────────────
        for index, target in enumerate(targets):
            if cancel_event is not None and cancel_event.is_set():
                outcome.cancelled = True
                outcome.skipped_targets = targets[index:]
                logger.warning(
                    "Publish of %s cancelled before '%s'", descriptor.module, target.name
                )
                break

            receipt, raised = self._publish_one(
                target, descriptor, artifact_files, descriptor_destination
            )
            outcome.receipts.append(receipt)

            status_marker = "✓" if receipt.ok else "✗"
            logger.info(
                "%s %s → %s (%dms)",
                status_marker,
                descriptor.module,
                target.name,
                receipt.duration_ms,
            )

            if receipt.ok:
                outcome.succeeded_targets.append(target)
                continue

            outcome.failed_target = target
            outcome.cause = PublishError(target.name, raised or receipt.error or "unknown error")
            outcome.skipped_targets = targets[index + 1:]
            break

        reason = "cancelled" if outcome.cancelled else "skipped after earlier failure"
        for target in outcome.skipped_targets:
            outcome.receipts.append(TargetReceipt.skip(target=target.name, reason=reason))
            logger.info("⊘ %s → %s (%s)", descriptor.module, target.name, reason)

        return outcome

    def publish_request(
        self,
        request: PublishRequest,
        *,
        cancel_event: threading.Event | None = None,
    ) -> PublishOutcome:
        """Publish a PublishRequest."""
        return self.publish(
            request.descriptor,
            request.artifact_files,
            request.targets,
            request.descriptor_destination,
            cancel_event=cancel_event,
        )

    @staticmethod
    def _publish_one(
        target: PublicationTarget,
        descriptor: ModuleDescriptor,
        artifact_files: Mapping[ArtifactDescriptor, Path],
        descriptor_destination: Path,
    ) -> tuple[TargetReceipt, Exception | None]:
        """Invoke one target, turning anything it raises into a failed receipt."""
        start_time = time.monotonic()
        raised: Exception | None = None
        try:
            receipt = target.publish(descriptor, artifact_files, descriptor_destination)
        except Exception as e:
            logger.error("Target %s raised during publish: %s", target.name, e)
            raised = e
            receipt = TargetReceipt.failure(target=target.name, error=f"Unexpected error: {e}")
        receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        return receipt, raised

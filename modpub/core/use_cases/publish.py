"""
Publish use case — the full vertical slice of a publish.

Loads modpub.yml, builds the configuration graph and the descriptor,
locates the artifact files, resolves the targets, runs the coordinator,
and appends the run to the audit ledger.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from modpub.adapters.registry import TargetRegistry
from modpub.core.codec.descriptor_codec import get_codec
from modpub.core.config.loader import (
    PROJECT_CONFIG_FILE,
    build_graph,
    find_project_file,
    load_project,
    project_root as root_of,
)
from modpub.core.engine.coordinator import PublicationCoordinator
from modpub.core.engine.descriptor_builder import DescriptorBuilder
from modpub.core.errors import ArtifactFileError, ModpubError
from modpub.core.models.configuration import ArtifactDescriptor
from modpub.core.models.descriptor import ModuleDescriptor
from modpub.core.models.outcome import PublishOutcome, PublishRequest
from modpub.core.models.project import Project
from modpub.core.persistence.audit import AuditEntry, AuditWriter, generate_operation_id

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    """Result of one publish run."""

    operation_id: str = ""
    project: Project | None = None
    project_root: Path | None = None
    descriptor: ModuleDescriptor | None = None
    descriptor_path: Path | None = None
    configurations: list[str] = field(default_factory=list)
    targets: list[str] = field(default_factory=list)
    outcome: PublishOutcome | None = None
    mock: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.outcome is not None and self.outcome.ok

    @property
    def status(self) -> str:
        if self.outcome is not None:
            return self.outcome.status
        return "not_attempted"

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["operation_id"] = self.operation_id
        result["module"] = str(self.project.module) if self.project else ""
        result["configurations"] = self.configurations
        result["targets"] = self.targets
        result["descriptor_path"] = str(self.descriptor_path) if self.descriptor_path else None
        result["mock"] = self.mock
        if self.outcome is not None:
            result["outcome"] = self.outcome.to_dict()
        return result


def collect_artifact_files(
    descriptor: ModuleDescriptor,
    base_dir: Path,
) -> dict[ArtifactDescriptor, Path]:
    """Map every artifact of the descriptor to its local file.

    Relative file references are resolved against ``base_dir``.

    Raises:
        ArtifactFileError: One or more files do not exist.
    """
    files: dict[ArtifactDescriptor, Path] = {}
    missing: list[str] = []
    for artifact in descriptor.artifacts:
        path = Path(artifact.file).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        if path.is_file():
            files[artifact] = path
        else:
            missing.append(str(path))
    if missing:
        raise ArtifactFileError(missing)
    return files


def run_publish(
    config_path: Path | None = None,
    configurations: list[str] | None = None,
    targets: list[str] | None = None,
    mock_mode: bool = False,
    registry: TargetRegistry | None = None,
    cancel_event: threading.Event | None = None,
    audit: bool = True,
) -> PublishResult:
    """Publish the module described by modpub.yml.

    Args:
        config_path: Optional explicit path to modpub.yml.
        configurations: Configurations to publish. None or empty means
            ``publish.configurations`` from modpub.yml.
        targets: Target names in publish order. None or empty means every
            declared target, in declaration order.
        mock_mode: If True, every target is replaced by a succeeding mock.
        registry: Optional pre-configured target registry.
        cancel_event: Stops the run before the next target once set.
        audit: If True, append the run to the audit ledger.

    Returns:
        PublishResult. ``error`` is set when nothing was attempted
        (bad configuration, missing files, unknown targets); target
        failures are reported in ``outcome``.
    """
    result = PublishResult(operation_id=generate_operation_id(), mock=mock_mode)

    if config_path is None:
        config_path = find_project_file()
    if config_path is None:
        result.error = f"No {PROJECT_CONFIG_FILE} found."
        return result

    # ── Prepare: nothing is written until all of this succeeds ───
    try:
        project = load_project(config_path)
        result.project = project
        root = root_of(config_path)
        result.project_root = root

        names = list(configurations) if configurations else list(project.publish.configurations)
        result.configurations = sorted(set(names))

        descriptor = DescriptorBuilder(build_graph(project)).build(
            project.module,
            names,
            status=project.publish.status,
        )
        result.descriptor = descriptor

        artifact_files = collect_artifact_files(descriptor, root / project.publish.artifacts_dir)

        if registry is None:
            registry = TargetRegistry.from_specs(project.targets, base_dir=root, mock_mode=mock_mode)
        resolved = registry.resolve(targets or None)
        if not resolved:
            result.error = "No targets to publish to. Declare targets in modpub.yml."
            return result
        result.targets = [t.name for t in resolved]

        codec = get_codec(project.publish.format)
    except (ModpubError, ValueError) as e:
        result.error = str(e)
        return result

    result.descriptor_path = root / project.publish.descriptor

    # ── Publish ──────────────────────────────────────────────────
    for target in resolved:
        valid, reason = target.validate(descriptor, artifact_files, result.descriptor_path)
        if not valid:
            result.error = f"Target '{target.name}' rejected the publication: {reason}"
            return result

    request = PublishRequest(
        descriptor=descriptor,
        artifact_files=artifact_files,
        targets=resolved,
        descriptor_destination=result.descriptor_path,
    )
    start_time = time.monotonic()
    outcome = PublicationCoordinator(codec).publish_request(request, cancel_event=cancel_event)
    duration_ms = int((time.monotonic() - start_time) * 1000)
    result.outcome = outcome

    logger.info("Publish %s of %s: %s", result.operation_id, project.module, outcome.status)

    # ── Audit ────────────────────────────────────────────────────
    if audit:
        AuditWriter(project_root=root).write(
            _audit_entry(result, outcome, duration_ms, artifact_files)
        )

    return result


def _audit_entry(
    result: PublishResult,
    outcome: PublishOutcome,
    duration_ms: int,
    artifact_files: Mapping[ArtifactDescriptor, Path],
) -> AuditEntry:
    return AuditEntry(
        operation_id=result.operation_id,
        module=str(result.project.module) if result.project else "",
        configurations=result.configurations,
        targets=result.targets,
        mock=result.mock,
        status=outcome.status,
        succeeded_targets=[t.name for t in outcome.succeeded_targets],
        failed_target=outcome.failed_target.name if outcome.failed_target else None,
        error=str(outcome.cause) if outcome.cause else None,
        duration_ms=duration_ms,
        context={
            "descriptor": str(result.descriptor_path),
            "artifacts": sorted(str(a) for a in artifact_files),
        },
    )

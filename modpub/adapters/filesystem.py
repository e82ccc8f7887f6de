"""
Filesystem target — publish into a directory-based repository.

Files are laid out with an Ivy-style pattern. Tokens in square brackets
are substituted; a parenthesised section is dropped when any token in
it is empty:

    [group]/[module]/[version]/[artifact]-[version](-[classifier]).[ext]

Each published file gets .sha1 and .md5 checksum sidecars.
"""

from __future__ import annotations

import hashlib
import logging
import re
import shutil
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from modpub.adapters.base import PublicationTarget
from modpub.core.models.configuration import ArtifactDescriptor
from modpub.core.models.descriptor import ModuleDescriptor
from modpub.core.models.identity import ModuleIdentity
from modpub.core.models.outcome import TargetReceipt

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = "[group]/[module]/[version]/[artifact]-[version](-[classifier]).[ext]"

_TOKEN = re.compile(r"\[(\w+)\]")
_OPTIONAL = re.compile(r"\(([^()]*)\)")
_CHECKSUMS = ("sha1", "md5")


def substitute(pattern: str, tokens: Mapping[str, str | None]) -> str:
    """Expand a layout pattern.

    Unknown tokens are left in place so typos are visible in the output.
    """

    def optional(match: re.Match[str]) -> str:
        section = match.group(1)
        names = _TOKEN.findall(section)
        if any(not tokens.get(n) for n in names):
            return ""
        return section

    def token(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in tokens:
            return match.group(0)
        return tokens[name] or ""

    return _TOKEN.sub(token, _OPTIONAL.sub(optional, pattern))


def _checksum(path: Path, algorithm: str) -> str:
    hasher = hashlib.new(algorithm)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


class FilesystemTarget(PublicationTarget):
    """Publishes into a repository directory.

    Args:
        target_name: Target identifier.
        root: Repository root directory.
        layout: Artifact layout pattern.
        m2compatible: Turn dots in the group into directories.
        overwrite: If False, an already-published file fails the target.
        checksums: Write .sha1/.md5 sidecars.
        workers: Copy artifacts on this many threads.
    """

    def __init__(
        self,
        target_name: str,
        root: Path | str,
        *,
        layout: str = DEFAULT_LAYOUT,
        m2compatible: bool = False,
        overwrite: bool = True,
        checksums: bool = True,
        workers: int = 1,
    ):
        self._name = target_name
        self.root = Path(root).expanduser()
        self.layout = layout
        self.m2compatible = m2compatible
        self.overwrite = overwrite
        self.checksums = checksums
        self.workers = max(1, workers)

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        # The root may not exist yet; publish creates it.
        parent = self.root if self.root.exists() else self.root.parent
        return parent.is_dir()

    def destination(
        self,
        module: ModuleIdentity,
        artifact: str,
        ext: str,
        classifier: str | None = None,
        type_: str | None = None,
    ) -> Path:
        """Path a file is published to under the repository root."""
        group = module.group.replace(".", "/") if self.m2compatible else module.group
        rel = substitute(
            self.layout,
            {
                "group": group,
                "module": module.name,
                "version": module.version,
                "artifact": artifact,
                "classifier": classifier,
                "ext": ext,
                "type": type_ or ext,
            },
        )
        return self.root / rel

    def _copies(
        self,
        descriptor: ModuleDescriptor,
        artifact_files: Mapping[ArtifactDescriptor, Path],
        descriptor_location: Path | None,
    ) -> list[tuple[Path, Path]]:
        """source → destination for every artifact, descriptor last."""
        module = descriptor.module
        copies = [
            (
                Path(artifact_files[artifact]),
                self.destination(
                    module,
                    artifact.name,
                    artifact.extension,
                    artifact.classifier,
                    artifact.type,
                ),
            )
            for artifact in descriptor.artifacts
        ]
        if descriptor_location is not None:
            descriptor_ext = descriptor_location.suffix.lstrip(".") or "json"
            copies.append(
                (
                    descriptor_location,
                    self.destination(module, module.name, descriptor_ext, None, "descriptor"),
                )
            )
        return copies

    def validate(
        self,
        descriptor: ModuleDescriptor,
        artifact_files: Mapping[ArtifactDescriptor, Path],
        descriptor_location: Path | None = None,
    ) -> tuple[bool, str]:
        missing = [str(a) for a in descriptor.artifacts if a not in artifact_files]
        if missing:
            return False, f"No file supplied for artifact(s): {', '.join(missing)}"

        seen: set[Path] = set()
        for _, dest in self._copies(descriptor, artifact_files, descriptor_location):
            if dest in seen:
                return False, f"More than one file would be published to {dest}"
            seen.add(dest)
        return True, ""

    def publish(
        self,
        descriptor: ModuleDescriptor,
        artifact_files: Mapping[ArtifactDescriptor, Path],
        descriptor_location: Path,
    ) -> TargetReceipt:
        module = descriptor.module

        valid, error = self.validate(descriptor, artifact_files, descriptor_location)
        if not valid:
            return TargetReceipt.failure(target=self.name, error=error)

        planned = self._copies(descriptor, artifact_files, descriptor_location)
        copies, descriptor_dest = planned[:-1], planned[-1][1]

        try:
            if not self.overwrite:
                existing = [d for _, d in planned if d.exists()]
                if existing:
                    return TargetReceipt.failure(
                        target=self.name,
                        error=f"Already published (overwrite disabled): {existing[0]}",
                        metadata={"existing": [str(p) for p in existing]},
                    )

            if self.workers > 1 and len(copies) > 1:
                with ThreadPoolExecutor(max_workers=self.workers) as executor:
                    futures = [executor.submit(self._copy, src, dest) for src, dest in copies]
                written = [f.result() for f in futures]
            else:
                written = [self._copy(src, dest) for src, dest in copies]

            # Descriptor last, after every artifact is in place.
            written.append(self._copy(descriptor_location, descriptor_dest))
        except Exception as e:
            return TargetReceipt.failure(
                target=self.name,
                error=f"Filesystem error: {e}",
                metadata={"root": str(self.root)},
            )

        logger.debug("Published %d files to %s", len(written), self.root)
        return TargetReceipt.success(
            target=self.name,
            output=f"Published {module} to {self.root}",
            metadata={
                "root": str(self.root),
                "files": [str(p) for p in written],
            },
        )

    def _copy(self, src: Path, dest: Path) -> Path:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dest)
        if self.checksums:
            for algorithm in _CHECKSUMS:
                sidecar = dest.with_name(f"{dest.name}.{algorithm}")
                sidecar.write_text(_checksum(dest, algorithm) + "\n", encoding="utf-8")
        return dest

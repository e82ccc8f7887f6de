"""
Descriptor codecs — serialize a ModuleDescriptor to disk.

The coordinator only depends on the DescriptorCodec interface. Writes are
atomic (write to a temp file, then rename) so a crash never leaves a
half-written descriptor for a target to pick up.
"""

from __future__ import annotations

import json
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import yaml

from modpub.core.models.descriptor import ModuleDescriptor

logger = logging.getLogger(__name__)


class DescriptorCodec(ABC):
    """Writes descriptors in one on-disk format."""

    format: str = ""
    extension: str = ""

    @abstractmethod
    def encode(self, descriptor: ModuleDescriptor) -> str:
        """Render the descriptor document as text."""

    def write(self, descriptor: ModuleDescriptor, destination: Path) -> None:
        """Write the descriptor to ``destination``.

        Raises:
            OSError: The file cannot be written.
            ValueError: The descriptor cannot be encoded.
        """
        content = self.encode(descriptor)
        destination.parent.mkdir(parents=True, exist_ok=True)

        _fd, tmp_path = tempfile.mkstemp(
            dir=destination.parent,
            prefix=".descriptor_",
            suffix=".tmp",
        )
        tmp = Path(tmp_path)
        try:
            with open(_fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(destination)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("Descriptor for %s written to %s", descriptor.module, destination)


class JsonDescriptorCodec(DescriptorCodec):
    """Descriptor as pretty-printed JSON."""

    format = "json"
    extension = "json"

    def encode(self, descriptor: ModuleDescriptor) -> str:
        return json.dumps(descriptor.to_dict(), indent=2, ensure_ascii=False) + "\n"


class YamlDescriptorCodec(DescriptorCodec):
    """Descriptor as YAML, keys kept in document order."""

    format = "yaml"
    extension = "yml"

    def encode(self, descriptor: ModuleDescriptor) -> str:
        return yaml.safe_dump(
            descriptor.to_dict(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )


_CODECS: dict[str, type[DescriptorCodec]] = {
    "json": JsonDescriptorCodec,
    "yaml": YamlDescriptorCodec,
}


def get_codec(fmt: str) -> DescriptorCodec:
    """Return a codec instance for a format name (json, yaml)."""
    try:
        return _CODECS[fmt.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown descriptor format '{fmt}'. Valid: {', '.join(sorted(_CODECS))}"
        ) from None

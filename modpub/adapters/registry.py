"""
Target registry — central lookup for publication targets.

The registry is the single point of target management: registration,
lookup by name, mock mode, and construction from configuration. The
coordinator itself never looks targets up; it receives the ordered list
that resolve() produces.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from modpub.adapters.base import PublicationTarget
from modpub.adapters.filesystem import DEFAULT_LAYOUT, FilesystemTarget
from modpub.adapters.mock import MockTarget
from modpub.core.errors import UnknownTargetError
from modpub.core.models.project import TargetSpec

logger = logging.getLogger(__name__)


def create_target(spec: TargetSpec, base_dir: Path | None = None) -> PublicationTarget:
    """Build a publication target from its configuration.

    Relative filesystem paths are resolved against ``base_dir``.
    """
    if spec.type == "mock":
        return MockTarget(target_name=spec.name, fail=spec.fail)

    if not spec.path:
        raise ValueError(f"Target '{spec.name}' of type 'filesystem' needs a 'path'")
    root = Path(spec.path).expanduser()
    if not root.is_absolute() and base_dir is not None:
        root = base_dir / root
    return FilesystemTarget(
        spec.name,
        root,
        layout=spec.layout or DEFAULT_LAYOUT,
        m2compatible=spec.m2compatible,
        overwrite=spec.overwrite,
        checksums=spec.checksums,
        workers=spec.workers,
    )


class TargetRegistry:
    """Central registry for publication targets.

    Features:
        - Register/unregister targets by name
        - Mock mode: resolve every name to a MockTarget that succeeds
        - Resolve an ordered list of names to target objects
        - Query target availability
    """

    def __init__(self, mock_mode: bool = False):
        self._targets: dict[str, PublicationTarget] = {}
        self._mock_mode = mock_mode

    @classmethod
    def from_specs(
        cls,
        specs: Iterable[TargetSpec],
        base_dir: Path | None = None,
        mock_mode: bool = False,
    ) -> TargetRegistry:
        """Create a registry holding one target per declaration."""
        registry = cls(mock_mode=mock_mode)
        for spec in specs:
            registry.register(create_target(spec, base_dir))
        return registry

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def register(self, target: PublicationTarget) -> None:
        """Register a target under its name."""
        name = target.name
        if name in self._targets:
            logger.warning("Overwriting existing target: %s", name)
        self._targets[name] = target
        logger.debug("Registered target: %s", name)

    def unregister(self, name: str) -> None:
        """Remove a target from the registry."""
        self._targets.pop(name, None)

    def get(self, name: str) -> PublicationTarget | None:
        """Look up a target by name."""
        return self._targets.get(name)

    def list_targets(self) -> list[str]:
        """All registered target names, in registration order."""
        return list(self._targets.keys())

    def target_status(self) -> dict[str, dict[str, Any]]:
        """Availability of every registered target."""
        status = {}
        for name, target in self._targets.items():
            try:
                available = target.is_available()
            except Exception:
                available = False
            status[name] = {
                "name": name,
                "available": available,
                "type": target.__class__.__name__,
            }
        return status

    def resolve(self, names: Iterable[str] | None = None) -> list[PublicationTarget]:
        """Resolve target names to targets, keeping the given order.

        Args:
            names: Target names in publish order. None means every
                registered target in registration order.

        Raises:
            UnknownTargetError: A name is not registered.
        """
        wanted = list(names) if names is not None else self.list_targets()
        targets: list[PublicationTarget] = []
        for name in wanted:
            target = self._targets.get(name)
            if target is None:
                raise UnknownTargetError(name, self.list_targets())
            if self._mock_mode:
                target = MockTarget(target_name=name)
            targets.append(target)
        return targets

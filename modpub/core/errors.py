"""
Error taxonomy — every failure the core can raise.

Structural errors come from the configuration graph and the flattener.
They are always fatal to the current build: an inconsistent
configuration model cannot be partially honored.

I/O errors (descriptor write, target publish) are raised by collaborators
and captured by the coordinator into the PublishOutcome rather than
propagated, so the caller always learns how far the publish got.
"""

from __future__ import annotations

from collections.abc import Sequence


class ModpubError(Exception):
    """Base class for all modpub errors."""


# ── Structural ──────────────────────────────────────────────────


class ConfigurationGraphError(ModpubError):
    """The configuration graph is structurally inconsistent."""


class DuplicateConfigurationError(ConfigurationGraphError):
    """A configuration with this name already exists in the graph."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Configuration '{name}' is already defined")


class UnknownParentError(ConfigurationGraphError):
    """A configuration extends a configuration that is not (yet) known."""

    def __init__(self, name: str, parent: str):
        self.name = name
        self.parent = parent
        super().__init__(
            f"Configuration '{name}' extends unknown configuration '{parent}'"
        )


class UnknownConfigurationError(ConfigurationGraphError):
    """Lookup of a configuration name that does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Configuration '{name}' not found")


class CyclicInheritanceError(ConfigurationGraphError):
    """A configuration transitively extends itself.

    ``path`` starts and ends with the repeated configuration,
    e.g. ``["a", "b", "a"]``.
    """

    def __init__(self, path: Sequence[str]):
        self.path = list(path)
        super().__init__(
            "Cyclic configuration inheritance: " + " -> ".join(self.path)
        )


# ── Request ─────────────────────────────────────────────────────


class EmptyPublicationError(ModpubError):
    """A publish request named no configurations."""

    def __init__(self) -> None:
        super().__init__("No configurations requested for publication")


class ArtifactFileError(ModpubError):
    """An artifact's file reference does not point at an existing file."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__("Artifact file(s) not found: " + ", ".join(self.missing))


class UnknownTargetError(ModpubError):
    """A publication target name is not registered."""

    def __init__(self, name: str, available: Sequence[str] = ()):
        self.name = name
        self.available = list(available)
        hint = f" (available: {', '.join(self.available)})" if self.available else ""
        super().__init__(f"Unknown publication target '{name}'{hint}")


# ── I/O ─────────────────────────────────────────────────────────


class DescriptorWriteError(ModpubError):
    """The descriptor codec failed to write the descriptor."""

    def __init__(self, destination: object, cause: BaseException | str):
        self.destination = destination
        self.cause = cause
        super().__init__(f"Cannot write descriptor to {destination}: {cause}")


class PublishError(ModpubError):
    """A publication target failed.

    ``target`` is the target's name; ``cause`` is whatever the target
    reported, either an exception or an error string from its receipt.
    """

    def __init__(self, target: str, cause: BaseException | str):
        self.target = target
        self.cause = cause
        super().__init__(f"Publication to '{target}' failed: {cause}")

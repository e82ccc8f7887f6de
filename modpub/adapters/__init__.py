"""Publication targets — repository sinks for published modules.

Public re-exports for convenient access.
"""

from modpub.adapters.base import PublicationTarget
from modpub.adapters.filesystem import FilesystemTarget
from modpub.adapters.mock import MockTarget
from modpub.adapters.registry import TargetRegistry, create_target

__all__ = [
    "FilesystemTarget",
    "MockTarget",
    "PublicationTarget",
    "TargetRegistry",
    "create_target",
]

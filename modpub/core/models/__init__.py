"""
Domain models — Pydantic types for descriptors and publication.

All models are re-exported here for convenient access:

    from modpub.core.models import Configuration, ModuleDescriptor, PublishOutcome
"""

from modpub.core.models.configuration import (
    ArtifactDescriptor,
    Configuration,
    DependencyDescriptor,
    EffectiveConfiguration,
    ExcludeRule,
)
from modpub.core.models.descriptor import (
    AttributedDependency,
    ModuleDescriptor,
    PublishedConfiguration,
)
from modpub.core.models.identity import ModuleIdentity
from modpub.core.models.outcome import PublishOutcome, PublishRequest, TargetReceipt
from modpub.core.models.project import Project, PublishSettings, TargetSpec

__all__ = [
    # configuration.py
    "ArtifactDescriptor",
    "Configuration",
    "DependencyDescriptor",
    "EffectiveConfiguration",
    "ExcludeRule",
    # descriptor.py
    "AttributedDependency",
    "ModuleDescriptor",
    "PublishedConfiguration",
    # identity.py
    "ModuleIdentity",
    # outcome.py
    "PublishOutcome",
    "PublishRequest",
    "TargetReceipt",
    # project.py
    "Project",
    "PublishSettings",
    "TargetSpec",
]

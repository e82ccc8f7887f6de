"""modpub — configuration-hierarchy descriptor builder and publication pipeline."""

__version__ = "0.1.0"

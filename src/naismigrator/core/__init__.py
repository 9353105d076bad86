"""Core pipeline and the contracts it depends on."""

from .pipeline import MigrationRunner
from .protocols import ResourceRegistry

__all__ = ["MigrationRunner", "ResourceRegistry"]

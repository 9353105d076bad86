"""Pydantic models for the legacy naisd manifest and the naiserator Application."""

from .naisd import NaisManifest, UsedResource, ExposedResource
from .naiserator import Application, ApplicationSpec, EnvVar

__all__ = [
    "NaisManifest",
    "UsedResource",
    "ExposedResource",
    "Application",
    "ApplicationSpec",
    "EnvVar",
]

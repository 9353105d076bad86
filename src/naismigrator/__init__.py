"""Migrate naisd manifests to naiserator Application resources."""

__version__ = "0.1.0"

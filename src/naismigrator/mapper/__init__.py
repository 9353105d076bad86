"""Conversion model between naisd and naiserator data types."""

from .converter import (
    auto_ingress,
    convert,
    environment_variables,
    exposed_resource_payloads,
)

__all__ = [
    "convert",
    "auto_ingress",
    "environment_variables",
    "exposed_resource_payloads",
]

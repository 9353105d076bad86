"""Fasit registry integration: resource lookups and exposed-resource payloads."""

from .client import FasitClient
from .payloads import build_resource_payload, generate_scope
from .resources import FasitIngress, NaisResource, ResourceRequest, Scope

__all__ = [
    "FasitClient",
    "FasitIngress",
    "NaisResource",
    "ResourceRequest",
    "Scope",
    "build_resource_payload",
    "generate_scope",
]

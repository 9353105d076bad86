"""
Payloads describing resources an application exposes in Fasit.

Only the documents are built here; registering them is not part of the
migration.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from ..models.naisd import ExposedResource
from .resources import NaisResource, Scope

NEXUS_REDIRECT_URL = "http://maven.adeo.no/nexus/service/local/artifact/maven/redirect"


def generate_scope(
    resource: ExposedResource,
    existing_resource: NaisResource | None,
    environment_class: str,
    environment: str,
    zone: str,
) -> Scope:
    """
    Choose the Fasit scope for an exposed resource.

    Resources marked ``allZones`` are scoped to the environment only. A
    resource that already exists in Fasit keeps its current scope. Anything
    else is scoped to the zone it is deployed in.
    """
    if resource.all_zones:
        return Scope(environment_class=environment_class, environment=environment)
    if existing_resource is not None and existing_resource.id > 0:
        return existing_resource.scope
    return Scope(
        environment_class=environment_class, environment=environment, zone=zone
    )


def _wsdl_url(resource: ExposedResource) -> str:
    query = urlencode(
        {
            "r": "m2internal",
            "g": resource.wsdl_group_id,
            "a": resource.wsdl_artifact_id,
            "v": resource.wsdl_version,
            "e": "zip",
        }
    )
    return f"{NEXUS_REDIRECT_URL}?{query}"


def build_resource_payload(
    resource: ExposedResource,
    existing_resource: NaisResource | None,
    environment_class: str,
    environment: str,
    zone: str,
    hostname: str,
) -> dict[str, Any] | None:
    """
    Build the Fasit resource document for an exposed resource.

    Args:
        resource: The exposed resource from the manifest
        existing_resource: The resource as currently registered, if any
        environment_class: Fasit environment class
        environment: Fasit environment name
        zone: Zone the application runs in
        hostname: Host the application is reachable on

    Returns:
        The payload, or None for resource types that cannot be exposed
    """
    scope = generate_scope(
        resource, existing_resource, environment_class, environment, zone
    ).model_dump(by_alias=True, exclude_defaults=True)
    resource_type = resource.resource_type.lower()
    url = f"https://{hostname}{resource.path}"

    if resource_type == "restservice":
        properties = {"url": url}
        if resource.description:
            properties["description"] = resource.description
        return {
            "alias": resource.alias,
            "scope": scope,
            "type": "RestService",
            "properties": properties,
        }

    if resource_type in ("webserviceendpoint", "soapservice"):
        properties = {
            "endpointUrl": url,
            "wsdlUrl": _wsdl_url(resource),
            "securityToken": resource.security_token,
        }
        if resource.description:
            properties["description"] = resource.description
        return {
            "alias": resource.alias,
            "scope": scope,
            "type": resource.resource_type,
            "properties": properties,
        }

    return None

"""Resources resolved from Fasit and the rules turning them into env vars."""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

NAV_TRUSTSTORE_FASIT_ALIAS = "nav_truststore"

APPLICATION_PROPERTIES = "applicationproperties"
APPLICATION_PROPERTIES_KEY = "applicationProperties"
CERTIFICATE = "certificate"
LOAD_BALANCER_CONFIG = "LoadBalancerConfig"

_PROPERTY_KEY = re.compile(r"^[\w.]+$")
_SEPARATORS = re.compile(r"[.:\-]")


def normalize_property_name(name: str) -> str:
    """Replace the separators Fasit allows in property names with underscores."""
    return _SEPARATORS.sub("_", name)


def parse_application_properties(blob: str) -> dict[str, str]:
    """
    Parse the ``key=value`` lines of an applicationproperties resource.

    Keys are normalized before they are checked, so ``c-d:e=2`` becomes
    ``c_d_e``. Lines that are not ``key=value`` pairs are logged and dropped.

    Args:
        blob: Newline delimited properties as stored in Fasit

    Returns:
        Mapping of normalized key to value, in document order
    """
    properties: dict[str, str] = {}
    for raw_line in blob.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        key, sep, value = line.partition("=")
        key = normalize_property_name(key)
        if sep and value and _PROPERTY_KEY.match(key):
            properties[key] = value
        else:
            logger.info(f"the following string did not match our regex: {line}")

    return properties


class Scope(BaseModel):
    """Fasit scope: environment class, environment and zone."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    environment_class: str = Field("", alias="environmentclass")
    environment: str = ""
    zone: str = ""


class FasitIngress(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    path: str = ""


class ResourceRequest(BaseModel):
    """A request for one named, typed resource."""

    model_config = ConfigDict(frozen=True)

    alias: str
    resource_type: str
    property_map: dict[str, str] = Field(default_factory=dict)


def default_resource_requests() -> list[ResourceRequest]:
    """Resources every application gets, regardless of its manifest."""
    return [
        ResourceRequest(
            alias=NAV_TRUSTSTORE_FASIT_ALIAS,
            resource_type=CERTIFICATE,
            property_map={"keystore": "NAV_TRUSTSTORE_PATH"},
        )
    ]


class NaisResource(BaseModel):
    """
    A resource resolved from Fasit.

    Built once from the registry response and never modified afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: int = 0
    name: str = ""
    resource_type: str = ""
    scope: Scope = Field(default_factory=Scope)
    properties: dict[str, str] = Field(default_factory=dict)
    property_map: dict[str, str] = Field(
        default_factory=dict,
        description="Optional renames from property name to variable name.",
    )
    secret: str | None = Field(default=None, repr=False)
    certificates: dict[str, bytes] = Field(default_factory=dict, repr=False)
    ingresses: list[FasitIngress] = Field(default_factory=list)

    @property
    def is_certificate(self) -> bool:
        return self.resource_type.lower() == CERTIFICATE

    def to_resource_variable(self, prop: str) -> str:
        """
        Name of the variable a property is exposed as, in lower case.

        A remapped name wins; otherwise the property is prefixed with the
        resource name, except for applicationproperties resources.
        """
        if prop in self.property_map:
            prop = self.property_map[prop]
        elif self.resource_type.lower() != APPLICATION_PROPERTIES:
            prop = f"{self.name}_{prop}"

        return normalize_property_name(prop).lower()

    def to_environment_variable(self, prop: str) -> str:
        return self.to_resource_variable(prop).upper()

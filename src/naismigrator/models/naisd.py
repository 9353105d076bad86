"""
naisd.py – data model for the nais daemon manifest ("legacy format")
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Every field defaults to the zero value the old YAML decoder produced, so a
sparse nais.yaml validates as long as the values present are well typed.
"""

from __future__ import annotations

from pydantic import Field

from .base import LegacyModel, LegacyStr

# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------


class Probe(LegacyModel):
    """Liveness or readiness probe."""

    path: str = ""
    initial_delay: int = Field(0, alias="initialDelay")
    period_seconds: int = Field(0, alias="periodSeconds")
    failure_threshold: int = Field(0, alias="failureThreshold")
    timeout: int = 0


class Healthcheck(LegacyModel):
    liveness: Probe = Field(default_factory=Probe)
    readiness: Probe = Field(default_factory=Probe)


class ResourceList(LegacyModel):
    cpu: str = ""
    memory: str = ""


class ResourceRequirements(LegacyModel):
    limits: ResourceList = Field(default_factory=ResourceList)
    requests: ResourceList = Field(default_factory=ResourceList)


class PrometheusConfig(LegacyModel):
    enabled: bool = False
    port: str = ""
    path: str = ""


class IstioConfig(LegacyModel):
    enabled: bool = False


class Vault(LegacyModel):
    enabled: bool = False
    sidecar: bool = False


class Replicas(LegacyModel):
    min: int = 0
    max: int = 0
    cpu_threshold_percentage: int = Field(0, alias="cpuThresholdPercentage")


class Ingress(LegacyModel):
    disabled: bool = False


class Redis(LegacyModel):
    enabled: bool = False
    image: str = ""
    limits: ResourceList = Field(default_factory=ResourceList)
    requests: ResourceList = Field(default_factory=ResourceList)


class PrometheusAlertRule(LegacyModel):
    alert: str = ""
    expr: str = ""
    for_: str = Field("", alias="for")
    labels: dict[str, LegacyStr] = Field(default_factory=dict)
    annotations: dict[str, LegacyStr] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Fasit resources
# ---------------------------------------------------------------------------


class UsedResource(LegacyModel):
    """A Fasit resource the application consumes."""

    alias: str = ""
    resource_type: str = Field("", alias="resourceType")
    property_map: dict[str, LegacyStr] = Field(
        default_factory=dict,
        alias="propertyMap",
        description="Renames resource properties before they become env vars.",
    )


class ExposedResource(LegacyModel):
    """A Fasit resource the application provides to others."""

    alias: str = ""
    resource_type: str = Field("", alias="resourceType")
    path: str = ""
    description: str = ""
    wsdl_group_id: str = Field("", alias="wsdlGroupId")
    wsdl_artifact_id: str = Field("", alias="wsdlArtifactId")
    wsdl_version: str = Field("", alias="wsdlVersion")
    security_token: str = Field("", alias="securityToken")
    all_zones: bool = Field(False, alias="allZones")


class FasitResources(LegacyModel):
    used: list[UsedResource] = Field(default_factory=list)
    exposed: list[ExposedResource] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Root document
# ---------------------------------------------------------------------------


class NaisManifest(LegacyModel):
    """The complete legacy nais.yaml document."""

    team: str = ""
    image: str = ""
    port: int = 0
    deployment_strategy: str = Field("", alias="deploymentstrategy")
    healthcheck: Healthcheck = Field(default_factory=Healthcheck)
    pre_stop_hook_path: str = Field("", alias="preStopHookPath")
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    istio: IstioConfig = Field(default_factory=IstioConfig)
    replicas: Replicas = Field(default_factory=Replicas)
    ingress: Ingress = Field(default_factory=Ingress)
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)
    fasit_resources: FasitResources = Field(
        default_factory=FasitResources, alias="fasitResources"
    )
    leader_election: bool = Field(False, alias="leaderElection")
    redis: Redis = Field(default_factory=Redis)
    alerts: list[PrometheusAlertRule] = Field(default_factory=list)
    logformat: str = ""
    logtransform: str = ""
    secrets: bool = False
    vault: Vault = Field(default_factory=Vault)
    webproxy: bool = False

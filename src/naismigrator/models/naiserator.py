"""
naiserator.py – the nais.io/v1alpha1 Application custom resource
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Field order follows the Kubernetes resource so the emitted YAML reads the way
the resource is documented.
"""

from __future__ import annotations

from pydantic import Field

from .base import ManifestModel

KIND: str = "Application"
API_VERSION: str = "nais.io/v1alpha1"


class ObjectMeta(ManifestModel):
    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class Probe(ManifestModel):
    """Liveness and readiness probe definitions."""

    path: str = ""
    port: int = 0
    initial_delay: int = Field(0, alias="initialDelay")
    period_seconds: int = Field(0, alias="periodSeconds")
    failure_threshold: int = Field(0, alias="failureThreshold")
    timeout: int = 0


class PrometheusConfig(ManifestModel):
    enabled: bool = False
    port: str = ""
    path: str = ""


class Replicas(ManifestModel):
    min: int = Field(
        0,
        description="The minimum amount of replicas acceptable for a "
        "successful deployment.",
    )
    max: int = Field(
        0,
        description="The pod autoscaler scales deployments on demand until "
        "this maximum has been reached.",
    )
    cpu_threshold_percentage: int = Field(
        0,
        alias="cpuThresholdPercentage",
        description="Amount of CPU usage before the autoscaler kicks in.",
    )


class ResourceSpec(ManifestModel):
    cpu: str = ""
    memory: str = ""


class ResourceRequirements(ManifestModel):
    limits: ResourceSpec = Field(default_factory=ResourceSpec)
    requests: ResourceSpec = Field(default_factory=ResourceSpec)


class EnvVar(ManifestModel):
    name: str
    value: str = ""


class Vault(ManifestModel):
    enabled: bool = False
    sidecar: bool = False


class Strategy(ManifestModel):
    type: str = ""


class ApplicationSpec(ManifestModel):
    """Contains the NAIS manifest."""

    env: list[EnvVar] = Field(default_factory=list)
    image: str = ""
    ingresses: list[str] = Field(default_factory=list)
    leader_election: bool = Field(False, alias="leaderElection")
    liveness: Probe = Field(default_factory=Probe)
    logformat: str = ""
    logtransform: str = ""
    port: int = 0
    pre_stop_hook_path: str = Field("", alias="preStopHookPath")
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    readiness: Probe = Field(default_factory=Probe)
    replicas: Replicas = Field(default_factory=Replicas)
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)
    strategy: Strategy = Field(default_factory=Strategy)
    vault: Vault = Field(default_factory=Vault)
    webproxy: bool = False


class Application(ManifestModel):
    """A NAIS application."""

    kind: str = KIND
    api_version: str = Field(API_VERSION, alias="apiVersion")
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: ApplicationSpec = Field(default_factory=ApplicationSpec)

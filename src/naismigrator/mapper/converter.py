"""Conversion from the naisd manifest to the naiserator Application resource."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from ..config import DeployParameters, EnvironmentClass, Zone
from ..fasit.payloads import build_resource_payload
from ..fasit.resources import NaisResource
from ..models import naisd, naiserator

logger = logging.getLogger(__name__)

INGRESS_HOST_FORMAT = "{application}.nais.{domain}"

# RFC 3986 path characters kept unescaped in ingress paths
_PATH_SAFE = "/:@!$&'()*+,;="

# (zone, production?) -> domain of the default ingress
INGRESS_DOMAINS: dict[tuple[Zone, bool], str] = {
    (Zone.FSS, True): "adeo.no",
    (Zone.FSS, False): "preprod.local",
    (Zone.SBS, True): "oera.no",
    (Zone.SBS, False): "oera-q.local",
}


def ingress_host(deploy: DeployParameters) -> str:
    production = deploy.environment_class is EnvironmentClass.P
    domain = INGRESS_DOMAINS[(deploy.zone, production)]
    return INGRESS_HOST_FORMAT.format(application=deploy.application, domain=domain)


def auto_ingress(deploy: DeployParameters) -> str:
    """The ingress every application gets in its zone and environment class."""
    return ingress_url(ingress_host(deploy), "")


def ingress_url(host: str, path: str) -> str:
    if path and not path.startswith("/"):
        path = "/" + path
    return f"https://{host}{quote(path, safe=_PATH_SAFE)}"


def fasit_ingresses(resources: list[NaisResource]) -> list[str]:
    return [
        ingress_url(ingress.host, ingress.path)
        for resource in resources
        for ingress in resource.ingresses
    ]


def environment_variables(resources: list[NaisResource]) -> list[naiserator.EnvVar]:
    """
    Expose resolved resource properties as environment variables.

    Certificates and secret values are never written to the manifest; they
    are reported and skipped.
    """
    env: list[naiserator.EnvVar] = []
    seen: set[str] = set()

    for resource in resources:
        if resource.is_certificate:
            logger.info(
                f"Skipping certificate resource '{resource.name}': "
                "certificates are not exported as environment variables"
            )
            continue

        if resource.secret is not None:
            logger.info(
                f"Skipping secret of resource '{resource.name}': "
                "secrets are not exported as environment variables"
            )

        for key, value in resource.properties.items():
            name = resource.to_environment_variable(key)
            if name in seen:
                logger.warning(
                    f"Duplicate environment variable {name} from resource "
                    f"'{resource.name}', keeping the first value"
                )
                continue
            seen.add(name)
            env.append(naiserator.EnvVar(name=name, value=value))

    return env


def probe_convert(manifest: naisd.NaisManifest, probe: naisd.Probe) -> naiserator.Probe:
    return naiserator.Probe(
        port=manifest.port,
        path=probe.path,
        timeout=probe.timeout,
        failure_threshold=probe.failure_threshold,
        period_seconds=probe.period_seconds,
        initial_delay=probe.initial_delay,
    )


def prometheus_convert(config: naisd.PrometheusConfig) -> naiserator.PrometheusConfig:
    return naiserator.PrometheusConfig(
        path=config.path, port=config.port, enabled=config.enabled
    )


def replica_convert(replicas: naisd.Replicas) -> naiserator.Replicas:
    return naiserator.Replicas(
        min=replicas.min,
        max=replicas.max,
        cpu_threshold_percentage=replicas.cpu_threshold_percentage,
    )


def resource_convert(config: naisd.ResourceList) -> naiserator.ResourceSpec:
    return naiserator.ResourceSpec(cpu=config.cpu, memory=config.memory)


def exposed_resource_payloads(
    manifest: naisd.NaisManifest, deploy: DeployParameters
) -> list[dict[str, Any]]:
    """
    Fasit documents for the resources the application exposes.

    Resource types Fasit cannot register from a manifest are logged and
    left out.
    """
    payloads = []
    for exposed in manifest.fasit_resources.exposed:
        payload = build_resource_payload(
            exposed,
            None,
            deploy.environment_class.value,
            deploy.environment,
            deploy.zone.value,
            ingress_host(deploy),
        )
        if payload is None:
            logger.warning(
                f"exposed resource '{exposed.alias}' of type "
                f"{exposed.resource_type} cannot be registered in Fasit"
            )
            continue
        payloads.append(payload)
    return payloads


def _report_unmigrated(
    manifest: naisd.NaisManifest, deploy: DeployParameters
) -> None:
    if manifest.redis.enabled:
        logger.warning("redis is not migrated; run Redis as a separate application")
    if manifest.alerts:
        logger.warning(f"{len(manifest.alerts)} alert(s) are not migrated")
    if manifest.istio.enabled:
        logger.warning("istio is not migrated")
    if manifest.fasit_resources.exposed:
        logger.warning(
            f"{len(manifest.fasit_resources.exposed)} exposed Fasit resource(s) "
            "must be registered separately"
        )
        for payload in exposed_resource_payloads(manifest, deploy):
            logger.info(f"Fasit resource to register: {payload}")


def convert(
    manifest: naisd.NaisManifest,
    deploy: DeployParameters,
    resources: list[NaisResource],
) -> naiserator.Application:
    """
    Convert a naisd manifest into a naiserator Application.

    Args:
        manifest: The legacy manifest
        deploy: Application name, namespace, zone and environment
        resources: Resources resolved from Fasit, empty if Fasit is disabled

    Returns:
        The Application resource
    """
    ingresses: list[str] = []
    if not manifest.ingress.disabled:
        ingresses.append(auto_ingress(deploy))
        ingresses.extend(fasit_ingresses(resources))

    _report_unmigrated(manifest, deploy)

    return naiserator.Application(
        metadata=naiserator.ObjectMeta(
            name=deploy.application,
            namespace=deploy.namespace,
            labels={"team": manifest.team},
        ),
        spec=naiserator.ApplicationSpec(
            env=environment_variables(resources),
            image=manifest.image,
            ingresses=ingresses,
            leader_election=manifest.leader_election,
            liveness=probe_convert(manifest, manifest.healthcheck.liveness),
            logformat=manifest.logformat,
            logtransform=manifest.logtransform,
            port=manifest.port,
            pre_stop_hook_path=manifest.pre_stop_hook_path,
            prometheus=prometheus_convert(manifest.prometheus),
            readiness=probe_convert(manifest, manifest.healthcheck.readiness),
            replicas=replica_convert(manifest.replicas),
            resources=naiserator.ResourceRequirements(
                limits=resource_convert(manifest.resources.limits),
                requests=resource_convert(manifest.resources.requests),
            ),
            strategy=naiserator.Strategy(type=manifest.deployment_strategy),
            vault=naiserator.Vault(
                enabled=manifest.secrets or manifest.vault.enabled,
                sidecar=manifest.vault.sidecar,
            ),
            webproxy=manifest.webproxy,
        ),
    )

"""Parsing of Fasit LoadBalancerConfig search results into ingresses."""

import logging
from typing import Any

from ..exceptions import LoadBalancerConfigError
from .resources import FasitIngress

logger = logging.getLogger(__name__)


def parse_load_balancer_config(configs: Any) -> list[FasitIngress] | None:
    """
    Turn a list of LoadBalancerConfig resources into (host, path) ingresses.

    ``properties.url`` is the host and ``properties.contextRoots`` holds a
    comma separated list of paths; every path is paired with the host.

    Args:
        configs: Decoded JSON body of the resource search

    Returns:
        The ingresses, or None when the search returned no configurations

    Raises:
        LoadBalancerConfigError: If the body is not a list, or configurations
            exist but none of them has a host
    """
    if not isinstance(configs, list):
        raise LoadBalancerConfigError(
            f"error parsing load balancer config: {configs}"
        )

    if not configs:
        return None

    ingresses: list[FasitIngress] = []
    for lb_config in configs:
        properties = lb_config.get("properties") if isinstance(lb_config, dict) else None
        properties = properties if isinstance(properties, dict) else {}

        host = properties.get("url")
        if not isinstance(host, str) or not host:
            logger.warning(f"no host found for loadbalancer config: {lb_config}")
            continue

        context_roots = properties.get("contextRoots")
        if not isinstance(context_roots, str):
            context_roots = ""

        for path in context_roots.split(","):
            ingresses.append(FasitIngress(host=host, path=path.strip()))

    if not ingresses:
        raise LoadBalancerConfigError(
            f"no loadbalancer config found for: {configs}"
        )
    return ingresses

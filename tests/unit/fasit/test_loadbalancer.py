from __future__ import annotations

import logging

import pytest

from naismigrator.exceptions import LoadBalancerConfigError
from naismigrator.fasit.loadbalancer import parse_load_balancer_config


def test_empty_list_means_no_config() -> None:
    assert parse_load_balancer_config([]) is None


def test_multiple_configs_keep_order() -> None:
    ingresses = parse_load_balancer_config(
        [
            {"properties": {"url": "a.host", "contextRoots": "/one, /two"}},
            {"properties": {"url": "b.host", "contextRoots": "/three"}},
        ]
    )
    assert [(i.host, i.path) for i in ingresses] == [
        ("a.host", "/one"),
        ("a.host", "/two"),
        ("b.host", "/three"),
    ]


def test_missing_context_roots_gives_root_path() -> None:
    ingresses = parse_load_balancer_config([{"properties": {"url": "a.host"}}])
    assert [(i.host, i.path) for i in ingresses] == [("a.host", "")]


def test_config_without_host_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    ingresses = parse_load_balancer_config(
        [
            {"properties": {"contextRoots": "/x"}},
            {"properties": {"url": "a.host", "contextRoots": "/y"}},
        ]
    )

    assert [(i.host, i.path) for i in ingresses] == [("a.host", "/y")]
    assert any("no host found" in r.message for r in caplog.records)


def test_no_usable_host_raises() -> None:
    with pytest.raises(LoadBalancerConfigError, match="no loadbalancer config"):
        parse_load_balancer_config([{"properties": {"contextRoots": "/x"}}])


def test_non_list_body_raises() -> None:
    with pytest.raises(LoadBalancerConfigError, match="error parsing"):
        parse_load_balancer_config({"properties": {}})

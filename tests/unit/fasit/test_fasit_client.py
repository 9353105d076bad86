"""Unit tests for FasitClient."""

from __future__ import annotations

import json
import logging
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from naismigrator.exceptions import (
    CertificateResolutionError,
    FasitError,
    FasitNotFoundError,
    FasitServerError,
    SecretResolutionError,
)
from naismigrator.fasit.client import FasitClient, dump_request
from naismigrator.fasit.resources import ResourceRequest
from naismigrator.models.naisd import UsedResource

FASIT = "https://fasit.example"

# -------------------- Fakes / helpers --------------------


class FakeResponse:
    """The part of requests.Response the client relies on."""

    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        content: bytes | None = None,
        request: requests.PreparedRequest | None = None,
    ) -> None:
        self.status_code = status_code
        self.text = body if isinstance(body, str) else json.dumps(body)
        self.content = content if content is not None else self.text.encode()
        self.request = request

    def json(self) -> Any:
        return json.loads(self.text)


class FakeSession:
    """Routes GETs by URL (without query) and by the ``alias`` parameter."""

    def __init__(self) -> None:
        self.routes: dict[str, FakeResponse] = {}
        self.calls: list[dict[str, Any]] = []

    def add(self, url: str, response: FakeResponse, alias: str | None = None) -> None:
        self.routes[f"{url}#{alias}" if alias else url] = response

    def get(self, url: str, params=None, auth=None, timeout=None) -> FakeResponse:
        self.calls.append({"url": url, "params": params, "auth": auth, "timeout": timeout})
        alias = (params or {}).get("alias")
        key = f"{url}#{alias}" if alias and f"{url}#{alias}" in self.routes else url
        if key not in self.routes:
            return FakeResponse(404, "not found")
        return self.routes[key]


def scoped_resource(
    alias: str, resource_type: str, properties: dict[str, str], **extra: Any
) -> dict[str, Any]:
    return {
        "id": extra.pop("id", 1),
        "alias": alias,
        "type": resource_type,
        "scope": {"environmentclass": "q", "environment": "q1", "zone": "fss"},
        "properties": properties,
        **extra,
    }


SCOPED = f"{FASIT}/api/v2/scopedresource"
RESOURCES = f"{FASIT}/api/v2/resources"


@pytest.fixture
def session() -> FakeSession:
    s = FakeSession()
    s.add(
        SCOPED,
        FakeResponse(200, scoped_resource("nav_truststore", "certificate", {})),
        alias="nav_truststore",
    )
    return s


@pytest.fixture
def client(session: FakeSession) -> FasitClient:
    return FasitClient(FASIT, "user", "pass", session=session)


# --------------------------- Tests ---------------------------


class TestResolveScopedResource:
    def test_maps_response_and_sends_scope(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(
            SCOPED,
            FakeResponse(
                200,
                scoped_resource("my-api", "restservice", {"url": "https://api"}, id=42),
            ),
            alias="my-api",
        )
        request = ResourceRequest(
            alias="my-api", resource_type="restservice", property_map={"url": "API"}
        )

        resource = client.resolve_scoped_resource(request, "q1", "app1", "fss")

        assert resource.id == 42
        assert resource.name == "my-api"
        assert resource.properties == {"url": "https://api"}
        assert resource.property_map == {"url": "API"}
        assert resource.scope.environment_class == "q"
        assert session.calls[-1]["params"] == {
            "alias": "my-api",
            "type": "restservice",
            "environment": "q1",
            "application": "app1",
            "zone": "fss",
        }

    def test_404_is_not_found(self, client: FasitClient) -> None:
        request = ResourceRequest(alias="missing", resource_type="restservice")
        with pytest.raises(FasitNotFoundError) as exc_info:
            client.resolve_scoped_resource(request, "q1", "app1", "fss")
        assert exc_info.value.status_code == 404

    def test_500_is_server_error_with_body(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(SCOPED, FakeResponse(500, "database on fire"), alias="db")
        request = ResourceRequest(alias="db", resource_type="datasource")

        with pytest.raises(FasitServerError) as exc_info:
            client.resolve_scoped_resource(request, "q1", "app1", "fss")

        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "database on fire"

    def test_invalid_json_raises(self, client: FasitClient, session: FakeSession) -> None:
        session.add(SCOPED, FakeResponse(200, "<html>"), alias="broken")
        request = ResourceRequest(alias="broken", resource_type="restservice")
        with pytest.raises(FasitError, match="could not unmarshal body"):
            client.resolve_scoped_resource(request, "q1", "app1", "fss")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"scope": "q"},
            {"id": "not-a-number"},
            {"properties": ["url=https://api"]},
        ],
    )
    def test_malformed_resource_raises_fasit_error(
        self, client: FasitClient, session: FakeSession, overrides: dict[str, Any]
    ) -> None:
        body = {**scoped_resource("odd", "baseurl", {}), **overrides}
        session.add(SCOPED, FakeResponse(200, body), alias="odd")
        request = ResourceRequest(alias="odd", resource_type="baseurl")

        with pytest.raises(FasitError, match="could not unmarshal body") as exc_info:
            client.resolve_scoped_resource(request, "q1", "app1", "fss")

        assert exc_info.value.status_code == 500

    def test_transport_error_raises_fasit_error(self) -> None:
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = requests.ConnectionError("connection refused")
        client = FasitClient(FASIT, session=session)

        with pytest.raises(FasitError, match="Error contacting fasit"):
            client.resolve_scoped_resource(
                ResourceRequest(alias="a", resource_type="b"), "q1", "app1", "fss"
            )

    def test_application_properties_are_parsed(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(
            SCOPED,
            FakeResponse(
                200,
                scoped_resource(
                    "app-config",
                    "applicationproperties",
                    {"applicationProperties": "a.b=1\nbad line\nc-d:e=2"},
                ),
            ),
            alias="app-config",
        )
        request = ResourceRequest(
            alias="app-config", resource_type="applicationproperties"
        )

        resource = client.resolve_scoped_resource(request, "q1", "app1", "fss")

        assert resource.properties == {"a_b": "1", "c_d_e": "2"}
        assert "applicationProperties" not in resource.properties

    def test_certificate_files_are_downloaded(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        file_url = f"{FASIT}/api/v2/resources/7/file/keystore"
        session.add(
            SCOPED,
            FakeResponse(
                200,
                scoped_resource(
                    "app-cert",
                    "certificate",
                    {"keystorealias": "app"},
                    files={"keystore": {"filename": "app.jks", "ref": file_url}},
                ),
            ),
            alias="app-cert",
        )
        session.add(file_url, FakeResponse(200, "", content=b"\x00\x01jks"))

        resource = client.resolve_scoped_resource(
            ResourceRequest(alias="app-cert", resource_type="certificate"),
            "q1",
            "app1",
            "fss",
        )

        assert resource.certificates == {"app.jks": b"\x00\x01jks"}

    def test_certificate_without_filename_raises(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(
            SCOPED,
            FakeResponse(
                200,
                scoped_resource(
                    "bad-cert", "certificate", {}, files={"keystore": {"ref": "x"}}
                ),
            ),
            alias="bad-cert",
        )
        with pytest.raises(CertificateResolutionError, match="Filename not found"):
            client.resolve_scoped_resource(
                ResourceRequest(alias="bad-cert", resource_type="certificate"),
                "q1",
                "app1",
                "fss",
            )

    def test_secret_is_resolved_with_basic_auth(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        secret_url = f"{FASIT}/api/v2/secrets/99"
        session.add(
            SCOPED,
            FakeResponse(
                200,
                scoped_resource(
                    "db-user",
                    "credential",
                    {"username": "scott"},
                    secrets={"password": {"ref": secret_url}},
                ),
            ),
            alias="db-user",
        )
        session.add(secret_url, FakeResponse(200, "tiger"))

        resource = client.resolve_scoped_resource(
            ResourceRequest(alias="db-user", resource_type="credential"),
            "q1",
            "app1",
            "fss",
        )

        assert resource.secret == "tiger"
        auth = session.calls[-1]["auth"]
        assert (auth.username, auth.password) == ("user", "pass")


class TestResolveScopedResources:
    def test_prepends_truststore(self, client: FasitClient, session: FakeSession) -> None:
        session.add(
            SCOPED,
            FakeResponse(200, scoped_resource("my-api", "restservice", {"url": "u"})),
            alias="my-api",
        )

        resources = client.resolve_scoped_resources(
            [ResourceRequest(alias="my-api", resource_type="restservice")],
            "q1",
            "app1",
            "fss",
        )

        assert [r.name for r in resources] == ["nav_truststore", "my-api"]
        assert resources[0].property_map == {"keystore": "NAV_TRUSTSTORE_PATH"}

    def test_not_found_is_wrapped_with_alias(self, client: FasitClient) -> None:
        with pytest.raises(FasitNotFoundError) as exc_info:
            client.resolve_scoped_resources(
                [ResourceRequest(alias="missing", resource_type="restservice")],
                "q1",
                "app1",
                "fss",
            )

        err = exc_info.value
        assert err.alias == "missing"
        assert err.resource_type == "restservice"
        assert "unable to get resource missing (restservice)" in str(err)
        assert err.status_code == 404

    def test_server_error_keeps_body(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(SCOPED, FakeResponse(500, "internal failure"), alias="db")

        with pytest.raises(FasitServerError) as exc_info:
            client.resolve_scoped_resources(
                [ResourceRequest(alias="db", resource_type="datasource")],
                "q1",
                "app1",
                "fss",
            )

        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "internal failure"

    def test_malformed_resource_is_wrapped_with_alias(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        body = {**scoped_resource("odd", "baseurl", {}), "scope": "q"}
        session.add(SCOPED, FakeResponse(200, body), alias="odd")

        with pytest.raises(FasitError) as exc_info:
            client.resolve_scoped_resources(
                [ResourceRequest(alias="odd", resource_type="baseurl")],
                "q1",
                "app1",
                "fss",
            )

        assert (exc_info.value.alias, exc_info.value.resource_type) == ("odd", "baseurl")
        assert "could not unmarshal body" in str(exc_info.value)

    def test_stops_at_first_failure(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(SCOPED, FakeResponse(500, "boom"), alias="first")
        session.add(
            SCOPED,
            FakeResponse(200, scoped_resource("second", "restservice", {})),
            alias="second",
        )

        with pytest.raises(FasitServerError):
            client.resolve_scoped_resources(
                [
                    ResourceRequest(alias="first", resource_type="restservice"),
                    ResourceRequest(alias="second", resource_type="restservice"),
                ],
                "q1",
                "app1",
                "fss",
            )

        aliases = [c["params"]["alias"] for c in session.calls]
        assert aliases == ["nav_truststore", "first"]


class TestLoadBalancerConfig:
    def test_cross_product_of_host_and_context_roots(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(
            RESOURCES,
            FakeResponse(
                200,
                [{"properties": {"url": "app.adeo.no", "contextRoots": "/a,/b"}}],
            ),
        )

        resource = client.resolve_load_balancer_config("app1", "p")

        assert resource is not None
        assert resource.resource_type == "LoadBalancerConfig"
        assert [(i.host, i.path) for i in resource.ingresses] == [
            ("app.adeo.no", "/a"),
            ("app.adeo.no", "/b"),
        ]
        assert session.calls[-1]["params"] == {
            "environment": "p",
            "application": "app1",
            "type": "LoadBalancerConfig",
        }

    def test_empty_search_returns_none(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(RESOURCES, FakeResponse(200, []))
        assert client.resolve_load_balancer_config("app1", "p") is None


class TestResolveSecret:
    def test_error_includes_redacted_request_dump(
        self, client: FasitClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        secret_url = f"{FASIT}/api/v2/secrets/1"
        prepared = requests.Request(
            "GET", secret_url, auth=("user", "pass")
        ).prepare()
        session = FakeSession()
        session.add(secret_url, FakeResponse(403, "forbidden", request=prepared))
        client = FasitClient(FASIT, session=session)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(SecretResolutionError) as exc_info:
                client.resolve_secret({"password": {"ref": secret_url}}, "user", "pass")

        err = exc_info.value
        assert err.status_code == 403
        assert "HTTP 403" in str(err)
        assert f"GET {secret_url}" in err.request_dump
        assert "Authorization: <redacted>" in err.request_dump
        assert "dXNlcjpwYXNz" not in err.request_dump  # base64("user:pass")
        assert any("Fasit request" in r.message for r in caplog.records)

    def test_first_reference_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        session = FakeSession()
        session.add(f"{FASIT}/s/1", FakeResponse(200, "first"))
        session.add(f"{FASIT}/s/2", FakeResponse(200, "second"))
        client = FasitClient(FASIT, session=session)

        with caplog.at_level(logging.WARNING):
            value = client.resolve_secret(
                {"a": {"ref": f"{FASIT}/s/1"}, "b": {"ref": f"{FASIT}/s/2"}},
                "user",
                "pass",
            )

        assert value == "first"
        assert any("only resolving 'a'" in r.message for r in caplog.records)

    def test_missing_ref_raises(self, client: FasitClient) -> None:
        with pytest.raises(SecretResolutionError, match="has no ref"):
            client.resolve_secret({"password": {}}, "user", "pass")


def test_dump_request_redacts_credentials() -> None:
    prepared = requests.Request(
        "GET", "https://fasit.example/x", auth=("u", "p"), headers={"X-Trace": "1"}
    ).prepare()

    dump = dump_request(prepared)

    assert dump.splitlines()[0] == "GET https://fasit.example/x"
    assert "X-Trace: 1" in dump
    assert "Authorization: <redacted>" in dump


class TestSessionLifecycle:
    def test_owned_session_is_closed_on_exit(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        created = MagicMock(spec=requests.Session)
        monkeypatch.setattr(requests, "Session", lambda: created)

        with FasitClient(FASIT) as client:
            assert client.fasit_url == FASIT

        created.close.assert_called_once_with()

    def test_injected_session_is_left_open(self) -> None:
        session = MagicMock(spec=requests.Session)

        with FasitClient(FASIT, session=session):
            pass

        session.close.assert_not_called()


class TestEnvironmentsAndApplications:
    def test_get_environment_class(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(
            f"{FASIT}/api/v2/environments/q1",
            FakeResponse(200, {"name": "q1", "environmentclass": "q"}),
        )
        assert client.get_environment_class("q1") == "q"

    def test_get_environment_class_unknown(self, client: FasitClient) -> None:
        with pytest.raises(FasitNotFoundError):
            client.get_environment_class("x9")

    def test_get_application(self, client: FasitClient, session: FakeSession) -> None:
        session.add(f"{FASIT}/api/v2/applications/app1", FakeResponse(200, {}))
        client.get_application("app1")  # no exception

    def test_get_application_missing(self, client: FasitClient) -> None:
        with pytest.raises(FasitNotFoundError, match="could not find application"):
            client.get_application("ghost")


class TestFetchAllResources:
    def test_used_resources_and_load_balancer(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(
            SCOPED,
            FakeResponse(200, scoped_resource("my-api", "restservice", {"url": "u"})),
            alias="my-api",
        )
        session.add(
            RESOURCES,
            FakeResponse(200, [{"properties": {"url": "lb.host", "contextRoots": "/x"}}]),
        )
        used = [UsedResource(alias="my-api", resource_type="restservice")]

        resources = client.fetch_all_resources("app1", "q1", "fss", used)

        assert [r.name for r in resources] == ["nav_truststore", "my-api", ""]
        assert resources[-1].resource_type == "LoadBalancerConfig"

    def test_load_balancer_failure_is_logged(
        self,
        client: FasitClient,
        session: FakeSession,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        session.add(RESOURCES, FakeResponse(502, "bad gateway"))

        with caplog.at_level(logging.WARNING):
            resources = client.fetch_all_resources("app1", "q1", "fss", [])

        assert [r.name for r in resources] == ["nav_truststore"]
        assert any(
            "failed getting loadbalancer config" in r.message for r in caplog.records
        )

    def test_load_balancer_without_host_is_ignored(
        self, client: FasitClient, session: FakeSession
    ) -> None:
        session.add(RESOURCES, FakeResponse(200, [{"properties": {}}]))
        resources = client.fetch_all_resources("app1", "q1", "fss", [])
        assert all(r.resource_type != "LoadBalancerConfig" for r in resources)

    def test_missing_used_resource_aborts(self, client: FasitClient) -> None:
        used = [UsedResource(alias="missing", resource_type="restservice")]
        with pytest.raises(FasitNotFoundError):
            client.fetch_all_resources("app1", "q1", "fss", used)

"""HTTP client for the Fasit resource registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests
from pydantic import ValidationError
from requests.auth import HTTPBasicAuth

from ..exceptions import (
    CertificateResolutionError,
    FasitError,
    FasitNotFoundError,
    FasitServerError,
    SecretResolutionError,
)
from .loadbalancer import parse_load_balancer_config
from .resources import (
    APPLICATION_PROPERTIES,
    APPLICATION_PROPERTIES_KEY,
    CERTIFICATE,
    LOAD_BALANCER_CONFIG,
    NaisResource,
    ResourceRequest,
    Scope,
    default_resource_requests,
    parse_application_properties,
)

if TYPE_CHECKING:
    from naismigrator.config import MigratorConfig
    from naismigrator.models.naisd import UsedResource

logger = logging.getLogger(__name__)

_REDACTED_HEADERS = {"authorization", "proxy-authorization", "cookie"}


def dump_request(request: requests.PreparedRequest) -> str:
    """Render an outbound request for diagnostics, with credentials redacted."""
    lines = [f"{request.method} {request.url}"]
    for name, value in request.headers.items():
        if name.lower() in _REDACTED_HEADERS:
            value = "<redacted>"
        lines.append(f"{name}: {value}")
    return "\n".join(lines)


class FasitClient:
    """
    Synchronous client for the Fasit v2 API.

    Every call is a single GET; nothing is retried and nothing is cached.
    A failing lookup aborts the calling operation.
    """

    def __init__(
        self,
        fasit_url: str,
        username: str | None = None,
        password: str | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the client.

        Args:
            fasit_url: Base URL of Fasit, without trailing slash
            username: User for resolving secrets
            password: Password for resolving secrets
            session: HTTP session to use; a new one is created if omitted
            timeout: Request timeout in seconds, None to wait indefinitely
        """
        self.fasit_url = fasit_url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._logger = logger.getChild(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: MigratorConfig) -> FasitClient:
        return cls(
            config.fasit_url,
            username=config.deploy.fasit_username,
            password=config.deploy.fasit_password,
            timeout=config.timeout,
        )

    def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> FasitClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # --- Transport ---

    def _do_request(
        self, path: str, params: dict[str, str] | None = None
    ) -> requests.Response:
        url = self.fasit_url + path
        self._logger.debug(f"GET {url} {params or ''}")

        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise FasitError("Error contacting fasit", 500, original_error=e) from e

        if response.status_code == 404:
            raise FasitNotFoundError(
                f"item not found in Fasit: {response.text}", body=response.text
            )

        if response.status_code > 299:
            raise FasitServerError(
                f"error contacting Fasit: {response.text}",
                response.status_code,
                body=response.text,
            )

        return response

    @staticmethod
    def _decode_json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise FasitError("could not unmarshal body", 500, original_error=e) from e

    # --- Scoped resources ---

    def resolve_scoped_resource(
        self,
        resource_request: ResourceRequest,
        environment: str,
        application: str,
        zone: str,
    ) -> NaisResource:
        """
        Resolve one named, typed resource for the given scope.

        Raises:
            FasitNotFoundError: If Fasit has no such resource
            FasitServerError: If Fasit answers with another error status
            SecretResolutionError: If the resource's secret cannot be fetched
        """
        response = self._do_request(
            "/api/v2/scopedresource",
            {
                "alias": resource_request.alias,
                "type": resource_request.resource_type,
                "environment": environment,
                "application": application,
                "zone": zone,
            },
        )

        payload = self._decode_json(response)
        if not isinstance(payload, dict):
            raise FasitError(f"could not unmarshal body: expected an object, got {payload!r}")

        try:
            return self._map_to_nais_resource(payload, resource_request.property_map)
        except (ValidationError, AttributeError, TypeError) as e:
            raise FasitError("could not unmarshal body", 500, original_error=e) from e

    def _map_to_nais_resource(
        self, payload: dict[str, Any], property_map: dict[str, str]
    ) -> NaisResource:
        resource_type = str(payload.get("type") or "")
        properties = {
            str(k): str(v) for k, v in (payload.get("properties") or {}).items()
        }

        secret = None
        secrets = payload.get("secrets")
        if secrets:
            secret = self.resolve_secret(secrets, self.username, self.password)

        certificates: dict[str, bytes] = {}
        files = payload.get("files")
        if resource_type.lower() == CERTIFICATE and files:
            certificates = self._resolve_certificates(files)
        elif resource_type.lower() == APPLICATION_PROPERTIES:
            blob = properties.pop(APPLICATION_PROPERTIES_KEY, "")
            properties.update(parse_application_properties(blob))

        return NaisResource(
            id=payload.get("id") or 0,
            name=str(payload.get("alias") or ""),
            resource_type=resource_type,
            scope=Scope.model_validate(payload.get("scope") or {}),
            properties=properties,
            property_map=dict(property_map),
            secret=secret,
            certificates=certificates,
        )

    def _resolve_certificates(self, files: dict[str, Any]) -> dict[str, bytes]:
        keystore = files.get("keystore") if isinstance(files, dict) else None
        if not isinstance(keystore, dict):
            raise CertificateResolutionError(f"error parsing fasit json: {files}")

        filename = keystore.get("filename")
        if not isinstance(filename, str):
            raise CertificateResolutionError(
                f"error parsing fasit json. Filename not found: {files}"
            )

        file_url = keystore.get("ref")
        if not isinstance(file_url, str):
            raise CertificateResolutionError(
                f"error parsing fasit json. Fileurl not found: {files}"
            )

        try:
            response = self._session.get(file_url, timeout=self.timeout)
        except requests.RequestException as e:
            raise CertificateResolutionError(
                "error contacting fasit when resolving file", original_error=e
            ) from e

        if response.status_code > 299:
            raise CertificateResolutionError(
                f"error downloading file {filename}: {response.text}",
                response.status_code,
                body=response.text,
            )

        return {filename: response.content}

    def resolve_scoped_resources(
        self,
        resource_requests: list[ResourceRequest],
        environment: str,
        application: str,
        zone: str,
    ) -> list[NaisResource]:
        """
        Resolve the default resources followed by the requested ones.

        Requests are resolved one at a time, in order. The first failure
        aborts the whole lookup and no partial result is returned.

        Raises:
            FasitError: The failing lookup's error, annotated with its alias
                and type
        """
        all_requests = default_resource_requests() + list(resource_requests)
        resources: list[NaisResource] = []

        for resource_request in all_requests:
            try:
                resource = self.resolve_scoped_resource(
                    resource_request, environment, application, zone
                )
            except FasitError as e:
                raise e.for_resource(
                    resource_request.alias, resource_request.resource_type
                ) from e
            resources.append(resource)

        return resources

    # --- Load balancer ---

    def resolve_load_balancer_config(
        self, application: str, environment: str
    ) -> NaisResource | None:
        """
        Search Fasit for the application's LoadBalancerConfig resources.

        Returns:
            A resource holding the ingresses, or None if nothing is configured

        Raises:
            FasitError: If the search fails
            LoadBalancerConfigError: If no configuration carries a host
        """
        response = self._do_request(
            "/api/v2/resources",
            {
                "environment": environment,
                "application": application,
                "type": LOAD_BALANCER_CONFIG,
            },
        )

        ingresses = parse_load_balancer_config(self._decode_json(response))
        if not ingresses:
            return None

        return NaisResource(resource_type=LOAD_BALANCER_CONFIG, ingresses=ingresses)

    # --- Secrets ---

    def resolve_secret(
        self,
        secret_refs: dict[str, Any],
        username: str | None,
        password: str | None,
    ) -> str:
        """
        Fetch the value behind a secret reference.

        Fasit attaches at most one secret per resource; should there be more,
        the first one in the response is used.

        Args:
            secret_refs: Mapping of secret name to ``{"ref": url}``
            username: Basic auth user
            password: Basic auth password

        Returns:
            The raw secret value

        Raises:
            SecretResolutionError: If the secret cannot be fetched
        """
        if not secret_refs:
            raise SecretResolutionError("no secret reference to resolve")

        if len(secret_refs) > 1:
            self._logger.warning(
                f"Resource has {len(secret_refs)} secrets, "
                f"only resolving '{next(iter(secret_refs))}'"
            )

        name, reference = next(iter(secret_refs.items()))
        ref = reference.get("ref") if isinstance(reference, dict) else None
        if not ref:
            raise SecretResolutionError(f"secret '{name}' has no ref")

        try:
            response = self._session.get(
                ref,
                auth=HTTPBasicAuth(username or "", password or ""),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise SecretResolutionError(
                "error contacting fasit when resolving secret", original_error=e
            ) from e

        if response.status_code > 299:
            request_dump = dump_request(response.request)
            self._logger.error(f"Fasit request: {request_dump}")
            raise SecretResolutionError(
                f"fasit gave error message when resolving secret: {response.text} "
                f"(HTTP {response.status_code})",
                request_dump=request_dump,
                status_code=response.status_code,
                body=response.text,
            )

        return response.text

    # --- Environments and applications ---

    def get_environment_class(self, environment: str) -> str:
        """Return the environment class Fasit has registered for an environment."""
        response = self._do_request(f"/api/v2/environments/{quote(environment)}")
        payload = self._decode_json(response)

        environment_class = (
            payload.get("environmentclass") if isinstance(payload, dict) else None
        )
        if not isinstance(environment_class, str):
            raise FasitError(
                f"unable to read environmentclass from response: {payload}"
            )
        return environment_class

    def get_application(self, application: str) -> None:
        """
        Check that an application is registered in Fasit.

        Raises:
            FasitNotFoundError: If Fasit does not answer 200 for it
        """
        url = f"{self.fasit_url}/api/v2/applications/{quote(application)}"
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FasitError("unable to contact Fasit", 500, original_error=e) from e

        if response.status_code != 200:
            raise FasitNotFoundError(
                f"could not find application {application} in Fasit",
                status_code=response.status_code,
                body=response.text,
            )

    # --- Orchestration ---

    def fetch_all_resources(
        self,
        application: str,
        environment: str,
        zone: str,
        used_resources: list[UsedResource],
    ) -> list[NaisResource]:
        """
        Resolve every resource an application uses.

        The load balancer lookup is best effort: when it fails the error is
        logged and the application simply gets no extra ingresses.
        """
        resource_requests = [
            ResourceRequest(
                alias=used.alias,
                resource_type=used.resource_type,
                property_map=used.property_map,
            )
            for used in used_resources
        ]

        resources = self.resolve_scoped_resources(
            resource_requests, environment, application, zone
        )

        try:
            lb_resource = self.resolve_load_balancer_config(application, environment)
        except FasitError as e:
            self._logger.warning(
                f"failed getting loadbalancer config for application {application} "
                f"in fasitEnvironment {environment}: {e}"
            )
            lb_resource = None

        if lb_resource is not None:
            resources.append(lb_resource)

        return resources

"""
exceptions.py

Custom, typed exception hierarchy used across the naisd → naiserator migration
"""

from __future__ import annotations

import copy

# --------------------------------------------------------------------------- #
#                              Base hierarchy                                 #
# --------------------------------------------------------------------------- #


class MigratorError(Exception):
    """
    Root of all errors raised by this project.
    """


class ConfigurationError(MigratorError):
    """
    Raised when command-line values cannot be turned into a valid
    configuration (unknown zone, unknown environment class, ...).
    """


class ManifestDecodeError(MigratorError):
    """
    Raised by the reader when the legacy manifest cannot be parsed.

    Examples
    --------
    * YAML syntax error
    * Top-level object is not a mapping
    * Pydantic validation failures (e.g. a port that is not a number)
    """


class ManifestEncodeError(MigratorError):
    """Raised by the writer when the Application cannot be serialized."""


# --------------------------------------------------------------------------- #
#                               Fasit errors                                  #
# --------------------------------------------------------------------------- #


class FasitError(MigratorError):
    """
    Base exception for all errors coming from the Fasit registry.

    Carries an HTTP-status-like code, the upstream response body (if any)
    and, once a resource lookup has failed, the alias and type of the
    resource that was being resolved.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        body: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.original_error = original_error
        self.alias: str | None = None
        self.resource_type: str | None = None

    @property
    def code(self) -> int:
        return self.status_code

    def for_resource(self, alias: str, resource_type: str) -> FasitError:
        """
        Return a copy of this error annotated with the failing resource.

        The copy keeps the concrete class, so a wrapped not-found error is
        still a FasitNotFoundError.
        """
        wrapped = copy.copy(self)
        wrapped.alias = alias
        wrapped.resource_type = resource_type
        wrapped.message = (
            f"unable to get resource {alias} ({resource_type}). {self.message}"
        )
        return wrapped

    def __str__(self) -> str:
        if self.original_error is not None:
            return f"{self.message}: {self.original_error} ({self.status_code})"
        return f"{self.message} ({self.status_code})"


class FasitNotFoundError(FasitError):
    """Raised when Fasit answers 404 for a resource, application or environment."""

    def __init__(self, message: str, status_code: int = 404, **kwargs):
        super().__init__(message, status_code, **kwargs)


class FasitServerError(FasitError):
    """Raised when Fasit answers with any non-2xx status other than 404."""


class SecretResolutionError(FasitError):
    """
    Raised when a secret reference cannot be resolved.

    ``request_dump`` holds the outbound request with credentials redacted.
    """

    def __init__(self, message: str, request_dump: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.request_dump = request_dump


class CertificateResolutionError(FasitError):
    """Raised when a certificate file attached to a resource cannot be fetched."""


class LoadBalancerConfigError(FasitError):
    """
    Raised when load balancer configurations exist but none of them carries
    a usable host. Callers treat it as "no load balancer config".
    """

"""
Run configuration for a single migration.

The CLI builds one MigratorConfig from its arguments and hands it to the
reader, the Fasit client and the converter. Nothing mutates it afterwards.
"""

from __future__ import annotations

import argparse
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

DEFAULT_FASIT_URL = "http://localhost:8080"
STDIN = "-"


class Zone(str, Enum):
    """Network zone the application is deployed to."""

    FSS = "fss"
    SBS = "sbs"


class EnvironmentClass(str, Enum):
    """Fasit environment class (production, pre-production, test, development)."""

    P = "p"
    Q = "q"
    T = "t"
    U = "u"

    @classmethod
    def from_environment(cls, environment: str) -> EnvironmentClass:
        """
        Derive the environment class from a Fasit environment name.

        Args:
            environment: Environment name such as ``p``, ``q1`` or ``t6``

        Returns:
            The class named by the first letter of the environment

        Raises:
            ValueError: If the name does not start with a known class
        """
        name = environment.strip().lower()
        if not name:
            raise ValueError("environment must not be empty")
        try:
            return cls(name[0])
        except ValueError:
            allowed = ", ".join(c.value for c in cls)
            raise ValueError(
                f"Unknown environment class in '{environment}'. "
                f"Environment names must start with one of: {allowed}"
            ) from None


class DeployParameters(BaseModel):
    """Identity of the deployment being migrated."""

    model_config = ConfigDict(frozen=True)

    application: str = Field(..., min_length=1)
    namespace: str = "default"
    zone: Zone = Zone.FSS
    environment: str = Field(
        EnvironmentClass.P.value,
        description="Fasit environment name, e.g. 'p' or 'q1'.",
    )
    fasit_username: str | None = None
    fasit_password: str | None = Field(default=None, repr=False)

    @field_validator("zone", mode="before")
    @classmethod
    def _normalize_zone(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("environment")
    @classmethod
    def _known_environment_class(cls, v: str) -> str:
        EnvironmentClass.from_environment(v)
        return v.strip().lower()

    @property
    def environment_class(self) -> EnvironmentClass:
        return EnvironmentClass.from_environment(self.environment)

    @property
    def fasit_enabled(self) -> bool:
        return bool(self.fasit_username)


class MigratorConfig(BaseModel):
    """Immutable configuration for one run of the migrator."""

    model_config = ConfigDict(frozen=True)

    deploy: DeployParameters
    fasit_url: str = DEFAULT_FASIT_URL
    input: str = STDIN
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Fasit request timeout in seconds; None waits indefinitely.",
    )

    @property
    def fasit_enabled(self) -> bool:
        return self.deploy.fasit_enabled

    @classmethod
    def from_arguments(cls, args: argparse.Namespace) -> MigratorConfig:
        """
        Build the configuration from parsed command-line arguments.

        Raises:
            ConfigurationError: If any value is out of range
        """
        try:
            return cls(
                deploy=DeployParameters(
                    application=args.application,
                    namespace=args.namespace,
                    zone=args.zone,
                    environment=args.fasit_environment,
                    fasit_username=args.fasit_username or None,
                    fasit_password=args.fasit_password or None,
                ),
                fasit_url=args.fasit_url.rstrip("/"),
                input=args.input,
                timeout=args.fasit_timeout,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

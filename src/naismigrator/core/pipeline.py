"""Pipeline runner for a single naisd → naiserator migration."""

import logging
import sys
import time
from typing import IO

from naismigrator.config import DeployParameters, MigratorConfig
from naismigrator.fasit.client import FasitClient
from naismigrator.fasit.resources import NaisResource
from naismigrator.io.reader import ManifestReader
from naismigrator.io.writer import ManifestWriter
from naismigrator.mapper.converter import convert
from naismigrator.models.naisd import NaisManifest
from naismigrator.models.naiserator import Application

from .protocols import ResourceRegistry

logger = logging.getLogger(__name__)


class MigrationRunner:
    """
    Coordinates reading, Fasit lookups, conversion and writing.

    Each phase runs once, in order; an error in any phase aborts the run.
    """

    def __init__(
        self,
        config: MigratorConfig,
        registry: ResourceRegistry | None = None,
    ):
        """
        Initialize the runner.

        Args:
            config: Configuration of this run
            registry: Resource registry to use instead of a FasitClient
                built from the configuration
        """
        self._logger = logger.getChild(self.__class__.__name__)
        self._config = config
        self._registry = registry
        self._reader = ManifestReader()
        self._writer = ManifestWriter()

    @staticmethod
    def _fetch_from(
        registry: ResourceRegistry,
        deploy: DeployParameters,
        manifest: NaisManifest,
    ) -> list[NaisResource]:
        return registry.fetch_all_resources(
            deploy.application,
            deploy.environment,
            deploy.zone.value,
            manifest.fasit_resources.used,
        )

    def read(self, input_stream: IO[str] | None = None) -> NaisManifest:
        self._logger.info("Reading NAIS manifest...")
        if input_stream is not None:
            manifest = self._reader.decode(input_stream.read())
        else:
            manifest = self._reader.read(self._config.input)
        self._logger.info("Finished reading NAIS manifest")
        return manifest

    def fetch_resources(self, manifest: NaisManifest) -> list[NaisResource]:
        """Resolve the manifest's Fasit resources, or nothing if Fasit is disabled."""
        if not self._config.fasit_enabled:
            self._logger.info("Fasit integration disabled, no resources retrieved")
            return []

        deploy = self._config.deploy
        self._logger.info(
            f"Fasit integration enabled, retrieving resources for application "
            f"'{deploy.application}' environment '{deploy.environment}' "
            f"zone '{deploy.zone.value}'"
        )

        started = time.monotonic()
        if self._registry is not None:
            resources = self._fetch_from(self._registry, deploy, manifest)
        else:
            with FasitClient.from_config(self._config) as client:
                resources = self._fetch_from(client, deploy, manifest)
        elapsed = time.monotonic() - started

        self._logger.info(
            f"Retrieved {len(resources)} Fasit resources in {elapsed:.3f}s"
        )
        return resources

    def execute(
        self,
        input_stream: IO[str] | None = None,
        output_stream: IO[str] | None = None,
    ) -> Application:
        """
        Run the migration.

        Args:
            input_stream: Stream to read the manifest from; defaults to the
                configured input
            output_stream: Stream to write the Application to; defaults to
                standard output

        Returns:
            The converted Application
        """
        manifest = self.read(input_stream)
        resources = self.fetch_resources(manifest)

        application = convert(manifest, self._config.deploy, resources)
        self._logger.info("Conversion successful! Here is your Naiserator file:")

        self._writer.write(application, output_stream or sys.stdout)
        return application

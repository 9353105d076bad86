"""Reader for legacy nais.yaml manifests on stdin or disk."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import IO, Any, Final

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..exceptions import ManifestDecodeError
from ..models.naisd import NaisManifest

logger = logging.getLogger(__name__)

STDIN: Final[str] = "-"

_yaml_parser = YAML(typ="safe")  # safe loader, YAML 1.2


class ManifestReader:
    """Read a naisd manifest and validate it into a `NaisManifest`."""

    def __init__(self, stdin: IO[str] | None = None):
        self._stdin = stdin

    def read(self, source: str | Path = STDIN) -> NaisManifest:
        """
        Read the manifest from ``source``.

        Args:
            source: ``-`` for standard input, otherwise a file path

        Returns:
            The decoded manifest

        Raises:
            FileNotFoundError: If the file does not exist
            ManifestDecodeError: If the document is not a valid manifest
        """
        try:
            if str(source) == STDIN:
                logger.debug("Reading manifest from stdin")
                raw_text = (self._stdin or sys.stdin).read()
            else:
                file_path = Path(source)
                if not file_path.exists():
                    logger.error("File not found: %s", file_path)
                    raise FileNotFoundError(f"open file {file_path}: no such file")
                raw_text = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ManifestDecodeError(f"decode input: {exc}") from exc

        return self.decode(raw_text)

    @staticmethod
    def decode(raw_text: str) -> NaisManifest:
        try:
            data: Any = _yaml_parser.load(raw_text)
        except YAMLError as exc:
            raise ManifestDecodeError(f"decode input: {exc}") from exc

        # an empty document decodes to the zero manifest
        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ManifestDecodeError(
                "decode input: top-level object must be a mapping"
            )

        try:
            manifest = NaisManifest.model_validate(data)
        except ValidationError as exc:
            raise ManifestDecodeError(f"decode input: {exc}") from exc

        logger.debug("Manifest loaded (%d root keys)", len(data))
        return manifest

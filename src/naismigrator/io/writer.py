"""Writer emitting the naiserator Application as a YAML document."""

from __future__ import annotations

import logging
from typing import IO, Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..exceptions import ManifestEncodeError
from ..models.naiserator import Application

logger = logging.getLogger(__name__)

DOCUMENT_SEPARATOR = "---\n"

# Emitted even when empty, the resource is invalid without them
_REQUIRED_KEYS = frozenset({"image", "spec"})


def prune_empty(value: Any) -> Any:
    """
    Recursively drop empty values from dumped model data.

    Empty strings, zero numbers, ``False``, ``None`` and empty collections
    are left out of the document, so only settings that are actually used
    show up in the output.
    """
    if isinstance(value, dict):
        pruned = {}
        for key, item in value.items():
            item = prune_empty(item)
            if key in _REQUIRED_KEYS or not _is_empty(item):
                pruned[key] = item
        return pruned
    if isinstance(value, list):
        return [prune_empty(item) for item in value]
    return value


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (str, int, float, dict, list)):
        return not value
    return False


class ManifestWriter:
    """Serialize an `Application` to YAML."""

    def __init__(self):
        self._yaml = YAML()
        self._configure_yaml()

    def _configure_yaml(self) -> None:
        self._yaml.indent(mapping=2, sequence=4, offset=2)
        self._yaml.default_flow_style = False
        self._yaml.allow_unicode = True
        self._yaml.width = 4096

    def to_dict(self, application: Application) -> dict[str, Any]:
        return prune_empty(application.model_dump(by_alias=True))

    def write(self, application: Application, stream: IO[str]) -> None:
        """
        Write the document separator followed by the Application.

        Raises:
            ManifestEncodeError: If the Application cannot be serialized
        """
        try:
            data = self.to_dict(application)
            stream.write(DOCUMENT_SEPARATOR)
            self._yaml.dump(data, stream)
        except (YAMLError, ValueError, TypeError) as exc:
            raise ManifestEncodeError(f"encode output: {exc}") from exc

        logger.debug(f"Wrote Application '{application.metadata.name}'")

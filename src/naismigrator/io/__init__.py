from .reader import ManifestReader
from .writer import ManifestWriter

__all__ = ["ManifestReader", "ManifestWriter"]

"""Site resource index."""
from .index import MISSING_TABLE_MESSAGE, ResourceIndexBuilder, parse_resource
from .models import Range, ResourceIndex, ResourcePath, path_basename

__all__ = [
    "MISSING_TABLE_MESSAGE",
    "ResourceIndexBuilder",
    "parse_resource",
    "Range",
    "ResourceIndex",
    "ResourcePath",
    "path_basename",
]

"""Resource data classes.

A site object owns one dynamic field per file. Each field value is a
``Resource`` record pointing at a Walrus blob.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class Range:
    """Optional byte range of a resource inside its blob."""

    start: Optional[int] = None
    end: Optional[int] = None


@dataclass(frozen=True)
class ResourcePath:
    """One file entry of a site.

    Attributes:
        path: Full path of the file within the site, e.g. ``/css/site.css``
        blob_id: Blob id as stored on chain (decimal ``u256`` or opaque string)
        blob_hash: Expected SHA-256 of the blob contents, empty when unknown
        range: Byte range to request from the aggregator
        version: Version of the resource object
        headers: Response headers declared for the file, in declaration order
        object_id: Id of the resource (dynamic field) object
    """

    path: str
    blob_id: str
    blob_hash: bytes = b""
    range: Optional[Range] = None
    version: int = 0
    headers: Dict[str, str] = field(default_factory=dict)
    object_id: str = ""

    @property
    def basename(self) -> str:
        return path_basename(self.path)


@dataclass
class ResourceIndex:
    """Resources of one site, keyed by file basename.

    Built for a single request and discarded afterwards.
    """

    object_id: str
    resources: Dict[str, ResourcePath] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.resources and not self.errors

    def get(self, basename: str) -> Optional[ResourcePath]:
        return self.resources.get(basename)

    def __len__(self) -> int:
        return len(self.resources)


def path_basename(path: str) -> str:
    """Last ``/`` separated segment of ``path``, or ``path`` when that is empty."""
    return path.split("/")[-1] or path


__all__ = ["Range", "ResourcePath", "ResourceIndex", "path_basename"]

"""Resolution and retrieval pipeline.

URL -> subdomain -> object id -> resource index -> blob bytes.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from loguru import logger

from walrus_gateway.domain.parsing import DomainDetails, get_domain, get_subdomain_and_path, validate_url
from walrus_gateway.resolvers.object_resolver import ObjectResolver
from walrus_gateway.resources.index import ResourceIndexBuilder
from walrus_gateway.resources.models import ResourceIndex, ResourcePath, path_basename
from walrus_gateway.shared.encoding import normalize_blob_id
from walrus_gateway.shared.exceptions import EmptySiteError, GatewayError, NotFoundError
from walrus_gateway.walrus.aggregator import BlobRetriever, RetrievedBlob

INDEX_FILE = "index.html"


@dataclass
class FileResult:
    """Outcome of fetching one file of a site."""

    blob_id: Optional[str]
    content: Optional[str]
    size: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"blob_id": self.blob_id, "content": self.content}
        if self.error is None:
            data["size"] = self.size
        else:
            data["error"] = self.error
        return data


@dataclass
class SitePayload:
    """Every servable file of a site, keyed by basename."""

    object_id: str
    results: Dict[str, FileResult] = field(default_factory=dict)
    time_stamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def is_empty(self) -> bool:
        return not self.results


class UrlFetcher:
    """
    Includes all the logic for fetching the contents of a Walrus site URL.
    """

    def __init__(
        self,
        resolver: ObjectResolver,
        index_builder: ResourceIndexBuilder,
        retriever: BlobRetriever,
        portal_name_length: int,
        portal_domain: Optional[str] = None,
    ):
        self.resolver = resolver
        self.index_builder = index_builder
        self.retriever = retriever
        self.portal_name_length = portal_name_length
        self.portal_domain = portal_domain.lower() if portal_domain else None

    def parse(self, url: str) -> DomainDetails:
        """
        Parse ``url`` into subdomain and path.

        Raises:
            BadInputError: url is malformed
            NotFoundError: url is not under this portal or has no subdomain
        """
        parsed = validate_url(url)
        if self.portal_domain and get_domain(parsed, self.portal_name_length) != self.portal_domain:
            logger.info(f"URL {url} does not target portal domain {self.portal_domain}")
            raise NotFoundError("Could not resolve portal object ID from the provided URL.")

        details = get_subdomain_and_path(parsed, self.portal_name_length)
        if details is None or not details.subdomain:
            raise NotFoundError("Could not resolve portal object ID from the provided URL.")
        return details

    async def resolve_object_id(self, url: str) -> Tuple[DomainDetails, str]:
        """Parse ``url`` and resolve its subdomain to an object id."""
        details = self.parse(url)
        logger.info(
            f"Resolving the subdomain to an object ID and retrieving its resources: "
            f"subdomain={details.subdomain}, path={details.path}"
        )
        object_id = await self.resolver.resolve(details.subdomain)
        return details, object_id

    async def build_index(self, object_id: str) -> ResourceIndex:
        return await self.index_builder.build(object_id)

    async def resolve_and_fetch(self, url: str) -> RetrievedBlob:
        """
        Resolve ``url`` and fetch the bytes of the file its path names.

        Raises:
            BadInputError: url is malformed
            NotFoundError: nothing matches the subdomain, the object or the file
            EmptySiteError: the site resolved but holds no servable resources
            UpstreamUnavailableError: the registry or the aggregator is unreachable
            IntegrityMismatchError: the fetched bytes failed the hash check
        """
        details, object_id = await self.resolve_object_id(url)
        index = await self.build_index(object_id)
        if index.is_empty:
            raise EmptySiteError(f"Site {object_id} contains no resources.")

        path = details.path + INDEX_FILE if details.path.endswith("/") else details.path
        resource = index.get(path_basename(path))
        if resource is None:
            raise NotFoundError(f"Resource {path} not found in site {object_id}.")

        blob = await self.retriever.retrieve(resource)
        logger.info(f"Successfully fetched resource {resource.path} of {object_id}")
        return blob

    async def fetch_site(self, url: str) -> SitePayload:
        """
        Resolve ``url`` and fetch every servable file of the site as text.

        Per-file failures are reported in the payload instead of aborting.
        """
        _, object_id = await self.resolve_object_id(url)
        index = await self.build_index(object_id)
        payload = SitePayload(object_id=object_id)
        if index.is_empty:
            return payload

        for file_name, error in index.errors.items():
            payload.results[file_name] = FileResult(blob_id=None, content=None, error=error)

        names = list(index.resources)
        fetched = await asyncio.gather(*(self._fetch_file(index.resources[name]) for name in names))
        payload.results.update(zip(names, fetched))

        logger.info(f"Finished processing all blobs of {object_id}: {list(payload.results)}")
        return payload

    async def _fetch_file(self, resource: ResourcePath) -> FileResult:
        try:
            blob = await self.retriever.retrieve(resource)
        except GatewayError as e:
            logger.error(f"Error fetching blob for {resource.path}: {e}")
            return FileResult(blob_id=None, content=None, error=str(e))

        content = blob.content.decode("utf-8", errors="replace")
        return FileResult(blob_id=normalize_blob_id(resource.blob_id), content=content, size=len(content))


__all__ = ["UrlFetcher", "SitePayload", "FileResult", "INDEX_FILE"]

"""API routes"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, Response
from loguru import logger

from walrus_gateway.config import Config
from walrus_gateway.services.url_fetcher import UrlFetcher
from walrus_gateway.shared.exceptions import BadInputError, EmptySiteError, GatewayError

from .dependencies import get_app_config, get_url_fetcher
from .errors import internal_error_body
from .schemas import ErrorResponse, FetchBlobsResponse, HealthResponse, SiteData

router = APIRouter()

EMPTY_SITE_MESSAGE = "Portal found, but it contains no blobs."
SUCCESS_MESSAGE = "Successfully fetched data"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or malformed name parameter"},
    404: {"model": ErrorResponse, "description": "Site, blob table or file not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
    503: {"model": ErrorResponse, "description": "Registry or aggregator unreachable"},
}


def _require_name(name: Optional[str]) -> str:
    if not name:
        raise BadInputError("Name parameter is required")
    return name


@router.get("/health", response_model=HealthResponse)
async def health_check(config: Config = Depends(get_app_config)):
    """Health check"""
    return HealthResponse(status="ok", network=config.walrus_network)


@router.get("/fetch-blobs", response_model=FetchBlobsResponse, responses=ERROR_RESPONSES)
async def fetch_blobs(
    request: Request,
    name: Optional[str] = Query(None, description="Site URL, e.g. https://flatland.wal.app/"),
    fetcher: UrlFetcher = Depends(get_url_fetcher),
    config: Config = Depends(get_app_config),
):
    """
    Resolve a site URL and return every servable file of the site.

    The subdomain is resolved to a site object, the object's resources are
    listed and each allowed file is fetched from the Walrus aggregator.
    """
    url = _require_name(name)
    try:
        payload = await fetcher.fetch_site(url)
    except GatewayError:
        raise
    except Exception as e:
        # Log full error with stack trace internally, hide details in production
        logger.exception(f"An unexpected error occurred: url={url}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=internal_error_body(request, e),
        )

    if payload.is_empty:
        return FetchBlobsResponse(message=EMPTY_SITE_MESSAGE, data={})

    return FetchBlobsResponse(
        message=SUCCESS_MESSAGE,
        data=SiteData(
            results={file_name: result.to_dict() for file_name, result in payload.results.items()},
            object_id=payload.object_id,
            network=config.walrus_network,
            time_stamp=payload.time_stamp,
        ),
    )


@router.get("/fetch-blob", responses=ERROR_RESPONSES)
async def fetch_blob(
    request: Request,
    name: Optional[str] = Query(None, description="File URL, e.g. https://flatland.wal.app/index.html"),
    fetcher: UrlFetcher = Depends(get_url_fetcher),
):
    """
    Serve the raw bytes of one file of a site.

    A path ending in ``/`` serves ``index.html``. Response headers carry the
    resource headers plus the resource object version, object ID and fetch time.
    """
    url = _require_name(name)
    try:
        blob = await fetcher.resolve_and_fetch(url)
    except EmptySiteError:
        return Response(content=b"", status_code=status.HTTP_200_OK)
    except GatewayError:
        raise
    except Exception as e:
        logger.exception(f"An unexpected error occurred: url={url}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=internal_error_body(request, e),
        )

    return Response(content=blob.content, headers=blob.headers)

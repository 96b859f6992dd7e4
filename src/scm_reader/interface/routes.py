"""API routes — thin controllers that delegate to the reader registry."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, Response

from scm_reader.domain.entities import ReadTreeOptions, SearchOptions
from scm_reader.interface.dependencies import get_registry
from scm_reader.interface.schemas import HealthStatus, SearchFile, SearchResult
from scm_reader.services.url_reader_registry import UrlReaderRegistry

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, str]] = {
    304: {"description": "Unchanged since the If-None-Match revision"},
    400: {"description": "No integration matches the URL's host"},
    404: {"description": "Resource not found upstream"},
    413: {"description": "Archive exceeds the extraction limit"},
    422: {"description": "Malformed repository URL"},
    429: {"description": "Upstream rate limit exceeded"},
    502: {"description": "Upstream failure"},
}


def _parse_if_none_match(value: str | None) -> str | None:
    if not value:
        return None
    value = value.strip()
    if value.startswith("W/"):
        value = value[2:]
    return value.strip('"') or None


@router.get("/read", responses=_ERROR_RESPONSES)
async def read(
    url: str = Query(..., description="URL of a single file"),
    registry: UrlReaderRegistry = Depends(get_registry),
) -> Response:
    """Return the raw bytes of a single file."""
    data = await registry.read(url)
    return Response(content=data, media_type="application/octet-stream")


@router.get("/tree", responses=_ERROR_RESPONSES)
async def read_tree(
    url: str = Query(..., description="URL of a directory"),
    if_none_match: str | None = Header(default=None),
    registry: UrlReaderRegistry = Depends(get_registry),
) -> Response:
    """Return the directory as a gzip tarball, tagged with its commit sha."""
    tree = await registry.read_tree(
        url, ReadTreeOptions(etag=_parse_if_none_match(if_none_match))
    )
    return Response(
        content=await tree.archive(),
        media_type="application/gzip",
        headers={"ETag": f'"{tree.etag}"'},
    )


@router.get("/search", response_model=SearchResult, responses=_ERROR_RESPONSES)
async def search(
    response: Response,
    url: str = Query(..., description="Repository URL whose path is a glob"),
    if_none_match: str | None = Header(default=None),
    registry: UrlReaderRegistry = Depends(get_registry),
) -> SearchResult:
    """List the files matching the glob in the URL's path."""
    result = await registry.search(
        url, SearchOptions(etag=_parse_if_none_match(if_none_match))
    )
    response.headers["ETag"] = f'"{result.etag}"'
    return SearchResult(
        etag=result.etag,
        files=[SearchFile(path=f.path) for f in result.files],
    )


@router.get("/health", response_model=HealthStatus, include_in_schema=False)
async def health(registry: UrlReaderRegistry = Depends(get_registry)) -> HealthStatus:
    return HealthStatus(readers=str(registry))

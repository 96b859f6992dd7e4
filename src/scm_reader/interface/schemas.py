"""Pydantic response DTOs for the API boundary."""

from __future__ import annotations

from pydantic import BaseModel


class SearchFile(BaseModel):
    """One file matched by ``GET /search``."""

    path: str


class SearchResult(BaseModel):
    """Successful response from ``GET /search``."""

    etag: str
    files: list[SearchFile]


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str


class HealthStatus(BaseModel):
    """Liveness report listing the configured readers."""

    status: str = "ok"
    readers: str

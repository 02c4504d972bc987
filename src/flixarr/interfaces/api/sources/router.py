"""Source listing and resolution endpoints."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from flixarr.domain.entities.errors import ServerNotFoundError, ValidationError
from flixarr.domain.entities.sources import ServerSelector
from flixarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["sources"])


def _error_response(exc: Exception, **context: Any) -> JSONResponse:
    """Map a domain error to its HTTP status with an ``{"error": ...}`` body."""
    if isinstance(exc, ValidationError):
        status = 400
    elif isinstance(exc, ServerNotFoundError):
        status = 404
    else:
        status = 500
        log.error(
            "sources_request_failed",
            error_type=type(exc).__name__,
            error=str(exc),
            **context,
        )
    return JSONResponse(status_code=status, content={"error": str(exc)})


@router.get("/servers/{media_id}")
async def list_servers(
    media_id: str,
    request: Request,
    kind: str = "movie",
) -> JSONResponse:
    """List the hosting servers offered for a catalog id."""
    state = cast(AppState, request.app.state)
    try:
        servers = await state.sources_uc.list_servers(media_id, kind)  # type: ignore[arg-type]
    except Exception as exc:  # noqa: BLE001
        return _error_response(exc, media_id=media_id, media_kind=kind)

    if not servers:
        return JSONResponse(status_code=404, content={"error": "No servers found"})
    return JSONResponse(content=[s.to_dict() for s in servers])


@router.get("/{kind}/embed/{media_id}")
async def resolve_all_servers(
    kind: str,
    media_id: str,
    request: Request,
) -> JSONResponse:
    """Resolve every server; failed servers are left out of ``sources``."""
    state = cast(AppState, request.app.state)
    try:
        result = await state.sources_uc.resolve_all(media_id, kind)  # type: ignore[arg-type]
    except Exception as exc:  # noqa: BLE001
        return _error_response(exc, media_id=media_id, media_kind=kind)
    return JSONResponse(content=result.to_dict())


@router.get("/{kind}/embed/{media_id}/server")
async def resolve_named_server(
    kind: str,
    media_id: str,
    request: Request,
    server: str = "",
) -> JSONResponse:
    """Resolve one server picked by display name (case-insensitive)."""
    state = cast(AppState, request.app.state)
    try:
        source = await state.sources_uc.resolve_one(media_id, server, kind)  # type: ignore[arg-type]
    except Exception as exc:  # noqa: BLE001
        return _error_response(exc, media_id=media_id, media_kind=kind, server=server)
    return JSONResponse(content=source.to_dict())


@router.get("/sources/{media_id}")
async def resolve_source(
    media_id: str,
    request: Request,
    server: str = "",
    name: str = "",
    kind: str = "movie",
) -> JSONResponse:
    """Resolve one server by name, or decode an embed URL directly.

    When *server* is an absolute http(s) URL the listing is skipped; *name*
    then optionally labels the server family (``UpCloud``, ``MixDrop``...).
    """
    state = cast(AppState, request.app.state)
    try:
        selector = ServerSelector.parse(server, hint=name)
        source = await state.sources_uc.resolve_one(media_id, selector, kind)  # type: ignore[arg-type]
    except Exception as exc:  # noqa: BLE001
        return _error_response(exc, media_id=media_id, media_kind=kind, server=server)
    return JSONResponse(content=source.to_dict())

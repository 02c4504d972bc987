"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from flixarr.application.use_cases.source_resolver import SourceResolver
from flixarr.application.use_cases.sources import SourcesUseCase
from flixarr.infrastructure.catalog.server_directory import HttpxServerDirectory
from flixarr.infrastructure.decoder.process import SubprocessDecoder
from flixarr.infrastructure.extractors.source_extractor import (
    SourceExtractor,
    build_profiles,
)
from flixarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP client (required by the server directory)
        2. Decoder runner
        3. Source extractor (uses decoder)
        4. Source resolver + use case (use directory + extractor)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client for the catalog site
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.upstream_timeout_seconds),
        headers={"User-Agent": config.upstream_user_agent},
        follow_redirects=config.upstream_follow_redirects,
    )
    log.info(
        "http_client_initialized",
        base_url=config.upstream_base_url,
        timeout_seconds=config.upstream_timeout_seconds,
    )

    # 2) Decoder runner (script located lazily, per decode)
    state.decoder = SubprocessDecoder(
        command=config.decoder.command,
        script_name=config.decoder.script_name,
        script_path=config.decoder.script_path,
        timeout_seconds=config.decoder.timeout_seconds,
        max_concurrent=config.decoder.max_concurrent,
    )
    log.info(
        "decoder_initialized",
        command=config.decoder.command,
        script_name=config.decoder.script_name,
        available=state.decoder.is_available(),
        max_concurrent=config.decoder.max_concurrent,
    )

    # 3) Extractor with per-server-family referrers
    extractor = SourceExtractor(
        decoder=state.decoder,
        profiles=build_profiles(
            base_url=config.upstream_base_url,
            mixdrop_referrer=config.decoder.mixdrop_referrer,
        ),
    )

    # 4) Directory, resolver, use case
    directory = HttpxServerDirectory(
        http_client=state.http_client,
        base_url=config.upstream_base_url,
    )
    state.sources_uc = SourcesUseCase(
        directory=directory,
        resolver=SourceResolver(directory=directory, extractor=extractor),
        resolution_timeout=config.resolution.timeout_seconds,
    )
    log.info(
        "sources_use_case_initialized",
        resolution_timeout_seconds=config.resolution.timeout_seconds,
    )

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")

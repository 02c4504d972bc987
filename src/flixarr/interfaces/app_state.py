"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from flixarr.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from flixarr.application.use_cases.sources import SourcesUseCase
    from flixarr.infrastructure.decoder.process import SubprocessDecoder


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    decoder: SubprocessDecoder

    # Application Services
    sources_uc: SourcesUseCase

"""Source listing and resolution use case.

catalog id -> server listing -> per-server (redirect lookup -> decode)
-> ResolvedSource / AggregateResult.
"""

from __future__ import annotations

import asyncio

import structlog

from flixarr.domain.entities.errors import ResolutionTimeoutError
from flixarr.domain.entities.sources import (
    AggregateResult,
    MediaKind,
    ResolutionOutcome,
    ResolvedSource,
    ServerDescriptor,
    ServerSelector,
    validate_media_id,
    validate_media_kind,
)
from flixarr.domain.ports.server_directory import ServerDirectoryPort

from .source_resolver import SourceResolver

log = structlog.get_logger(__name__)


class SourcesUseCase:
    """Lists servers and resolves one or all of them for a catalog id.

    Every single-server resolution runs under ``resolution_timeout``.
    In "all servers" mode each server is isolated: its failure is logged
    and recorded, never raised.
    """

    def __init__(
        self,
        *,
        directory: ServerDirectoryPort,
        resolver: SourceResolver,
        resolution_timeout: float = 45.0,
    ) -> None:
        self._directory = directory
        self._resolver = resolver
        self._timeout = resolution_timeout

    async def list_servers(
        self, media_id: str, kind: MediaKind = "movie"
    ) -> list[ServerDescriptor]:
        media_id = validate_media_id(media_id)
        kind = validate_media_kind(kind)
        return await self._directory.list_servers(media_id, kind)

    async def resolve_one(
        self,
        media_id: str,
        server: str | ServerSelector,
        kind: MediaKind = "movie",
    ) -> ResolvedSource:
        """Resolve a single server; every failure propagates.

        Raises:
            ValidationError: Bad id, kind or empty server parameter.
            ServerNotFoundError: The server name is not in the listing.
            ResolutionTimeoutError: The resolution exceeded its deadline.
        """
        media_id = validate_media_id(media_id)
        kind = validate_media_kind(kind)
        selector = (
            server if isinstance(server, ServerSelector) else ServerSelector.parse(server)
        )
        label = selector.name or selector.embed_url
        return await self._with_timeout(
            self._resolver.resolve(media_id, selector, kind), label
        )

    async def resolve_all(
        self, media_id: str, kind: MediaKind = "movie"
    ) -> AggregateResult:
        """Resolve every listed server concurrently.

        Only discovery failures propagate. Per-server failures end up in
        ``AggregateResult.failures``; ``sources`` holds the successes in
        no guaranteed order.
        """
        media_id = validate_media_id(media_id)
        kind = validate_media_kind(kind)
        servers = await self._directory.list_servers(media_id, kind)

        outcomes = await asyncio.gather(
            *(self._resolve_outcome(media_id, s) for s in servers)
        )
        result = AggregateResult.from_outcomes(media_id, list(outcomes))

        log.info(
            "sources_aggregated",
            media_id=media_id,
            media_kind=kind,
            servers=len(servers),
            resolved=len(result.sources),
            failed=len(result.failures),
        )
        return result

    async def _resolve_outcome(
        self, media_id: str, descriptor: ServerDescriptor
    ) -> ResolutionOutcome:
        try:
            source = await self._with_timeout(
                self._resolver.resolve_descriptor(descriptor),
                descriptor.display_name,
            )
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "source_resolution_failed",
                media_id=media_id,
                server=descriptor.display_name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return ResolutionOutcome(server_name=descriptor.display_name, error=exc)
        return ResolutionOutcome(server_name=descriptor.display_name, source=source)

    async def _with_timeout(self, coro, label: str) -> ResolvedSource:
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except TimeoutError:
            log.warning(
                "source_resolution_timeout",
                server=label,
                timeout_seconds=self._timeout,
            )
            raise ResolutionTimeoutError(
                f"Resolution of server {label} timed out after {self._timeout}s"
            ) from None

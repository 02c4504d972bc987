"""Single-server resolution: redirect lookup, then decode."""

from __future__ import annotations

from urllib.parse import urlparse

import structlog

from flixarr.domain.entities.errors import ServerNotFoundError
from flixarr.domain.entities.sources import (
    MediaKind,
    ResolvedSource,
    ServerDescriptor,
    ServerKind,
    ServerSelector,
)
from flixarr.domain.ports.server_directory import ServerDirectoryPort
from flixarr.domain.ports.source_extractor import SourceExtractorPort

log = structlog.get_logger(__name__)


def extract_domain(url: str) -> str:
    """Extract the second-level domain from a URL.

    Returns the second-to-last segment of the hostname (e.g.
    ``"upcloud"`` from ``"https://www.upcloud.io/e/abc"``).

    Returns ``""`` when the URL cannot be parsed or has fewer than
    two hostname segments.
    """
    try:
        hostname = urlparse(url).hostname or ""
    except ValueError:
        return ""
    parts = hostname.split(".")
    return parts[-2] if len(parts) >= 2 else ""


class SourceResolver:
    """Resolves one server of a catalog id to a playable ``ResolvedSource``."""

    def __init__(
        self,
        directory: ServerDirectoryPort,
        extractor: SourceExtractorPort,
    ) -> None:
        self._directory = directory
        self._extractor = extractor

    async def resolve(
        self,
        media_id: str,
        selector: ServerSelector,
        kind: MediaKind = "movie",
    ) -> ResolvedSource:
        """Resolve the server picked by *selector*.

        An embed-URL selector skips discovery entirely; a name selector
        lists servers and matches case-insensitively.

        Raises:
            ServerNotFoundError: No discovered server matches the name.
        """
        if selector.is_embed_url:
            return await self._resolve_embed_url(selector)

        servers = await self._directory.list_servers(media_id, kind)
        for descriptor in servers:
            if selector.matches(descriptor):
                return await self.resolve_descriptor(descriptor)

        log.info(
            "server_not_found",
            media_id=media_id,
            server=selector.name,
            available=[s.display_name for s in servers],
        )
        raise ServerNotFoundError(f"Server {selector.name} not found")

    async def resolve_descriptor(self, descriptor: ServerDescriptor) -> ResolvedSource:
        embed_url = await self._directory.resolve_embed_url(descriptor)
        embed = await self._extractor.extract(embed_url, kind=descriptor.kind)
        source = ResolvedSource.from_embed_sources(
            descriptor.display_name, embed, embed_url=embed_url
        )
        log.debug(
            "source_resolved",
            server=descriptor.display_name,
            is_m3u8=source.is_m3u8,
            subtitles=len(source.subtitles),
        )
        return source

    async def _resolve_embed_url(self, selector: ServerSelector) -> ResolvedSource:
        name = selector.name or extract_domain(selector.embed_url)
        embed = await self._extractor.extract(
            selector.embed_url, kind=ServerKind.from_name(name)
        )
        return ResolvedSource.from_embed_sources(
            name, embed, embed_url=selector.embed_url
        )

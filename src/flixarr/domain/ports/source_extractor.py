"""Port for extracting stream sources from one embed URL."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from flixarr.domain.entities.sources import EmbedSources, ServerKind


@runtime_checkable
class SourceExtractorPort(Protocol):
    async def extract(
        self,
        embed_url: str,
        *,
        kind: ServerKind = ServerKind.GENERIC,
        referrer: str | None = None,
    ) -> EmbedSources:
        """Run one decode for *embed_url* (no retry).

        When *referrer* is omitted the server family's default is used.
        """
        ...

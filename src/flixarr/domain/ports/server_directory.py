"""Port for discovering the hosting servers offered for a catalog id."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from flixarr.domain.entities.sources import MediaKind, ServerDescriptor


@runtime_checkable
class ServerDirectoryPort(Protocol):
    async def list_servers(
        self, media_id: str, kind: MediaKind
    ) -> list[ServerDescriptor]:
        """Return the servers offered for *media_id*, in listing order.

        Raises:
            UpstreamError: Listing page unreachable or structure unexpected.
        """
        ...

    async def resolve_embed_url(self, descriptor: ServerDescriptor) -> str:
        """Exchange a server's reference for its concrete embed URL.

        Raises:
            UpstreamError: The referenced resource has no resolvable link.
        """
        ...

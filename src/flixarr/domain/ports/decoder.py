"""Port for the out-of-process embed decoder."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from flixarr.domain.entities.sources import EmbedSources


@runtime_checkable
class DecoderPort(Protocol):
    """Turns an embed page URL into structured stream descriptors.

    Implementations run the decoding step in an isolated process; its
    internal method is opaque to the rest of the system.
    """

    async def decode(self, embed_url: str, referrer: str) -> EmbedSources:
        """Decode *embed_url*, presenting *referrer* to the target site.

        Raises:
            DecoderNotFoundError: No decoder could be located.
            DecodeError: The decoder failed or its output was malformed.
        """
        ...

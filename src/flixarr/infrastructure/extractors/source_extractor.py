"""Per-server-family decoder invocation."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from flixarr.domain.entities.sources import EmbedSources, ServerKind
from flixarr.domain.ports.decoder import DecoderPort

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ExtractorProfile:
    """How to present a decode request for one server family."""

    default_referrer: str


def build_profiles(
    base_url: str, mixdrop_referrer: str
) -> dict[ServerKind, ExtractorProfile]:
    """Default profiles: MixDrop has its own referrer, everything else the site."""
    site = ExtractorProfile(default_referrer=base_url)
    return {
        ServerKind.UPCLOUD: site,
        ServerKind.VIDCLOUD: site,
        ServerKind.MIXDROP: ExtractorProfile(default_referrer=mixdrop_referrer),
        ServerKind.GENERIC: site,
    }


class SourceExtractor:
    """Decodes embed URLs, choosing the referrer by server family.

    A single decode attempt is made; failures propagate unchanged.
    """

    def __init__(
        self,
        decoder: DecoderPort,
        profiles: dict[ServerKind, ExtractorProfile],
    ) -> None:
        if ServerKind.GENERIC not in profiles:
            raise ValueError("profiles must include ServerKind.GENERIC")
        self._decoder = decoder
        self._profiles = dict(profiles)

    def referrer_for(self, kind: ServerKind) -> str:
        profile = self._profiles.get(kind) or self._profiles[ServerKind.GENERIC]
        return profile.default_referrer

    async def extract(
        self,
        embed_url: str,
        *,
        kind: ServerKind = ServerKind.GENERIC,
        referrer: str | None = None,
    ) -> EmbedSources:
        effective = referrer or self.referrer_for(kind)
        log.debug(
            "source_extract_started",
            embed_url=embed_url,
            server_kind=kind.value,
            referrer=effective,
        )
        return await self._decoder.decode(embed_url, effective)

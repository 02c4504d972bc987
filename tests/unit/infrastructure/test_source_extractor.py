"""Tests for SourceExtractor and its per-family profiles."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from flixarr.domain.entities.errors import DecodeError
from flixarr.domain.entities.sources import EmbedSources, ServerKind
from flixarr.domain.ports.source_extractor import SourceExtractorPort
from flixarr.infrastructure.decoder.process import SubprocessDecoder
from flixarr.infrastructure.extractors.source_extractor import (
    ExtractorProfile,
    SourceExtractor,
    build_profiles,
)

_SITE = "https://catalog.example"
_MIXDROP_REF = "https://mixdrop-referrer.example"


def _extractor(decoder: AsyncMock) -> SourceExtractor:
    return SourceExtractor(decoder, build_profiles(_SITE, _MIXDROP_REF))


class TestBuildProfiles:
    def test_every_kind_has_a_profile(self) -> None:
        profiles = build_profiles(_SITE, _MIXDROP_REF)
        assert set(profiles) == set(ServerKind)

    def test_mixdrop_has_own_referrer(self) -> None:
        profiles = build_profiles(_SITE, _MIXDROP_REF)
        assert profiles[ServerKind.MIXDROP].default_referrer == _MIXDROP_REF
        assert profiles[ServerKind.UPCLOUD].default_referrer == _SITE
        assert profiles[ServerKind.VIDCLOUD].default_referrer == _SITE


class TestSourceExtractor:
    def test_satisfies_port(self) -> None:
        assert isinstance(_extractor(AsyncMock()), SourceExtractorPort)

    def test_requires_generic_profile(self) -> None:
        with pytest.raises(ValueError):
            SourceExtractor(
                AsyncMock(), {ServerKind.UPCLOUD: ExtractorProfile(default_referrer=_SITE)}
            )

    @pytest.mark.parametrize(
        ("kind", "expected_referrer"),
        [
            (ServerKind.UPCLOUD, _SITE),
            (ServerKind.VIDCLOUD, _SITE),
            (ServerKind.MIXDROP, _MIXDROP_REF),
            (ServerKind.GENERIC, _SITE),
        ],
    )
    @pytest.mark.asyncio()
    async def test_default_referrer_by_kind(
        self,
        kind: ServerKind,
        expected_referrer: str,
        hls_embed_sources: EmbedSources,
    ) -> None:
        decoder = AsyncMock()
        decoder.decode = AsyncMock(return_value=hls_embed_sources)

        result = await _extractor(decoder).extract("https://embed.example/e/1", kind=kind)

        assert result is hls_embed_sources
        decoder.decode.assert_awaited_once_with(
            "https://embed.example/e/1", expected_referrer
        )

    @pytest.mark.asyncio()
    async def test_supplied_referrer_wins(self, hls_embed_sources: EmbedSources) -> None:
        decoder = AsyncMock()
        decoder.decode = AsyncMock(return_value=hls_embed_sources)

        await _extractor(decoder).extract(
            "https://embed.example/e/1",
            kind=ServerKind.MIXDROP,
            referrer="https://other.example",
        )

        decoder.decode.assert_awaited_once_with(
            "https://embed.example/e/1", "https://other.example"
        )

    @pytest.mark.asyncio()
    async def test_single_attempt_and_error_propagates(self) -> None:
        decoder = AsyncMock()
        decoder.decode = AsyncMock(side_effect=DecodeError("bad", exit_code=1))

        with pytest.raises(DecodeError):
            await _extractor(decoder).extract("https://embed.example/e/1")
        assert decoder.decode.await_count == 1

    @pytest.mark.asyncio()
    async def test_with_real_subprocess(self, fake_decoder: SubprocessDecoder) -> None:
        extractor = SourceExtractor(fake_decoder, build_profiles(_SITE, _MIXDROP_REF))

        result = await extractor.extract(
            "https://mixdrop.example/e/xyz", kind=ServerKind.MIXDROP
        )

        assert result.sources[0].stream_type == "hls"
        # fake decoder echoes the referrer as the second track label
        assert result.tracks[1].label == _MIXDROP_REF

"""Shared test fixtures for the Flixarr test suite."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from flixarr.domain.entities.sources import (
    EmbedSource,
    EmbedSources,
    ServerDescriptor,
    ServerKind,
    SubtitleTrack,
)
from flixarr.infrastructure.decoder.process import SubprocessDecoder

BASE_URL = "https://catalog.example"

# ---------------------------------------------------------------------------
# Fake decoder script
# ---------------------------------------------------------------------------

# Behaviour is keyed off the embed URL so one script covers every case.
_FAKE_DECODER = textwrap.dedent(
    """
    import json
    import os
    import sys
    import time

    args = dict(a[2:].split("=", 1) for a in sys.argv[1:] if a.startswith("--"))
    url = args.get("embed-url", "")
    referrer = args.get("referrer", "")

    pid_file = os.environ.get("FAKE_DECODER_PID_FILE")
    if pid_file:
        with open(pid_file, "w") as fh:
            fh.write(str(os.getpid()))

    if "fail" in url:
        sys.stderr.write("boom: upstream key rotation\\n")
        sys.exit(3)
    if "garbage" in url:
        print("this is not json")
        sys.exit(0)
    if "nosources" in url:
        print(json.dumps({"tracks": []}))
        sys.exit(0)
    if "empty" in url:
        print(json.dumps({"sources": [], "tracks": []}))
        sys.exit(0)
    if "sleep" in url:
        time.sleep(30)
        sys.exit(0)

    payload = {
        "sources": [
            {"file": url + "/master.m3u8", "type": "hls"},
            {"file": url + "/backup.mp4", "type": "mp4"},
        ],
        "tracks": [
            {"file": url + "/en.vtt", "label": "English", "kind": "captions", "default": True},
            {"file": url + "/es.vtt", "label": referrer, "kind": "captions"},
        ],
        "t": 0,
        "server": 1,
    }
    print("  " + json.dumps(payload) + "\\n")
    """
)


@pytest.fixture()
def fake_decoder_script(tmp_path: Path) -> Path:
    """Write the fake decoder to a temp dir and return its path."""
    path = tmp_path / "rabbit.py"
    path.write_text(_FAKE_DECODER, encoding="utf-8")
    return path


@pytest.fixture()
def fake_decoder(fake_decoder_script: Path) -> SubprocessDecoder:
    """SubprocessDecoder running the fake script with this interpreter."""
    return SubprocessDecoder(
        command=sys.executable,
        script_name=fake_decoder_script.name,
        script_path=fake_decoder_script,
        timeout_seconds=10.0,
        max_concurrent=2,
    )


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def upcloud() -> ServerDescriptor:
    return ServerDescriptor(
        id="101",
        display_name="UpCloud",
        reference=f"{BASE_URL}/ajax/episode/sources/101",
        kind=ServerKind.UPCLOUD,
    )


@pytest.fixture()
def mixdrop() -> ServerDescriptor:
    return ServerDescriptor(
        id="102",
        display_name="MixDrop",
        reference=f"{BASE_URL}/ajax/episode/sources/102",
        kind=ServerKind.MIXDROP,
    )


@pytest.fixture()
def vidcloud() -> ServerDescriptor:
    return ServerDescriptor(
        id="103",
        display_name="VidCloud",
        reference=f"{BASE_URL}/ajax/episode/sources/103",
        kind=ServerKind.VIDCLOUD,
    )


@pytest.fixture()
def hls_embed_sources() -> EmbedSources:
    """Decoder output with an HLS first source and a default subtitle."""
    return EmbedSources(
        sources=(
            EmbedSource(file_url="https://cdn.example/a/master.m3u8", stream_type="hls"),
            EmbedSource(file_url="https://cdn.example/a/low.mp4", stream_type="mp4"),
        ),
        tracks=(
            SubtitleTrack(
                file_url="https://cdn.example/a/en.vtt",
                label="English",
                kind="captions",
                is_default=True,
            ),
            SubtitleTrack(
                file_url="https://cdn.example/a/fr.vtt",
                label="French",
                kind="captions",
            ),
        ),
    )


@pytest.fixture()
def mp4_embed_sources() -> EmbedSources:
    return EmbedSources(
        sources=(EmbedSource(file_url="https://cdn.example/b/file.mp4", stream_type="mp4"),),
    )


# ---------------------------------------------------------------------------
# Port doubles
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_directory() -> AsyncMock:
    """ServerDirectoryPort double (configure per test)."""
    directory = AsyncMock()
    directory.list_servers = AsyncMock(return_value=[])
    directory.resolve_embed_url = AsyncMock(return_value="")
    return directory


@pytest.fixture()
def mock_extractor() -> AsyncMock:
    """SourceExtractorPort double (configure per test)."""
    extractor = AsyncMock()
    extractor.extract = AsyncMock()
    return extractor

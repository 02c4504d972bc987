"""Tests for decoder argv building, output parsing and script location."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from flixarr.domain.entities.errors import DecodeError, DecoderNotFoundError
from flixarr.infrastructure.decoder.contract import build_argv, parse_decoder_output
from flixarr.infrastructure.decoder.locator import candidate_paths, find_decoder_script


class TestBuildArgv:
    def test_flags_and_order(self) -> None:
        argv = build_argv(
            "node",
            Path("/opt/rabbit.js"),
            "https://embed.example/e/1?z=&k=1",
            "https://catalog.example",
        )
        assert argv == [
            "node",
            "/opt/rabbit.js",
            "--embed-url=https://embed.example/e/1?z=&k=1",
            "--referrer=https://catalog.example",
        ]


class TestParseDecoderOutput:
    def test_full_payload(self) -> None:
        out = json.dumps(
            {
                "sources": [{"file": "https://cdn/x.m3u8", "type": "hls"}],
                "tracks": [
                    {"file": "https://cdn/en.vtt", "label": "English", "kind": "captions", "default": True}
                ],
                "t": 5,
                "server": 4,
            }
        )
        result = parse_decoder_output(out)
        assert result.sources[0].file_url == "https://cdn/x.m3u8"
        assert result.sources[0].stream_type == "hls"
        assert result.tracks[0].is_default is True
        assert result.time_offset == 5
        assert result.server_index == 4

    def test_whitespace_tolerated(self) -> None:
        result = parse_decoder_output('\n  {"sources": [{"file": "f", "type": "mp4"}]}  \n')
        assert len(result.sources) == 1

    def test_defaults_for_missing_fields(self) -> None:
        result = parse_decoder_output('{"sources": [{"file": "f", "type": "mp4"}]}')
        assert result.tracks == ()
        assert result.time_offset == 0
        assert result.server_index == 1

    def test_track_without_default_flag(self) -> None:
        result = parse_decoder_output(
            '{"sources": [], "tracks": [{"file": "f.vtt", "label": "French", "kind": "captions"}]}'
        )
        assert result.tracks[0].is_default is None

    def test_order_preserved(self) -> None:
        payload = {
            "sources": [{"file": f"s{i}", "type": "hls"} for i in range(5)],
            "tracks": [{"file": f"t{i}", "label": str(i), "kind": "captions"} for i in range(3)],
        }
        result = parse_decoder_output(json.dumps(payload))
        assert [s.file_url for s in result.sources] == ["s0", "s1", "s2", "s3", "s4"]
        assert [t.label for t in result.tracks] == ["0", "1", "2"]

    def test_empty_sources_is_not_an_error_here(self) -> None:
        assert parse_decoder_output('{"sources": []}').sources == ()

    @pytest.mark.parametrize(
        "stdout",
        [
            "",
            "   ",
            "not json",
            "[1, 2, 3]",
            '{"tracks": []}',
            '{"sources": "nope"}',
            '{"sources": [{"type": "hls"}]}',
        ],
    )
    def test_malformed_output_raises(self, stdout: str) -> None:
        with pytest.raises(DecodeError):
            parse_decoder_output(stdout)


class TestLocator:
    def test_candidate_order(self, tmp_path: Path) -> None:
        pkg = tmp_path / "site" / "flixarr"
        explicit = tmp_path / "custom.js"
        paths = candidate_paths(
            "rabbit.js", explicit=explicit, package_dir=pkg, cwd=tmp_path / "work"
        )
        assert paths == [
            explicit,
            tmp_path / "site" / "rabbit.js",
            pkg / "rabbit.js",
            tmp_path / "work" / "rabbit.js",
        ]

    def test_first_existing_wins(self, tmp_path: Path) -> None:
        pkg = tmp_path / "site" / "flixarr"
        pkg.mkdir(parents=True)
        (pkg / "rabbit.js").write_text("// pkg")
        work = tmp_path / "work"
        work.mkdir()
        (work / "rabbit.js").write_text("// cwd")

        found = find_decoder_script("rabbit.js", package_dir=pkg, cwd=work)
        assert found == pkg / "rabbit.js"

    def test_falls_back_to_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "rabbit.js").write_text("//")
        found = find_decoder_script(
            "rabbit.js", package_dir=tmp_path / "nowhere" / "pkg", cwd=tmp_path
        )
        assert found == tmp_path / "rabbit.js"

    def test_missing_everywhere_raises(self, tmp_path: Path) -> None:
        with pytest.raises(DecoderNotFoundError, match="rabbit.js not found"):
            find_decoder_script(
                "rabbit.js",
                explicit=tmp_path / "missing.js",
                package_dir=tmp_path / "pkg",
                cwd=tmp_path / "work",
            )

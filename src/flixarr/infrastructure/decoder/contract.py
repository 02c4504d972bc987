"""Request/response contract of the external decoder process.

Invocation::

    <command> <script> --embed-url=<url> --referrer=<referrer>

Success is exit status 0 with one JSON object on stdout::

    {"sources": [{"file": "...", "type": "hls"}],
     "tracks": [{"file": "...", "label": "English", "kind": "captions", "default": true}],
     "t": 0,
     "server": 1}
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from flixarr.domain.entities.errors import DecodeError
from flixarr.domain.entities.sources import EmbedSource, EmbedSources, SubtitleTrack


class _SourcePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    file: str
    type: str


class _TrackPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    file: str
    label: str = ""
    kind: str = ""
    is_default: Optional[bool] = Field(default=None, alias="default")


class DecoderPayload(BaseModel):
    """Validated shape of the decoder's stdout document."""

    model_config = ConfigDict(extra="ignore")

    sources: list[_SourcePayload]
    tracks: list[_TrackPayload] = Field(default_factory=list)
    t: float = 0
    server: int = 1

    def to_embed_sources(self) -> EmbedSources:
        return EmbedSources(
            sources=tuple(
                EmbedSource(file_url=s.file, stream_type=s.type) for s in self.sources
            ),
            tracks=tuple(
                SubtitleTrack(
                    file_url=t.file,
                    label=t.label,
                    kind=t.kind,
                    is_default=t.is_default,
                )
                for t in self.tracks
            ),
            time_offset=self.t,
            server_index=self.server,
        )


def build_argv(
    command: str, script: Path, embed_url: str, referrer: str
) -> list[str]:
    """Build the decoder command line (no shell involved)."""
    return [
        command,
        str(script),
        f"--embed-url={embed_url}",
        f"--referrer={referrer}",
    ]


def parse_decoder_output(stdout: str) -> EmbedSources:
    """Parse the decoder's stdout into ``EmbedSources``.

    Surrounding whitespace is tolerated. Anything that is not a single
    object matching the contract raises ``DecodeError``; an empty
    ``sources`` list is returned as-is (the caller decides).
    """
    body = stdout.strip()
    if not body:
        raise DecodeError("Decoder produced no output", exit_code=0)
    try:
        payload = DecoderPayload.model_validate_json(body)
    except PydanticValidationError as exc:
        raise DecodeError(
            f"Malformed decoder output: {exc.error_count()} validation error(s): "
            f"{exc.errors(include_url=False)[0]['msg']}",
            exit_code=0,
        ) from exc
    return payload.to_embed_sources()

"""Domain entities for embed-source resolution.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from .errors import NoSourcesError, ValidationError

MediaKind = Literal["movie", "tv"]

# Stream type the decoder reports for segmented playlists
HLS_STREAM_TYPE = "hls"

# Quality label for first-source-wins selection (no quality ranking)
DEFAULT_QUALITY = "auto"

_MEDIA_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class ServerKind(str, Enum):
    """Upstream server families known to the extractor."""

    UPCLOUD = "upcloud"
    VIDCLOUD = "vidcloud"
    MIXDROP = "mixdrop"
    GENERIC = "generic"

    @classmethod
    def from_name(cls, name: str) -> ServerKind:
        """Map a server display name (e.g. ``"UpCloud"``) to its kind."""
        key = name.strip().lower()
        for kind in cls:
            if kind.value == key:
                return kind
        return cls.GENERIC


@dataclass(frozen=True)
class ServerDescriptor:
    """One hosting option offered for a catalog/episode id."""

    id: str
    display_name: str
    reference: str  # URL of the redirect-link endpoint
    kind: ServerKind = ServerKind.GENERIC

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.display_name, "url": self.reference}


@dataclass(frozen=True)
class EmbedSource:
    """One raw stream variant reported by the decoder."""

    file_url: str
    stream_type: str  # "hls", "mp4", ...


@dataclass(frozen=True)
class SubtitleTrack:
    """One subtitle/caption track reported alongside the sources."""

    file_url: str
    label: str
    kind: str
    is_default: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"file": self.file_url, "label": self.label, "kind": self.kind}
        if self.is_default:
            d["default"] = True
        return d


@dataclass(frozen=True)
class EmbedSources:
    """Full decoder output for one embed URL (order as emitted)."""

    sources: tuple[EmbedSource, ...] = ()
    tracks: tuple[SubtitleTrack, ...] = ()
    time_offset: float = 0
    server_index: int = 1


@dataclass(frozen=True)
class ResolvedSource:
    """Final answer for one server."""

    server_name: str
    url: str
    is_m3u8: bool
    quality: str = DEFAULT_QUALITY
    subtitles: tuple[SubtitleTrack, ...] = ()
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_embed_sources(
        cls,
        server_name: str,
        embed: EmbedSources,
        *,
        embed_url: str = "",
    ) -> ResolvedSource:
        """Build from decoder output using the first reported source.

        Raises:
            NoSourcesError: The decoder reported zero sources.
        """
        if not embed.sources:
            raise NoSourcesError(f"No sources found for server {server_name!r}")
        first = embed.sources[0]
        return cls(
            server_name=server_name,
            url=first.file_url,
            is_m3u8=first.stream_type == HLS_STREAM_TYPE,
            subtitles=embed.tracks,
            headers={"Referer": embed_url} if embed_url else {},
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "server": self.server_name,
            "url": self.url,
            "isM3U8": self.is_m3u8,
            "quality": self.quality,
            "subtitles": [t.to_dict() for t in self.subtitles],
        }
        if self.headers:
            d["headers"] = dict(self.headers)
        return d


@dataclass(frozen=True)
class ResolutionOutcome:
    """Per-server result of a fan-out: exactly one of source/error is set."""

    server_name: str
    source: ResolvedSource | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.source is not None


@dataclass(frozen=True)
class ServerFailure:
    """Diagnostic record for a server excluded from an aggregate."""

    server_name: str
    error_type: str
    message: str

    @classmethod
    def from_outcome(cls, outcome: ResolutionOutcome) -> ServerFailure:
        err = outcome.error
        return cls(
            server_name=outcome.server_name,
            error_type=type(err).__name__ if err is not None else "UnknownError",
            message=str(err) if err is not None else "",
        )


@dataclass(frozen=True)
class AggregateResult:
    """Answer for "all servers" mode. ``sources`` has no guaranteed order."""

    id: str
    sources: tuple[ResolvedSource, ...] = ()
    failures: tuple[ServerFailure, ...] = ()

    @classmethod
    def from_outcomes(
        cls, media_id: str, outcomes: list[ResolutionOutcome]
    ) -> AggregateResult:
        return cls(
            id=media_id,
            sources=tuple(o.source for o in outcomes if o.source is not None),
            failures=tuple(
                ServerFailure.from_outcome(o) for o in outcomes if not o.ok
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "sources": [s.to_dict() for s in self.sources]}


@dataclass(frozen=True)
class ServerSelector:
    """Selects a server by display name, or short-circuits with an embed URL.

    ``name`` is required for name selection; with ``embed_url`` it is an
    optional hint for the server family.
    """

    name: str = ""
    embed_url: str = ""

    @classmethod
    def parse(cls, raw: str, *, hint: str = "") -> ServerSelector:
        """Interpret *raw* as an embed URL when it is absolute http(s)."""
        value = (raw or "").strip()
        if not value:
            raise ValidationError("Server parameter is required")
        if value.startswith(("http://", "https://")):
            return cls(name=hint.strip(), embed_url=value)
        return cls(name=value)

    @property
    def is_embed_url(self) -> bool:
        return bool(self.embed_url)

    def matches(self, descriptor: ServerDescriptor) -> bool:
        """Case-insensitive exact match against a descriptor's display name."""
        return descriptor.display_name.strip().lower() == self.name.strip().lower()


def validate_media_id(media_id: str) -> str:
    """Return the stripped id or raise ``ValidationError``."""
    value = (media_id or "").strip()
    if not value:
        raise ValidationError("Media ID is required")
    if not _MEDIA_ID_RE.match(value):
        raise ValidationError(f"Invalid media ID format: {media_id!r}")
    return value


def validate_media_kind(kind: str) -> MediaKind:
    if kind == "movie":
        return "movie"
    if kind == "tv":
        return "tv"
    raise ValidationError(f"Invalid media kind: {kind!r} (expected 'movie' or 'tv')")


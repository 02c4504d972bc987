from .errors import (
    DecodeError,
    DecoderNotFoundError,
    NoSourcesError,
    ResolutionTimeoutError,
    ResolverError,
    ServerNotFoundError,
    UpstreamError,
    ValidationError,
)
from .sources import (
    DEFAULT_QUALITY,
    HLS_STREAM_TYPE,
    AggregateResult,
    EmbedSource,
    EmbedSources,
    MediaKind,
    ResolutionOutcome,
    ResolvedSource,
    ServerDescriptor,
    ServerFailure,
    ServerKind,
    ServerSelector,
    SubtitleTrack,
    validate_media_id,
    validate_media_kind,
)

__all__ = [
    "DEFAULT_QUALITY",
    "HLS_STREAM_TYPE",
    "AggregateResult",
    "DecodeError",
    "DecoderNotFoundError",
    "EmbedSource",
    "EmbedSources",
    "MediaKind",
    "NoSourcesError",
    "ResolutionOutcome",
    "ResolutionTimeoutError",
    "ResolvedSource",
    "ResolverError",
    "ServerDescriptor",
    "ServerFailure",
    "ServerKind",
    "ServerNotFoundError",
    "ServerSelector",
    "SubtitleTrack",
    "UpstreamError",
    "ValidationError",
    "validate_media_id",
    "validate_media_kind",
]

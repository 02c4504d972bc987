"""Error taxonomy for source resolution."""

from __future__ import annotations


class ResolverError(Exception):
    """Base error for source resolution domain/use cases."""


class ValidationError(ResolverError):
    """Malformed or missing id / server name input."""


class ServerNotFoundError(ResolverError):
    """Requested server name is absent from the discovery listing."""


class UpstreamError(ResolverError):
    """Catalog site unreachable or returned an unexpected structure."""


class DecoderNotFoundError(ResolverError):
    """Decoder script could not be found at any candidate location."""


class DecodeError(ResolverError):
    """Decoder process failed, timed out, or emitted unparseable output."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class NoSourcesError(ResolverError):
    """Decoder succeeded but reported zero stream sources."""


class ResolutionTimeoutError(ResolverError):
    """A single-server resolution exceeded its deadline."""

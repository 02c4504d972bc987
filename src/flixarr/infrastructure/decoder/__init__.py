from __future__ import annotations

from .contract import DecoderPayload, build_argv, parse_decoder_output
from .locator import candidate_paths, find_decoder_script
from .process import SubprocessDecoder

__all__ = [
    "DecoderPayload",
    "SubprocessDecoder",
    "build_argv",
    "candidate_paths",
    "find_decoder_script",
    "parse_decoder_output",
]

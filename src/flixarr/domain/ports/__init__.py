from .decoder import DecoderPort
from .server_directory import ServerDirectoryPort
from .source_extractor import SourceExtractorPort

__all__ = [
    "DecoderPort",
    "ServerDirectoryPort",
    "SourceExtractorPort",
]

from __future__ import annotations

from .source_extractor import ExtractorProfile, SourceExtractor, build_profiles

__all__ = ["ExtractorProfile", "SourceExtractor", "build_profiles"]

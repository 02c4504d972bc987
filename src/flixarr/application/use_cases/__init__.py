from __future__ import annotations

from .source_resolver import SourceResolver, extract_domain
from .sources import SourcesUseCase

__all__ = ["SourceResolver", "SourcesUseCase", "extract_domain"]

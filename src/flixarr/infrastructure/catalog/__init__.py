from __future__ import annotations

from .server_directory import HttpxServerDirectory

__all__ = ["HttpxServerDirectory"]

"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "flixarr",
    "environment": "dev",
    "upstream": {
        "base_url": "https://myflixerz.to",
        "timeout_seconds": 15.0,
        "follow_redirects": True,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "decoder": {
        "command": "node",
        "script_name": "rabbit.js",
        "script_path": None,
        "timeout_seconds": 30.0,
        "max_concurrent": 4,
        "mixdrop_referrer": "https://myflixerz.to",
    },
    "resolution": {
        "timeout_seconds": 45.0,
    },
    "api": {
        "rate_limit_requests": 100,
        "rate_limit_window_seconds": 900.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}

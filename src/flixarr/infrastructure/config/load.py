from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_SECTION_KEYS: set[str] = {"upstream", "decoder", "resolution", "api", "logging"}

# Flat keys (ENV / CLI) -> (section, key in section)
_FLAT_MAP: dict[str, tuple[str, str]] = {
    "upstream_base_url": ("upstream", "base_url"),
    "upstream_timeout_seconds": ("upstream", "timeout_seconds"),
    "upstream_follow_redirects": ("upstream", "follow_redirects"),
    "upstream_user_agent": ("upstream", "user_agent"),
    "decoder_command": ("decoder", "command"),
    "decoder_script_name": ("decoder", "script_name"),
    "decoder_script_path": ("decoder", "script_path"),
    "decoder_timeout_seconds": ("decoder", "timeout_seconds"),
    "decoder_max_concurrent": ("decoder", "max_concurrent"),
    "decoder_mixdrop_referrer": ("decoder", "mixdrop_referrer"),
    "resolution_timeout_seconds": ("resolution", "timeout_seconds"),
    "api_rate_limit_requests": ("api", "rate_limit_requests"),
    "api_rate_limit_window_seconds": ("api", "rate_limit_window_seconds"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """
    Recursively merge `override` into `base` and return `base`.

    Rules:
    - dict + dict => deep merge
    - otherwise => override wins
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, Mapping):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Normalize a layer (defaults/YAML/ENV/CLI) into the canonical *sectioned* shape.

    Canonical top-level keys:
    - app_name, environment
    - upstream.base_url, upstream.timeout_seconds, upstream.follow_redirects,
      upstream.user_agent
    - decoder.command, decoder.script_name, decoder.script_path,
      decoder.timeout_seconds, decoder.max_concurrent, decoder.mixdrop_referrer
    - resolution.timeout_seconds
    - api.rate_limit_requests, api.rate_limit_window_seconds
    - logging.level, logging.format
    """
    out: dict[str, Any] = {}

    for section in _SECTION_KEYS:
        if section in data and isinstance(data[section], Mapping):
            out[section] = dict(data[section])

    if "app_name" in data:
        out["app_name"] = data["app_name"]
    if "environment" in data:
        out["environment"] = data["environment"]

    for flat_key, (section, section_key) in _FLAT_MAP.items():
        if flat_key in data:
            out.setdefault(section, {})
            out[section][section_key] = data[flat_key]

    return out


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    raw = config_path.read_text(encoding="utf-8")
    parsed = yaml.safe_load(raw)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Load configuration with strict precedence:
    defaults < YAML file < env vars < cli overrides

    This function MUST NOT create files or directories (no filesystem side-effects).
    """
    cli_overrides = cli_overrides or {}

    # .env participates as part of the "env vars" layer
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    base = _normalize_layer(deepcopy(DEFAULT_CONFIG))

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(config_path)
        _deep_merge(base, _normalize_layer(_read_yaml_config(config_path)))

    _deep_merge(base, _normalize_layer(EnvOverrides().to_update_dict()))
    _deep_merge(base, _normalize_layer(cli_overrides))

    return AppConfig.model_validate(base)

"""Locate the decoder script on disk."""

from __future__ import annotations

from pathlib import Path

import structlog

from flixarr.domain.entities.errors import DecoderNotFoundError

log = structlog.get_logger(__name__)

# src/flixarr/
_PACKAGE_DIR = Path(__file__).resolve().parents[2]


def candidate_paths(
    script_name: str,
    *,
    explicit: Path | None = None,
    package_dir: Path | None = None,
    cwd: Path | None = None,
) -> list[Path]:
    """Return the ordered locations searched for *script_name*.

    1. *explicit* configured path (if any)
    2. parent of the installed package directory
    3. the package directory itself
    4. the current working directory
    """
    pkg = package_dir or _PACKAGE_DIR
    work = cwd or Path.cwd()
    candidates: list[Path] = []
    if explicit is not None:
        candidates.append(explicit)
    candidates.extend(
        [
            pkg.parent / script_name,
            pkg / script_name,
            work / script_name,
        ]
    )
    return candidates


def find_decoder_script(
    script_name: str,
    *,
    explicit: Path | None = None,
    package_dir: Path | None = None,
    cwd: Path | None = None,
) -> Path:
    """Return the first existing candidate path.

    Raises:
        DecoderNotFoundError: None of the candidates exist.
    """
    candidates = candidate_paths(
        script_name, explicit=explicit, package_dir=package_dir, cwd=cwd
    )
    for path in candidates:
        if path.is_file():
            return path
    log.error(
        "decoder_not_found",
        script_name=script_name,
        searched=[str(p) for p in candidates],
    )
    raise DecoderNotFoundError(f"{script_name} not found in any expected locations")

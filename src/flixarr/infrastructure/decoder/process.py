"""Out-of-process decoder runner (async subprocess, bounded concurrency)."""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from flixarr.domain.entities.errors import DecodeError, DecoderNotFoundError
from flixarr.domain.entities.sources import EmbedSources

from .contract import build_argv, parse_decoder_output
from .locator import find_decoder_script

log = structlog.get_logger(__name__)

# stderr excerpt kept on DecodeError / in logs
_STDERR_TAIL = 2000


class SubprocessDecoder:
    """Runs the decoder script once per embed URL.

    Each call spawns a child process with an argv list (no shell), waits
    for it with a deadline and parses its stdout. On timeout or
    cancellation the child is killed and reaped before the error
    propagates. A semaphore caps how many children run at once.
    """

    def __init__(
        self,
        *,
        command: str = "node",
        script_name: str = "rabbit.js",
        script_path: Path | None = None,
        timeout_seconds: float = 30.0,
        max_concurrent: int = 4,
    ) -> None:
        self._command = command
        self._script_name = script_name
        self._script_path = script_path
        self._timeout = timeout_seconds
        self._semaphore = asyncio.Semaphore(max_concurrent)

    def locate(self) -> Path:
        """Resolve the script path (re-checked on every call)."""
        return find_decoder_script(self._script_name, explicit=self._script_path)

    def is_available(self) -> bool:
        try:
            self.locate()
        except DecoderNotFoundError:
            return False
        return True

    async def decode(self, embed_url: str, referrer: str) -> EmbedSources:
        script = self.locate()
        argv = build_argv(self._command, script, embed_url, referrer)

        async with self._semaphore:
            stdout, stderr, returncode = await self._run(argv, embed_url)

        if returncode != 0:
            tail = stderr[-_STDERR_TAIL:]
            log.warning(
                "decoder_exited_nonzero",
                embed_url=embed_url,
                exit_code=returncode,
                stderr=tail,
            )
            message = f"Decoder exited with code {returncode}"
            if tail.strip():
                message = f"{message}: {tail.strip()}"
            raise DecodeError(
                message,
                exit_code=returncode,
                stderr=tail,
            )

        try:
            result = parse_decoder_output(stdout)
        except DecodeError:
            log.warning(
                "decoder_output_invalid",
                embed_url=embed_url,
                stdout_len=len(stdout),
            )
            raise

        log.debug(
            "decoder_succeeded",
            embed_url=embed_url,
            sources=len(result.sources),
            tracks=len(result.tracks),
        )
        return result

    async def _run(self, argv: list[str], embed_url: str) -> tuple[str, str, int]:
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            log.error("decoder_spawn_failed", command=argv[0], error=str(exc))
            raise DecodeError(f"Failed to start decoder: {exc}") from exc

        try:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except TimeoutError:
            await self._kill(proc)
            log.warning(
                "decoder_timeout",
                embed_url=embed_url,
                timeout_seconds=self._timeout,
            )
            raise DecodeError(
                f"Decoder timed out after {self._timeout}s"
            ) from None
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        return (
            out.decode("utf-8", errors="replace"),
            err.decode("utf-8", errors="replace"),
            proc.returncode if proc.returncode is not None else -1,
        )

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        await proc.wait()

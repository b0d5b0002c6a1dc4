"""Thin async wrapper around the ``sf`` command line."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CliResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill and reap a child that is still running."""
    try:
        if process.returncode is None:
            process.kill()
        await process.wait()
    except ProcessLookupError:
        pass  # Process already terminated


async def run_sf(
    executable: str,
    *args: str,
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CliResult:
    """Run ``executable args...`` and capture its output.

    The child is killed when ``timeout`` expires or the awaiting task is
    cancelled; the error is re-raised once it has exited.

    Raises:
        FileNotFoundError: the executable is not installed.
        asyncio.TimeoutError: the command ran longer than ``timeout`` seconds.
    """
    logger.debug("Running %s %s", executable, " ".join(args))
    process = await asyncio.create_subprocess_exec(
        executable,
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("%s timed out after %s seconds", executable, timeout)
        await _kill(process)
        raise
    except asyncio.CancelledError:
        await _kill(process)
        raise
    return CliResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def target_org_args(target_org: Optional[str]) -> tuple[str, ...]:
    return ("--target-org", target_org) if target_org else ()


__all__ = ["CliResult", "run_sf", "target_org_args"]

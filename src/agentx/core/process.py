"""Shell command execution with a timeout.

Used by the run_command tool and by command hooks.
"""

import asyncio
import os
import signal
import sys
from dataclasses import dataclass


@dataclass
class ShellResult:
    """Outcome of one shell command."""

    returncode: int | None
    stdout: str
    stderr: str
    timed_out: bool = False


async def run_shell(command: str, cwd: str, timeout: float) -> ShellResult:
    """
    Run ``command`` through the system shell.

    Args:
        command: Shell command line
        cwd: Working directory
        timeout: Timeout in seconds. On expiry the whole process group is killed.

    Returns:
        ShellResult with decoded output. ``returncode`` is None on timeout.
    """
    process = await asyncio.create_subprocess_shell(
        command,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
        start_new_session=True,
    )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        _kill(process)
        await process.wait()
        return ShellResult(returncode=None, stdout="", stderr="", timed_out=True)

    return ShellResult(
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        if sys.platform != "win32":
            os.killpg(os.getpgid(process.pid), signal.SIGKILL)
        else:
            process.kill()
    except ProcessLookupError:
        pass

"""Shell command runner for OS sampling commands."""

import asyncio
import os
import signal

from mcmonitor.core.errors import CommandError


class SubprocessRunner:
    """Runs shell pipelines with ``asyncio.create_subprocess_shell``.

    Only the calling request waits on the process; the event loop keeps
    serving other requests.
    """

    def __init__(self, timeout_seconds: float = 5.0) -> None:
        self.timeout_seconds = timeout_seconds

    async def run(self, command: str) -> str:
        """Run ``command`` through the shell and return its stdout.

        Raises:
            CommandError: If the process cannot start, exits non-zero, or
                exceeds the timeout.
        """
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            raise CommandError(command, str(exc)) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except TimeoutError:
            _kill_group(process)
            await process.wait()
            raise CommandError(
                command, f"timed out after {self.timeout_seconds}s"
            ) from None

        if process.returncode != 0:
            reason = stderr.decode(errors="replace").strip() or (
                f"exit status {process.returncode}"
            )
            raise CommandError(command, reason)
        return stdout.decode(errors="replace")


def _kill_group(process: asyncio.subprocess.Process) -> None:
    """Kill the shell and every process of its pipeline."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass

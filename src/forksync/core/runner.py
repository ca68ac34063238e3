"""Command execution using invoke library with custom extensions."""

import asyncio
import contextlib
import os
from pathlib import Path

from invoke import Context, Result
from invoke.exceptions import CommandTimedOut

from forksync.core.errors import GitCommandError, GitTimeoutError
from forksync.core.log import logger


def _kill(runner) -> None:
    """Kill the subprocess behind an invoke runner.

    invoke's own kill() sends signal.SIGKILL, which Windows does not
    define; os.kill() there accepts the numeric value and terminates
    the process.
    """
    import platform

    if platform.system() == "Windows":
        pid = runner.pid if runner.using_pty else runner.process.pid
        with contextlib.suppress(ProcessLookupError):
            os.kill(pid, 9)
        return
    with contextlib.suppress(ProcessLookupError):
        runner.kill()


class Runner(Context):
    """invoke.Context with asyncio-friendly execution.

    Output is always captured, never echoed. A timed-out command
    becomes GitTimeoutError (check=True) or a Result whose exited code
    is -1.
    """

    async def execute_async(
        self,
        command: str,
        cwd: Path | None = None,
        timeout: float | None = None,
        check: bool = True,
    ) -> Result:
        """Run command without blocking the event loop.

        The process is started by invoke in asynchronous mode and
        joined in a worker thread. Cancelling the awaiting task kills
        the process before CancelledError propagates.

        Raises:
            GitCommandError: If check=True and the command fails
            GitTimeoutError: If check=True and the command times out
        """
        logger.spew(f"$ {command}", cwd=str(cwd) if cwd else None)
        kwargs = {
            "hide": True,
            "warn": True,
            "in_stream": False,
            "asynchronous": True,
        }
        if timeout:
            kwargs["timeout"] = timeout
        # cd() only affects the command string built inside run()
        if cwd:
            with self.cd(str(cwd)):
                promise = self.run(command, **kwargs)
        else:
            promise = self.run(command, **kwargs)

        try:
            result = await asyncio.to_thread(promise.join)
        except asyncio.CancelledError:
            _kill(promise.runner)
            raise
        except CommandTimedOut as e:
            result = e.result
            result.exited = -1
            if check:
                raise GitTimeoutError(command, timeout) from e
            return result
        return self._checked(command, result, check)

    @staticmethod
    def _checked(command: str, result: Result, check: bool) -> Result:
        if check and result.exited != 0:
            raise GitCommandError(
                command, result.exited, result.stderr, result.stdout
            )
        return result

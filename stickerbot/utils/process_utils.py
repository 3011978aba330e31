"""
This module runs external commands (ffmpeg, the lottie converter) for the converters.

`ProcessRunner.run` never blocks the event loop, enforces a wall-clock deadline,
and makes sure no child is left running when it returns or raises: on timeout
or cancellation the child's whole process group is killed and reaped.
A non-zero exit status is not an error here; callers decide what it means.
"""
import asyncio
import os
import shlex
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from loguru import logger

from ..config.media import PROCESS_TIMEOUT_SECONDS
from ..domain.exceptions import ProcessSpawnException, ProcessTimeoutException

# How long to wait for a killed child to be reaped before giving up on it.
KILL_REAP_TIMEOUT_SECONDS = 5

# Only this much of stderr is logged.
STDERR_LOG_LIMIT = 2000


@dataclass(frozen=True)
class ProcessResult:
    """Captured output and exit status of a finished process."""

    stdout: bytes
    stderr: bytes
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def stderr_tail(self, limit: int = STDERR_LOG_LIMIT) -> str:
        return self.stderr[-limit:].decode("utf-8", errors="replace")


def format_command(cmd_list: list[str]) -> str:
    """Quotes and joins a command list for display in logs."""
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def _kill_process_tree(process: asyncio.subprocess.Process):
    """
    Sends SIGKILL to the child's process group, or to the child alone off POSIX.

    Children are started in their own session, so the group id equals the pid and
    the group covers helpers spawned by wrapper scripts.
    """
    if os.name == "posix":
        try:
            os.killpg(process.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except PermissionError as e:
            logger.warning(f"killpg({process.pid}) failed: {e}, killing the process only")
    try:
        process.kill()
    except ProcessLookupError:
        pass


class ProcessRunner:
    """
    Spawns external processes with a hard timeout.

    Attributes:
        timeout (float): Deadline in seconds for each `run` call.
    """

    def __init__(self, timeout: float = PROCESS_TIMEOUT_SECONDS):
        self.timeout = timeout

    async def run(
        self,
        command: str,
        args: Sequence[str | Path],
        stdin: bytes | None = None,
    ) -> ProcessResult:
        """
        Runs `command` with `args` and waits for it to exit.

        Args:
            command: Executable name or path.
            args: Arguments; paths are converted to strings.
            stdin: Bytes written to the child's stdin, which is then closed.
                   Without it the child gets an empty stdin.

        Returns:
            A `ProcessResult` with captured stdout, stderr and the exit status.

        Raises:
            ProcessSpawnException: If the process cannot be started.
            ProcessTimeoutException: If it did not exit within `timeout` seconds.
                                     The process has been killed by then.
        """
        cmd_list = [command, *(str(a) for a in args)]
        display_cmd_str = format_command(cmd_list)
        logger.debug(f"Executing command: {display_cmd_str}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd_list,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=os.name == "posix",
            )
        except OSError as e:
            logger.error(f"Could not start '{command}': {e}. Ensure it is installed and in PATH or configured.")
            raise ProcessSpawnException(f"Failed to start {display_cmd_str}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(stdin), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Command timed out after {self.timeout} s: {display_cmd_str}")
            await self._terminate(process)
            raise ProcessTimeoutException(f"{command} timed out after {self.timeout} s")
        except asyncio.CancelledError:
            logger.warning(f"Cancelled while waiting for: {display_cmd_str}")
            await self._terminate(process)
            raise

        result = ProcessResult(stdout or b"", stderr or b"", process.returncode)
        if result.success:
            logger.trace(f"Command stderr (rc=0): {result.stderr_tail()}")
        else:
            logger.debug(f"Command stderr (rc={result.returncode}): {result.stderr_tail()}")
        return result

    @staticmethod
    async def _terminate(process: asyncio.subprocess.Process):
        """Kills the process group and waits for the child to be reaped."""
        _kill_process_tree(process)
        try:
            await asyncio.wait_for(process.wait(), timeout=KILL_REAP_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            pass
        if process.returncode is None:
            logger.error(f"Process {process.pid} still not reaped after kill")
        else:
            logger.debug(f"Process {process.pid} terminated with {process.returncode}")

"""Async external command execution with a deadline."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.exceptions import CommandError, CommandNotStartedError, OperationTimeoutError
from .redaction import redact_command


@dataclass(frozen=True)
class CommandResult:
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner:
    """
    Spawns external tools (mount, umount, net, rclone).

    The process is killed when the timeout expires or when the awaiting task
    is cancelled, so an abandoned mount call never outlives its operation.
    """

    async def run(
        self,
        command: Sequence[str],
        timeout: float,
        secrets: Sequence[str] = (),
    ) -> CommandResult:
        """
        Run command and capture its output.

        Args:
            command: argv list, command[0] is the executable
            timeout: Seconds before the process is killed
            secrets: Plaintext values to mask when the command is logged

        Raises:
            OperationTimeoutError: If the process did not finish in time
            CommandNotStartedError: If the executable could not be started
        """
        display = redact_command(command, secrets)
        logging.debug(f"Executing: {display}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise CommandNotStartedError(command[0], str(e))

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            logging.error(f"Command timed out after {timeout:g}s: {display}")
            await self._kill(process)
            raise OperationTimeoutError(command[0], timeout)
        except asyncio.CancelledError:
            logging.warning(f"Command abandoned, killing process: {display}")
            await self._kill(process)
            raise

        result = CommandResult(
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=self._decode(stdout),
            stderr=self._decode(stderr),
        )
        if not result.ok:
            logging.debug(f"Command exited with {result.exit_code}: {display}")
        return result

    async def run_checked(
        self,
        command: Sequence[str],
        timeout: float,
        secrets: Sequence[str] = (),
    ) -> CommandResult:
        """Like run(), but raises CommandError on a non-zero exit code."""
        result = await self.run(command, timeout, secrets)
        if not result.ok:
            raise CommandError(command[0], result.exit_code, result.stderr, result.stdout)
        return result

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=2.0)
        except asyncio.TimeoutError:
            logging.warning(f"Process {process.pid} did not exit after kill")

    @staticmethod
    def _decode(data: Optional[bytes]) -> str:
        return data.decode(errors="replace") if data else ""

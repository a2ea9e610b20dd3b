"""
netdash/engine/executor.py
Runs external diagnostic binaries without a shell.

Arguments are always passed as a discrete vector to create_subprocess_exec,
so nothing in them can be reinterpreted by a shell. Each run has a hard
deadline; on expiry the process is terminated, then killed if it is still
alive after a grace period. Output captured before the deadline is returned
as a partial success.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from netdash.base.config import get_config
from netdash.errors import ErrorCode, ProcessError
from netdash.toolkit.platforms import PlatformProfile, current_profile
from netdash.toolkit.registry import find_binary, install_hint

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class ProcessOutput:
    stdout: str
    stderr: str
    returncode: Optional[int]
    timed_out: bool = False
    elapsed_ms: float = 0.0

    @property
    def partial(self) -> bool:
        return self.timed_out


class ProcessExecutor:
    """
    Spawns one diagnostic binary per call.

    The exit code is advisory: ping and traceroute exit non-zero on an
    unreachable host while still printing useful output. Any stdout counts as
    success; no stdout plus a non-zero exit is a failure.
    """

    def __init__(self, profile: Optional[PlatformProfile] = None, kill_grace_ms: Optional[int] = None):
        self.profile = profile or current_profile()
        self.kill_grace_ms = kill_grace_ms if kill_grace_ms is not None else get_config().limits.kill_grace_ms

    def resolve(self, command: str) -> str:
        path = find_binary(command, self.profile.name)
        if not path:
            raise ProcessError(
                ErrorCode.PROCESS_NOT_FOUND,
                install_hint(command),
                details={"command": command, "platform": self.profile.name},
            )
        return path

    async def execute(
        self,
        command: str,
        args: Sequence[str],
        timeout_ms: int,
        on_line: Optional[LineCallback] = None,
    ) -> ProcessOutput:
        """
        Run `command` with `args` and collect its output.

        Raises ProcessError (NotFound, PermissionDenied, SpawnFailed, Timeout
        with nothing captured, Failed with no stdout and non-zero exit).
        `on_line` receives each stdout line as it arrives.
        """
        path = self.resolve(command)
        argv = [path, *[str(a) for a in args]]
        logger.debug("Spawning %s", argv)

        started = time.perf_counter()
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                **self.profile.spawn_options(),
            )
        except FileNotFoundError:
            raise ProcessError(
                ErrorCode.PROCESS_NOT_FOUND,
                install_hint(command),
                details={"command": command, "path": path},
            )
        except PermissionError as exc:
            raise ProcessError(
                ErrorCode.PROCESS_PERMISSION_DENIED,
                f"Permission denied running '{command}': {exc}",
                details={"command": command, "path": path},
            )
        except OSError as exc:
            raise ProcessError(
                ErrorCode.PROCESS_SPAWN_FAILED,
                f"Failed to start '{command}': {exc}",
                details={"command": command, "path": path},
            )

        stdout_lines: List[str] = []
        stderr_chunks: List[bytes] = []
        stdout_task = asyncio.ensure_future(self._read_lines(proc.stdout, stdout_lines, on_line))
        stderr_task = asyncio.ensure_future(self._read_all(proc.stderr, stderr_chunks))

        timed_out = False
        try:
            await asyncio.wait_for(proc.wait(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            timed_out = True
            logger.info("%s exceeded %dms deadline; terminating", command, timeout_ms)
            await self._stop(proc)

        # Let the readers drain whatever the pipes still hold.
        done, pending = await asyncio.wait(
            {stdout_task, stderr_task}, timeout=self.kill_grace_ms / 1000 + 1
        )
        for task in pending:
            task.cancel()
        for task in done:
            exc = task.exception()
            if exc is not None:
                logger.warning("Output reader for %s failed: %s", command, exc)

        elapsed_ms = (time.perf_counter() - started) * 1000
        stdout = "".join(stdout_lines)
        stderr = b"".join(stderr_chunks).decode(self.profile.encoding, errors="replace")
        output = ProcessOutput(
            stdout=stdout,
            stderr=stderr,
            returncode=proc.returncode,
            timed_out=timed_out,
            elapsed_ms=round(elapsed_ms, 2),
        )

        if timed_out:
            if stdout.strip():
                logger.info("%s timed out; returning %d bytes of partial output", command, len(stdout))
                return output
            raise ProcessError(
                ErrorCode.PROCESS_TIMEOUT,
                f"'{command}' timed out after {timeout_ms}ms without output",
                details={"command": command, "timeout_ms": timeout_ms},
            )

        if not stdout.strip() and proc.returncode not in (0, None):
            message = stderr.strip() or f"'{command}' exited with code {proc.returncode}"
            raise ProcessError(
                ErrorCode.PROCESS_FAILED,
                message,
                details={"command": command, "returncode": proc.returncode},
            )

        return output

    async def _stop(self, proc: asyncio.subprocess.Process) -> None:
        """Terminate cooperatively, then kill after the grace period."""
        try:
            if proc.returncode is None:
                proc.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=self.kill_grace_ms / 1000)
            return
        except asyncio.TimeoutError:
            logger.warning("Process %s ignored terminate; killing", getattr(proc, "pid", "?"))
        try:
            if proc.returncode is None:
                proc.kill()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=self.kill_grace_ms / 1000)
        except asyncio.TimeoutError:
            logger.error("Process %s did not exit after kill", getattr(proc, "pid", "?"))

    async def _read_lines(
        self,
        stream: Optional[asyncio.StreamReader],
        sink: List[str],
        on_line: Optional[LineCallback],
    ) -> None:
        if stream is None:
            return
        while True:
            raw = await stream.readline()
            if not raw:
                break
            line = raw.decode(self.profile.encoding, errors="replace")
            sink.append(line)
            if on_line is not None:
                # A failing callback must not stop the stream from draining.
                try:
                    result = on_line(line.rstrip("\r\n"))
                    if asyncio.iscoroutine(result):
                        await result
                except Exception as exc:
                    logger.warning("Line callback failed, continuing to read output: %s", exc)

    async def _read_all(self, stream: Optional[asyncio.StreamReader], sink: List[bytes]) -> None:
        if stream is None:
            return
        while True:
            chunk = await stream.read(4096)
            if not chunk:
                break
            sink.append(chunk)


async def execute(command: str, args: Sequence[str], timeout_ms: int) -> ProcessOutput:
    """Run a command with the default executor for the current platform."""
    return await ProcessExecutor().execute(command, args, timeout_ms)

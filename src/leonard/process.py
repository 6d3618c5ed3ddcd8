"""Child process lifecycle for one agent invocation."""

from __future__ import annotations

import asyncio
import contextlib
import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from loguru import logger

from .collector import ActivityCallback, FragmentCallback, StreamCollector, read_lines
from .errors import SpawnError
from .types import AgentRole, ProcessResult

# Stream-json lines carry whole tool results and can be very long.
STREAM_LIMIT_BYTES = 32 * 1024 * 1024
TERMINATE_GRACE_SECONDS = 3.0


class ProcessRunner:
    """Spawn one agent process at a time and collect its structured output."""

    def __init__(
        self,
        role: AgentRole,
        *,
        on_fragment: FragmentCallback | None = None,
        on_activity: ActivityCallback | None = None,
        terminate_grace_seconds: float = TERMINATE_GRACE_SECONDS,
    ) -> None:
        self.role = role
        self._on_fragment = on_fragment
        self._on_activity = on_activity
        self._grace = terminate_grace_seconds
        self._live: set[asyncio.subprocess.Process] = set()
        self._log = logger.bind(role=role.tag)

    @property
    def running(self) -> bool:
        return any(proc.returncode is None for proc in self._live)

    async def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult:
        """Run ``argv`` to completion.

        Raises ``SpawnError`` when the process cannot be started. A non-zero
        exit status is returned, not raised. If this coroutine is cancelled
        the child is terminated before the cancellation propagates.
        """
        child_env = {**os.environ, **env} if env else None
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                cwd=cwd,
                env=child_env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=STREAM_LIMIT_BYTES,
            )
        except OSError as exc:
            self._log.error("process.spawn.error binary={} error={}", argv[0], exc)
            raise SpawnError(self.role, argv[0], exc) from exc

        self._live.add(proc)
        self._log.info("process.spawn pid={} binary={}", proc.pid, argv[0])
        collector = StreamCollector(self.role, on_fragment=self._on_fragment, on_activity=self._on_activity)
        assert proc.stdout is not None and proc.stderr is not None  # noqa: S101
        try:
            output, stderr_lines = await asyncio.gather(collector.consume(proc.stdout), read_lines(proc.stderr))
            returncode = await proc.wait()
        except asyncio.CancelledError:
            await self._terminate(proc)
            raise
        finally:
            self._live.discard(proc)

        self._log.info(
            "process.exit pid={} status={} bytes={} skipped_lines={}",
            proc.pid,
            returncode,
            output.size_bytes,
            collector.skipped_lines,
        )
        return ProcessResult(output, returncode, tuple(stderr_lines))

    async def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        self._log.warning("process.terminate pid={}", proc.pid)
        with contextlib.suppress(ProcessLookupError):
            proc.terminate()
        try:
            await asyncio.wait_for(proc.wait(), timeout=self._grace)
        except TimeoutError:
            self._log.warning("process.kill pid={}", proc.pid)
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()

    def terminate_all(self) -> int:
        """Kill every child this runner still tracks. Returns how many were signalled."""
        killed = 0
        for proc in list(self._live):
            if proc.returncode is not None:
                continue
            self._log.warning("process.kill pid={}", proc.pid)
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
                killed += 1
        return killed

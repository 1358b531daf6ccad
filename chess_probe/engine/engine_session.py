# chess_probe/chess_probe/engine/engine_session.py
"""
Runs a one-shot analysis round trip against an external UCI engine.

The session spawns the engine binary, writes the whole command script at
once, closes the engine's standard input, reads standard output until the
engine exits and finally kills the process. The engine binary path is an
explicit constructor argument and the process factory can be replaced, so
tests can run the session against a fake process.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from chess_probe.config import settings
from chess_probe.exceptions import EngineIOError, EngineTimeoutError
from chess_probe.types import EngineRequest

logger = logging.getLogger(settings.APP_NAME + ".EngineSession")

ProcessFactory = Callable[..., Awaitable[Any]]


class EngineSession:
    """
    A single engine process, used for exactly one request.
    This class is an async context manager to ensure the process is killed
    on every exit path.
    """

    def __init__(
        self,
        engine_path: str,
        timeout: Optional[float] = None,
        spawn: Optional[ProcessFactory] = None,
    ):
        """
        Args:
            engine_path: Path to the engine executable.
            timeout: Upper bound in seconds for the whole round trip.
                     None or 0 waits indefinitely.
            spawn: Coroutine function with the signature of
                   `asyncio.create_subprocess_exec`.
        """
        self.engine_path: str = engine_path
        self.timeout: Optional[float] = timeout or None
        self._spawn: ProcessFactory = spawn or asyncio.create_subprocess_exec
        self._process: Optional[Any] = None
        self._is_closed: bool = False
        self._used: bool = False

    async def start(self) -> None:
        if self._is_closed:
            raise EngineIOError("Operation on a closed EngineSession.")
        if self._process is not None:
            return
        logger.debug(f"Spawning engine '{self.engine_path}'.")
        try:
            self._process = await self._spawn(
                self.engine_path,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except (OSError, ValueError) as e:
            raise EngineIOError(f"Could not start engine '{self.engine_path}': {e}") from e

    async def analyze(self, request: EngineRequest) -> str:
        """
        Sends the request's command script and returns the full engine output.

        Raises:
            EngineIOError: If the process cannot be started or talked to.
            EngineTimeoutError: If the engine does not exit within `timeout`.
        """
        if self._used:
            raise EngineIOError("An EngineSession serves a single request; start a new one.")
        self._used = True
        await self.start()

        script = request.command_script()
        try:
            output = await asyncio.wait_for(self._exchange(script), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise EngineTimeoutError(
                f"Engine did not finish depth {request.depth} within {self.timeout:g} seconds."
            ) from e
        logger.debug(f"Captured {len(output.splitlines())} lines of engine output.")
        return output

    async def _exchange(self, script: str) -> str:
        process = self._process
        try:
            process.stdin.write(script.encode("utf-8"))
            await process.stdin.drain()
            # The engine keeps waiting for commands until its input is closed.
            process.stdin.close()
            raw = await process.stdout.read()
            await process.wait()
        except (BrokenPipeError, ConnectionResetError, OSError) as e:
            raise EngineIOError(f"Lost connection to engine '{self.engine_path}': {e}") from e
        return raw.decode("utf-8", errors="replace")

    async def close(self) -> None:
        """Kills the engine process. Safe to call more than once."""
        if self._is_closed:
            return
        self._is_closed = True

        process = self._process
        if process is None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            logger.debug("Engine process was already gone.")
        try:
            await asyncio.wait_for(process.wait(), timeout=settings.ENGINE_REAP_TIMEOUT_S)
        except asyncio.TimeoutError:
            logger.warning("Engine process did not exit after being killed.")
        logger.debug("Engine session closed.")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

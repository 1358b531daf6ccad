# tests/conftest.py
"""
Shared fixtures for the ChessProbe test suite.
"""
import asyncio
from typing import Callable, List, Optional

import httpx
import pytest
import chess
import chess.pgn

SAMPLE_PGN = """[Event "Test Game"]
[Site "https://lichess.org/abcd1234"]
[Date "2024.01.15"]
[White "Player A"]
[Black "Player B"]
[Result "*"]

1. e4 e5 2. Nf3 Nc6 3. Bb5 a6 *
"""

# Position after 1. e4 e5 2. Nf3 Nc6 3. Bb5 a6
SAMPLE_FINAL_FEN = "r1bqkbnr/1ppp1ppp/p1n5/1B2p3/4P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 0 4"

SAMPLE_ENGINE_OUTPUT = """Stockfish 16 by the Stockfish developers (see AUTHORS file)
id name Stockfish 16
id author the Stockfish developers (see AUTHORS file)

option name Threads type spin default 1 min 1 max 1024
option name Hash type spin default 16 min 1 max 33554432
uciok
info string NNUE evaluation using nn-5af11540bbfe.nnue enabled
info depth 1 seldepth 1 multipv 1 score cp 40 nodes 34 nps 17000 tbhits 0 time 2 pv b5a4
info depth 2 seldepth 2 multipv 1 score cp 35 nodes 80 nps 40000 tbhits 0 time 2 pv b5c6 d7c6

 Contributing terms for the classical eval:
+------------+-------------+-------------+-------------+
|    Term    |    White    |    Black    |    Total    |
+------------+-------------+-------------+-------------+
|   Material |  ----  ---- |  ----  ---- |  0.00  0.00 |
+------------+-------------+-------------+-------------+

Classical evaluation   +0.12 (white side)
NNUE evaluation        +0.28 (white side)
Final evaluation       +0.35 (white side) [with scaled NNUE, hybrid, ...]
bestmove b5a4 ponder g8f6
"""


class FakeStdin:
    def __init__(self):
        self.buffer = b""
        self.writes = 0
        self.closed = False

    def write(self, data: bytes) -> None:
        if self.closed:
            raise BrokenPipeError("stdin is closed")
        self.writes += 1
        self.buffer += data

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


class FakeStdout:
    def __init__(self, data: bytes, hang: bool = False, error: Optional[Exception] = None):
        self._data = data
        self._hang = hang
        self._error = error

    async def read(self) -> bytes:
        if self._error is not None:
            raise self._error
        if self._hang:
            await asyncio.sleep(3600)
        return self._data


class FakeProcess:
    """A stand-in for `asyncio.subprocess.Process` that counts kills."""

    def __init__(self, output: str = "", hang: bool = False, read_error: Optional[Exception] = None):
        self.stdin = FakeStdin()
        self.stdout = FakeStdout(output.encode("utf-8"), hang=hang, error=read_error)
        self.returncode: Optional[int] = None
        self.kill_calls = 0

    async def wait(self) -> int:
        if self.returncode is None:
            self.returncode = 0
        return self.returncode

    def kill(self) -> None:
        self.kill_calls += 1
        if self.returncode is None:
            self.returncode = -9


class FakeSpawner:
    """Replaces `asyncio.create_subprocess_exec` and records its calls."""

    def __init__(self, process: Optional[FakeProcess] = None, error: Optional[Exception] = None):
        self.process = process
        self.error = error
        self.calls: List[tuple] = []

    async def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.error is not None:
            raise self.error
        return self.process


@pytest.fixture
def sample_pgn() -> str:
    """The game 1. e4 e5 2. Nf3 Nc6 3. Bb5 a6 as PGN text."""
    return SAMPLE_PGN


@pytest.fixture
def sample_final_fen() -> str:
    return SAMPLE_FINAL_FEN


@pytest.fixture
def engine_output() -> str:
    """Realistic Stockfish output for the fixed command script."""
    return SAMPLE_ENGINE_OUTPUT


@pytest.fixture
def sample_game(sample_pgn) -> chess.pgn.Game:
    import io
    return chess.pgn.read_game(io.StringIO(sample_pgn))


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    """
    Builds an `httpx.AsyncClient` whose requests are answered by `handler`,
    a function taking an `httpx.Request` and returning an `httpx.Response`.
    """
    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return _make

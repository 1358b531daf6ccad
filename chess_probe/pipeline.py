# chess_probe/chess_probe/pipeline.py
"""
The main analysis pipeline for the ChessProbe application.

Stages run strictly one after the other, each awaiting a single network
request or process operation at a time:

    classify -> fetch -> load -> analyze -> extract
"""
import logging
import time
from typing import Callable, Optional

import httpx
from tqdm import tqdm

from chess_probe.config import settings
from chess_probe.engine.engine_session import EngineSession
from chess_probe.engine.result_extractor import extract_analysis_result
from chess_probe.pgn.game_loader import GameLoader
from chess_probe.sources.resolver import resolve_game
from chess_probe.types import (
    AnalysisReport,
    AnalysisResult,
    CanonicalGame,
    EngineRequest,
    GameReference,
    ProgressReporter,
)
from chess_probe.utils.chess_utils import uci_to_san

logger = logging.getLogger(settings.APP_NAME + ".Pipeline")

PIPELINE_STAGES = ("Resolving game", "Loading PGN", "Analyzing position")


# --- TQDM Adapter for our ProgressReporter Protocol ---
class TqdmProgressReporter:
    """An adapter that makes a tqdm progress bar conform to our ProgressReporter protocol."""
    def __init__(self, pbar: tqdm):
        self._pbar = pbar

    def reset(self, total: int = 0) -> None:
        self._pbar.reset(total=total)

    def update(self, n: int = 1) -> None:
        self._pbar.update(n)

    def set_description(self, desc: str) -> None:
        self._pbar.set_description_str(desc)

    def close(self) -> None:
        self._pbar.close()


class NullProgressReporter:
    """A ProgressReporter that discards everything."""
    def reset(self, total: int = 0) -> None:
        pass

    def update(self, n: int = 1) -> None:
        pass

    def set_description(self, desc: str) -> None:
        pass

    def close(self) -> None:
        pass


class AnalysisPipeline:
    """
    Orchestrates one run from a game argument to an engine verdict.
    """

    def __init__(self, engine_path: str, **kwargs):
        """
        Args:
            engine_path: Path to the engine executable.
            **kwargs: Can include 'depth', 'http_timeout', 'engine_timeout',
                      'client_factory' (returns an `httpx.AsyncClient`) and
                      'session_factory' (returns an `EngineSession`).
        """
        self.engine_path: str = engine_path
        self.depth: int = kwargs.get('depth', settings.DEFAULT_ANALYSIS_DEPTH)
        self.http_timeout: Optional[float] = kwargs.get('http_timeout', settings.DEFAULT_HTTP_TIMEOUT_S)
        self.engine_timeout: Optional[float] = kwargs.get('engine_timeout', settings.DEFAULT_ENGINE_TIMEOUT_S)

        self._client_factory: Callable[[], httpx.AsyncClient] = (
            kwargs.get('client_factory') or self._default_client
        )
        self._session_factory: Callable[[], EngineSession] = (
            kwargs.get('session_factory') or self._default_session
        )
        self.loader = GameLoader()

    def _default_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.http_timeout or None),
            follow_redirects=True,
            headers={"User-Agent": settings.USER_AGENT},
        )

    def _default_session(self) -> EngineSession:
        return EngineSession(self.engine_path, timeout=self.engine_timeout)

    async def resolve(self, reference: GameReference) -> CanonicalGame:
        """Classifies the reference and obtains its PGN text."""
        async with self._client_factory() as client:
            return await resolve_game(reference, client, self.loader)

    async def analyze_position(self, fen: str) -> AnalysisResult:
        """Runs one engine session and extracts its verdict."""
        request = EngineRequest(fen=fen, depth=self.depth)
        async with self._session_factory() as session:
            output = await session.analyze(request)
            return extract_analysis_result(output)

    async def run(
        self,
        reference: GameReference,
        progress: Optional[ProgressReporter] = None,
    ) -> AnalysisReport:
        """Executes the whole pipeline for one game reference."""
        progress = progress or NullProgressReporter()
        start_time = time.time()
        logger.info(f"Starting analysis of '{reference.raw}' at depth {self.depth}.")
        progress.reset(total=len(PIPELINE_STAGES))

        try:
            progress.set_description(PIPELINE_STAGES[0])
            canonical = await self.resolve(reference)
            progress.update()

            progress.set_description(PIPELINE_STAGES[1])
            loaded = self.loader.load(canonical)
            progress.update()

            progress.set_description(PIPELINE_STAGES[2])
            result = await self.analyze_position(loaded.fen)
            progress.update()
        finally:
            progress.close()
            logger.info(f"Analysis run finished in {time.time() - start_time:.2f} seconds.")

        return AnalysisReport(
            result=result,
            fen=loaded.fen,
            san_best_move=uci_to_san(loaded.fen, result.best_move),
            source_kind=canonical.source_kind,
        )

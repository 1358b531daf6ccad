# chess_probe/chess_probe/types.py
"""
A central module for shared data structures and type definitions.

Each stage of the pipeline hands the next one one of these immutable
records, so the stages never share mutable state.
"""
import enum
from dataclasses import dataclass
from typing import List, Protocol

import chess.pgn

from chess_probe.config import settings


class SourceKind(enum.Enum):
    """Where a game reference points to. Exactly one applies per reference."""
    LOCAL_FILE = "file"
    LICHESS = "lichess"
    CHESS_COM = "chess.com"
    GENERIC_URL = "url"


@dataclass(frozen=True)
class GameReference:
    """The raw, user-supplied game argument."""
    raw: str
    force_file: bool = False


@dataclass(frozen=True)
class CanonicalGame:
    """PGN text obtained from a file or a fetcher, before parsing."""
    pgn_text: str
    source_kind: SourceKind
    origin: str  # the path or URL the text came from


@dataclass(frozen=True)
class LoadedGame:
    """A parsed game together with the FEN after its final mainline move."""
    game: chess.pgn.Game
    fen: str


@dataclass(frozen=True)
class ChessComGameMeta:
    """Result of the first Chess.com lookup stage, input of the second."""
    game_id: str
    username: str
    year: str
    month: str


@dataclass(frozen=True)
class EngineRequest:
    """Fully determines the command script sent to the engine."""
    fen: str
    depth: int = settings.DEFAULT_ANALYSIS_DEPTH

    def __post_init__(self):
        if isinstance(self.depth, bool) or not isinstance(self.depth, int) or self.depth < 1:
            raise ValueError(f"Search depth must be a positive integer, got {self.depth!r}")

    def command_lines(self) -> List[str]:
        return [
            "uci",
            f"position fen {self.fen}",
            f"go depth {self.depth}",
            "eval",
            "quit",
        ]

    def command_script(self) -> str:
        """The newline-joined script, written to the engine in a single call."""
        return "\n".join(self.command_lines()) + "\n"


@dataclass(frozen=True)
class AnalysisResult:
    """Best move and evaluation for one position, as printed by the engine."""
    best_move: str   # four-character coordinate move, e.g. "e2e4"
    evaluation: str  # signed decimal, e.g. "+0.35"

    @property
    def score(self) -> float:
        return float(self.evaluation)


@dataclass(frozen=True)
class AnalysisReport:
    """The final output of one pipeline run."""
    result: AnalysisResult
    fen: str
    san_best_move: str
    source_kind: SourceKind


class ProgressReporter(Protocol):
    """
    A protocol defining the interface for reporting progress.
    This allows the pipeline to report its stages without being tied
    to a specific UI implementation like tqdm.
    """
    def reset(self, total: int = 0) -> None:
        """Resets the reporter for a new task with a given total."""
        ...

    def update(self, n: int = 1) -> None:
        """Updates the progress by n steps."""
        ...

    def set_description(self, desc: str) -> None:
        """Sets the description text for the current task."""
        ...

    def close(self) -> None:
        """Closes or finalizes the progress display."""
        ...

# chess_probe/chess_probe/engine/result_extractor.py
"""
Extracts the best move and evaluation from raw engine output.

Engine text output is not a structured protocol message: `bestmove` is UCI,
but `Final evaluation` comes from Stockfish's diagnostic `eval` command and
is surrounded by a table of free-form lines. Extraction therefore anchors on
fixed line prefixes and pulls the value out with a pattern, ignoring
everything else. It knows nothing about how the output was obtained.
"""
import logging
import re
from typing import List

from chess_probe.config import settings
from chess_probe.exceptions import MalformedEngineOutput
from chess_probe.types import AnalysisResult

logger = logging.getLogger(settings.APP_NAME + ".ResultExtractor")

BEST_MOVE_PREFIX = "bestmove"
EVALUATION_PREFIX = "Final evaluation"

_MOVE_PATTERN = re.compile(r"[a-h][1-8][a-h][1-8]", re.IGNORECASE)
_EVALUATION_PATTERN = re.compile(r"[+-]\d+\.\d+")


def _lines_starting_with(output: str, prefix: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.lstrip().startswith(prefix)]


def extract_best_move(output: str) -> str:
    lines = _lines_starting_with(output, BEST_MOVE_PREFIX)
    if not lines:
        raise MalformedEngineOutput("Engine output contains no 'bestmove' line.")

    # Only the move right after the token counts, never the ponder move.
    tokens = lines[-1][len(BEST_MOVE_PREFIX):].split()
    match = _MOVE_PATTERN.match(tokens[0]) if tokens else None
    if match is None:
        raise MalformedEngineOutput(f"No move found in engine line '{lines[-1]}'.")
    return match.group(0).lower()


def extract_evaluation(output: str) -> str:
    lines = _lines_starting_with(output, EVALUATION_PREFIX)
    if not lines:
        raise MalformedEngineOutput("Engine output contains no 'Final evaluation' line.")

    for line in reversed(lines):
        match = _EVALUATION_PATTERN.search(line)
        if match:
            return match.group(0)
    # Stockfish prints "Final evaluation: none (in check)" for positions in check.
    raise MalformedEngineOutput(f"No numeric evaluation in engine line '{lines[-1]}'.")


def extract_analysis_result(output: str) -> AnalysisResult:
    """
    Builds an `AnalysisResult` from the complete captured engine output.

    Raises:
        MalformedEngineOutput: If either anchor line or its value is missing.
    """
    result = AnalysisResult(
        best_move=extract_best_move(output),
        evaluation=extract_evaluation(output),
    )
    logger.debug(f"Extracted best move {result.best_move}, evaluation {result.evaluation}.")
    return result

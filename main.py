# chess_probe/main.py
"""
Main entry point for the ChessProbe application.

This script handles command-line argument parsing, sets up logging,
resolves the engine path from the persisted configuration and runs the
AnalysisPipeline for a single game.
"""
import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

# Adjust the Python path to include the project's root directory.
# This allows the script to be run directly from the project root via `python main.py`.
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from chess_probe.config import settings
from chess_probe.config.user_config import load_user_config, resolve_engine_path, save_user_config
from chess_probe.exceptions import ChessProbeError
from chess_probe.pipeline import AnalysisPipeline, TqdmProgressReporter
from chess_probe.types import AnalysisReport, GameReference
from chess_probe.utils.logging_config import setup_logging

logger = logging.getLogger(settings.APP_NAME + ".Main")


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError(f"depth must be a positive integer, got {number}")
    return number


def non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a number")
    if number < 0:
        raise argparse.ArgumentTypeError(f"timeout must not be negative, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chess-probe",
        description="Finds the engine's best move and evaluation for the final position of a chess game.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "game", metavar="GAME",
        help="Path to a .pgn file, or a lichess.org, chess.com or plain-text PGN URL."
    )
    parser.add_argument(
        "-d", "--depth", type=positive_int, default=settings.DEFAULT_ANALYSIS_DEPTH,
        help="Search depth passed to the engine."
    )
    parser.add_argument(
        "-f", "--force-file", action="store_true",
        help="Treat GAME as a file path regardless of its extension or URL shape."
    )
    parser.add_argument(
        "-s", "--stockfish", default=None,
        help="Path to the engine executable. Overrides the configuration file."
    )
    parser.add_argument(
        "-c", "--config", default=None,
        help=f"Path to the JSON configuration file (default: ${settings.CONFIG_ENV_VAR} "
             f"or {settings.DEFAULT_CONFIG_PATH})."
    )
    parser.add_argument(
        "--save-config", action="store_true",
        help="Store the resolved engine path in the configuration file."
    )
    parser.add_argument(
        "--http-timeout", type=non_negative_float, default=settings.DEFAULT_HTTP_TIMEOUT_S,
        help="Timeout in seconds for each HTTP request. 0 disables it."
    )
    parser.add_argument(
        "--engine-timeout", type=non_negative_float, default=settings.DEFAULT_ENGINE_TIMEOUT_S,
        help="Timeout in seconds for the engine analysis. 0 disables it."
    )
    parser.add_argument(
        "--log-level", default=settings.DEFAULT_LOG_LEVEL,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help="Set the logging level for console and file output."
    )
    parser.add_argument(
        "--log-file", default=None,
        help="Also write the log to this file."
    )
    parser.add_argument(
        "--no-console-log", action="store_true", help="Disable logging to the console."
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Do not display a progress bar."
    )
    return parser


def format_report(report: AnalysisReport) -> str:
    result = report.result
    best_move = result.best_move
    if report.san_best_move != best_move:
        best_move = f"{best_move} ({report.san_best_move})"
    return f"Best move: {best_move}\nEvaluation: {result.evaluation}"


async def run_analysis(pipeline: AnalysisPipeline, reference: GameReference, show_progress: bool) -> AnalysisReport:
    if not show_progress:
        return await pipeline.run(reference)
    pbar = tqdm(total=0, unit="step", file=sys.stderr, leave=False,
                bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt}")
    # Console log records are written through the bar so it is not torn.
    with logging_redirect_tqdm():
        return await pipeline.run(reference, TqdmProgressReporter(pbar))


def main(argv: Optional[List[str]] = None) -> None:
    """Parses command-line arguments and runs the analysis pipeline."""
    args = build_parser().parse_args(argv)

    show_progress = not args.no_progress and sys.stderr.isatty()
    setup_logging(
        log_level_str=args.log_level,
        log_file=args.log_file,
        log_to_console=not args.no_console_log,
    )

    try:
        user_config = load_user_config(args.config)
    except ChessProbeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    engine_path = resolve_engine_path(args.stockfish, user_config)
    if not engine_path:
        logger.critical(
            "Stockfish executable not found. Set 'stockfishPath' in the configuration file, "
            "pass -s/--stockfish or set the STOCKFISH_PATH environment variable."
        )
        sys.exit(1)

    if args.save_config:
        try:
            saved_to = save_user_config({settings.CONFIG_KEY_STOCKFISH_PATH: engine_path}, args.config)
        except ChessProbeError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        logger.info(f"Engine path saved to '{saved_to}'.")

    logger.info(f"{settings.APP_NAME} starting up with engine '{engine_path}'.")

    pipeline = AnalysisPipeline(
        engine_path=engine_path,
        depth=args.depth,
        http_timeout=args.http_timeout,
        engine_timeout=args.engine_timeout,
    )
    reference = GameReference(raw=args.game, force_file=args.force_file)

    try:
        report = asyncio.run(run_analysis(pipeline, reference, show_progress))
    except ChessProbeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
        sys.exit(settings.EXIT_INTERRUPTED)
    except Exception as e:
        logger.critical(f"A fatal, unhandled exception occurred at the top level: {e}", exc_info=True)
        sys.exit(1)

    print(format_report(report))
    sys.exit(0)

if __name__ == "__main__":
    main()

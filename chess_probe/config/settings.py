# chess_probe/chess_probe/config/settings.py
"""
Configuration settings for the ChessProbe application.

This module centralizes all tunable parameters, default values, endpoint
templates and file paths used throughout the application, providing a
single source of truth for configuration.
"""
import os
from typing import Final

# --- Analysis Defaults ---
DEFAULT_ANALYSIS_DEPTH: Final[int] = 20
"""Default search depth passed to the engine with `go depth`."""

# --- Timeouts (seconds) ---
DEFAULT_HTTP_TIMEOUT_S: Final[float] = 30.0
"""Default timeout for each HTTP request made by the fetchers."""

DEFAULT_ENGINE_TIMEOUT_S: Final[float] = 300.0
"""Default upper bound for one engine round trip. 0 disables the bound."""

ENGINE_REAP_TIMEOUT_S: Final[float] = 2.0
"""How long to wait for a killed engine process to be reaped."""

# --- Lichess ---
LICHESS_HOST: Final[str] = "lichess.org"
LICHESS_EXPORT_URL: Final[str] = "https://lichess.org/game/export/{game_id}?evals=0&clocks=0"
"""PGN export endpoint; the response body is already PGN text."""

LICHESS_GAME_ID_LENGTH: Final[int] = 8
"""Length of a Lichess game id. Player-specific URLs carry 4 extra characters."""

# --- Chess.com ---
CHESS_COM_HOST: Final[str] = "chess.com"
CHESS_COM_CALLBACK_URL: Final[str] = "https://www.chess.com/callback/live/game/{game_id}"
"""Live-game metadata endpoint (JSON)."""

CHESS_COM_ARCHIVE_URL: Final[str] = "https://api.chess.com/pub/player/{username}/games/{year}/{month}"
"""Monthly game archive of a player (JSON)."""

CHESS_COM_GAME_URL: Final[str] = "https://www.chess.com/game/live/{game_id}"
"""Canonical game URL as it appears in the archive's `url` field."""

PGN_FILE_SUFFIX: Final[str] = ".pgn"

# --- Logging ---
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"
"""Default logging level for the application."""

# --- Persisted Configuration ---
CONFIG_ENV_VAR: Final[str] = "CHESS_PROBE_CONFIG"
"""Environment variable that overrides the location of the config file."""

DEFAULT_CONFIG_PATH: Final[str] = os.path.join(
    os.path.expanduser("~"), ".config", "chess-probe", "config.json"
)
"""Default location of the persisted JSON configuration."""

CONFIG_KEY_STOCKFISH_PATH: Final[str] = "stockfishPath"
"""Config file key holding the absolute path to the engine binary."""

STOCKFISH_ENV_VAR: Final[str] = "STOCKFISH_PATH"

# --- Application Specific ---
APP_NAME: Final[str] = "ChessProbe"
"""Application name, used for logging and other identifiers."""

APP_VERSION: Final[str] = "0.1.0"

USER_AGENT: Final[str] = f"{APP_NAME}/{APP_VERSION} (single-game engine analysis CLI)"
"""Sent with every request; Chess.com's public API refuses anonymous clients."""

EXIT_INTERRUPTED: Final[int] = 130
"""Common exit code for SIGINT."""

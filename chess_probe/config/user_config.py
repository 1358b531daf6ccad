# chess_probe/chess_probe/config/user_config.py
"""
Loads the persisted user configuration and resolves the engine path.

The configuration is a small JSON file read once at startup. Its only
required value is `stockfishPath`, the absolute path to the engine binary.
The path is handed to the pipeline explicitly; nothing else reads it.
"""
import json
import logging
import os
from dataclasses import dataclass
from shutil import which
from typing import Any, Dict, Mapping, Optional

from chess_probe.config import settings
from chess_probe.exceptions import ConfigError

logger = logging.getLogger(settings.APP_NAME + ".UserConfig")


@dataclass(frozen=True)
class UserConfig:
    """Values read from the persisted configuration file."""
    stockfish_path: Optional[str] = None
    source_file: Optional[str] = None


def default_config_path(environ: Optional[Mapping[str, str]] = None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get(settings.CONFIG_ENV_VAR) or settings.DEFAULT_CONFIG_PATH


def load_user_config(path: Optional[str] = None) -> UserConfig:
    """
    Reads the JSON configuration file.

    A missing file is not an error (an empty `UserConfig` is returned); a file
    that exists but cannot be read or parsed is.

    Raises:
        ConfigError: If the file is unreadable, not JSON, or has a bad value.
    """
    config_path = path or default_config_path()
    if not os.path.exists(config_path):
        logger.debug(f"No configuration file at '{config_path}'.")
        return UserConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data: Any = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Configuration file '{config_path}' is not valid JSON: {e}") from e
    except (IOError, OSError) as e:
        raise ConfigError(f"Cannot read configuration file '{config_path}': {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file '{config_path}' must contain a JSON object.")

    stockfish_path = data.get(settings.CONFIG_KEY_STOCKFISH_PATH)
    if stockfish_path is not None and not isinstance(stockfish_path, str):
        raise ConfigError(
            f"'{settings.CONFIG_KEY_STOCKFISH_PATH}' in '{config_path}' must be a string."
        )

    logger.info(f"Loaded configuration from '{config_path}'.")
    return UserConfig(stockfish_path=stockfish_path or None, source_file=config_path)


def save_user_config(config: Dict[str, Any], path: Optional[str] = None) -> str:
    """Writes `config` as the persisted configuration and returns its path."""
    config_path = path or default_config_path()
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_path)), exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=4)
    except (IOError, OSError) as e:
        raise ConfigError(f"Cannot write configuration file '{config_path}': {e}") from e
    return config_path


def find_stockfish_executable() -> Optional[str]:
    """Tries to find the Stockfish executable in common locations."""
    common_paths = ['./stockfish/stockfish', './stockfish', './stockfish.exe']
    for path in common_paths:
        if os.path.isfile(path) and os.access(path, os.X_OK):
            return os.path.abspath(path)

    return which('stockfish')


def resolve_engine_path(
    cli_path: Optional[str],
    config: UserConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Picks the engine path: command line, then the STOCKFISH_PATH environment
    variable, then the configuration file, then auto-detection.

    The chosen path is not validated here; an unusable path surfaces as an
    `EngineIOError` when the engine is spawned.
    """
    environ = os.environ if environ is None else environ
    if cli_path:
        return cli_path
    if environ.get(settings.STOCKFISH_ENV_VAR):
        return environ[settings.STOCKFISH_ENV_VAR]
    if config.stockfish_path:
        return config.stockfish_path
    return find_stockfish_executable()

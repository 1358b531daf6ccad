# chess_probe/chess_probe/exceptions.py
"""
Defines custom exceptions for the ChessProbe application.

Centralizing exceptions here avoids circular dependencies when different
modules need to catch exceptions defined by other components. Every error
raised by the pipeline derives from `ChessProbeError`, which is the only
type the command-line entry point needs to catch.
"""

# --- General ---
class ChessProbeError(Exception):
    """Base class for all application-specific errors."""
    pass

# --- Source Resolution Errors ---
class InvalidGameReference(ChessProbeError):
    """The game argument is neither a PGN file nor a well-formed URL."""
    pass

class GameNotFound(ChessProbeError):
    """No usable game data could be located for a game reference."""
    pass

class FetchTimeoutError(GameNotFound):
    """A remote game source did not answer within the configured timeout."""
    pass

# --- PGN Errors ---
class InvalidPgn(ChessProbeError):
    """The PGN rules library rejected the game text."""
    pass

# --- Engine Errors ---
class EngineIOError(ChessProbeError):
    """Error spawning or communicating with the engine process."""
    pass

class EngineTimeoutError(EngineIOError):
    """The engine did not finish its analysis within the configured timeout."""
    pass

class MalformedEngineOutput(ChessProbeError):
    """Engine output was captured but the expected lines are absent."""
    pass

# --- Configuration Errors ---
class ConfigError(ChessProbeError):
    """The persisted configuration file could not be read or parsed."""
    pass

# chess_probe/chess_probe/sources/classifier.py
"""
Decides which source a game argument refers to.

Classification is a pure function of the argument: it never touches the
network or the disk.
"""
import logging
from typing import Optional
from urllib.parse import SplitResult, urlsplit

from chess_probe.config import settings
from chess_probe.exceptions import InvalidGameReference
from chess_probe.types import GameReference, SourceKind

logger = logging.getLogger(settings.APP_NAME + ".Classifier")


def parse_absolute_url(raw: str) -> Optional[SplitResult]:
    """
    Returns the split URL if `raw` is a well-formed absolute URL with a host,
    otherwise None. The scheme is not restricted here; fetching decides
    whether it can be served.
    """
    if not raw or raw != raw.strip() or any(ch.isspace() for ch in raw):
        return None
    try:
        parts = urlsplit(raw)
        # Accessing the port validates it (raises ValueError when out of range).
        parts.port
    except ValueError:
        return None
    if not parts.hostname:
        return None
    return parts


def is_chess_com_host(host: str) -> bool:
    return host == settings.CHESS_COM_HOST or host.endswith("." + settings.CHESS_COM_HOST)


def classify(reference: GameReference) -> SourceKind:
    """
    Maps a game reference to exactly one `SourceKind`.

    The explicit `force_file` flag always wins, then the `.pgn` suffix,
    then the URL host.

    Raises:
        InvalidGameReference: If no rule matches.
    """
    raw = reference.raw

    if reference.force_file:
        kind = SourceKind.LOCAL_FILE
    elif raw.endswith(settings.PGN_FILE_SUFFIX):
        kind = SourceKind.LOCAL_FILE
    else:
        parts = parse_absolute_url(raw)
        if parts is None:
            raise InvalidGameReference(
                f"'{raw}' is neither a .pgn file nor a valid URL. "
                "Use -f/--force-file to read it as a file anyway."
            )
        host = parts.hostname.lower()
        if host == settings.LICHESS_HOST:
            kind = SourceKind.LICHESS
        elif is_chess_com_host(host):
            kind = SourceKind.CHESS_COM
        else:
            kind = SourceKind.GENERIC_URL

    logger.debug(f"Classified '{raw}' as {kind.name}.")
    return kind

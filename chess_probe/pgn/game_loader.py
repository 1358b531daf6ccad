# chess_probe/chess_probe/pgn/game_loader.py
"""
Turns canonical PGN text into the position to analyze.

Parsing and validation are delegated to python-chess. Its default game
builder is lenient (it logs and collects errors, then keeps going); here
the first error aborts the load so a malformed game is never analyzed from
a truncated position.
"""
import io
import logging
import re
from typing import List, Tuple

import chess
import chess.pgn

from chess_probe.config import settings
from chess_probe.exceptions import GameNotFound, InvalidPgn
from chess_probe.types import CanonicalGame, LoadedGame, SourceKind

logger = logging.getLogger(settings.APP_NAME + ".GameLoader")

_TAG_LINE = re.compile(r'^\[([A-Za-z0-9][A-Za-z0-9_+#=:-]*)\s+"(.*)"\]\s*$')

# Everything a well-formed movetext may contain. python-chess skips any
# other character silently, so the text is scanned here as well.
_MOVETEXT_TOKEN = re.compile(r"""
    \s+
    | \{[^}]*\}
    | ;[^\n]*
    | \$\d+
    | (?:\*|1-0|0-1|1/2-1/2)(?![\w-])
    | (?:
        [PNBRQK]?[a-h]?[1-8]?[-x]?[a-h][1-8](?:=?[NBRQnbrq])?
        | [PNBRQK]?@[a-h][1-8]
        | O-O(?:-O)? | 0-0(?:-0)?
        | -- | Z0 | 0000
      )[+#]?[?!]{0,2}
    | \d+\.*
    | [()]
    | [?!]{1,2}
""", re.VERBOSE)


def _comment_open_after(line: str, in_comment: bool) -> bool:
    """Returns whether a brace comment is still open at the end of `line`."""
    for ch in line:
        if in_comment:
            if ch == "}":
                in_comment = False
        elif ch == "{":
            in_comment = True
        elif ch == ";":
            break
    return in_comment


def split_first_game(pgn_text: str) -> Tuple[List[str], str]:
    """
    Splits out the tag lines and movetext of the first game in `pgn_text`.

    Section boundaries follow python-chess: at most one blank line between
    tag pairs, and the movetext runs up to the next blank line outside a
    brace comment.
    """
    lines = pgn_text.lstrip("\ufeff").splitlines()
    i = 0
    while i < len(lines) and (not lines[i].strip() or lines[i].startswith(("%", ";"))):
        i += 1

    tags = []
    blank_run = 0
    while i < len(lines):
        line = lines[i]
        if not line.strip():
            blank_run += 1
            if blank_run > 1:
                break
        elif line.startswith("["):
            blank_run = 0
            tags.append(line)
        elif not line.startswith(("%", ";")):
            break
        i += 1

    while i < len(lines) and not lines[i].strip():
        i += 1

    movetext = []
    in_comment = False
    while i < len(lines):
        line = lines[i]
        if not in_comment:
            if not line.strip():
                break
            if line.startswith("%"):
                i += 1
                continue
        movetext.append(line)
        in_comment = _comment_open_after(line, in_comment)
        i += 1
    return tags, "\n".join(movetext)


def check_pgn_text(pgn_text: str, origin: str = "<pgn>") -> None:
    """
    Rejects text in the first game that python-chess would silently skip.

    Raises:
        InvalidPgn: On a malformed tag line or unrecognised movetext.
    """
    tags, movetext = split_first_game(pgn_text)
    for line in tags:
        if not _TAG_LINE.match(line):
            raise InvalidPgn(f"Malformed PGN tag line from {origin}: {line.strip()!r}")

    pos = 0
    while pos < len(movetext):
        match = _MOVETEXT_TOKEN.match(movetext, pos)
        if not match:
            snippet = movetext[pos:pos + 20].split("\n", 1)[0]
            raise InvalidPgn(f"Unrecognised text in PGN movetext from {origin}: {snippet!r}")
        pos = match.end()


class StrictGameBuilder(chess.pgn.GameBuilder):
    """A game builder that raises on the first parse error."""

    def begin_game(self) -> None:
        super().begin_game()
        self.header_count = 0
        self.move_count = 0

    def visit_header(self, tagname: str, tagvalue: str) -> None:
        self.header_count += 1
        super().visit_header(tagname, tagvalue)

    def visit_move(self, board: chess.Board, move: chess.Move) -> None:
        self.move_count += 1
        super().visit_move(board, move)

    def handle_error(self, error: Exception) -> None:
        raise error


class GameLoader:
    """Reads PGN from disk and replays it to the final position."""

    def read_local_file(self, path: str) -> CanonicalGame:
        """Reads a PGN file in full."""
        try:
            with open(path, "r", encoding="utf-8-sig", errors="replace") as pgn_file:
                text = pgn_file.read()
        except FileNotFoundError as e:
            raise GameNotFound(f"PGN file not found: {path}") from e
        except (IOError, OSError) as e:
            raise GameNotFound(f"Cannot read PGN file '{path}': {e}") from e
        logger.debug(f"Read {len(text)} characters from '{path}'.")
        return CanonicalGame(pgn_text=text, source_kind=SourceKind.LOCAL_FILE, origin=path)

    def parse(self, pgn_text: str, origin: str = "<pgn>") -> chess.pgn.Game:
        """
        Parses the first game in `pgn_text`.

        Raises:
            InvalidPgn: If there is no game, if python-chess reports any
                error, if the text has neither a tag pair nor a move, or if
                the first game holds text python-chess would skip.
        """
        builder = StrictGameBuilder()
        try:
            game = chess.pgn.read_game(io.StringIO(pgn_text), Visitor=lambda: builder)
        except (ValueError, IndexError, AssertionError) as e:
            raise InvalidPgn(f"Malformed PGN from {origin}: {e}") from e

        if game is None:
            raise InvalidPgn(f"No game found in PGN from {origin}.")
        if builder.header_count == 0 and builder.move_count == 0:
            raise InvalidPgn(
                f"Text from {origin} contains neither PGN tags nor moves; is it an HTML page?"
            )
        check_pgn_text(pgn_text, origin)
        return game

    def load(self, canonical: CanonicalGame) -> LoadedGame:
        """Parses the game and extracts the FEN after its final recorded move."""
        game = self.parse(canonical.pgn_text, canonical.origin)
        final_board = game.end().board()
        fen = final_board.fen()
        logger.info(
            f"Loaded game '{game.headers.get('White', '?')} - {game.headers.get('Black', '?')}' "
            f"({final_board.ply()} plies) from {canonical.origin}."
        )
        return LoadedGame(game=game, fen=fen)

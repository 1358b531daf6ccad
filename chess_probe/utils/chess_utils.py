# chess_probe/chess_probe/utils/chess_utils.py
"""
Generic chess-related utility functions.

These are pure functions on top of python-chess, not tied to a specific
component like PGN loading or engine interaction.
"""
import chess


def uci_to_san(fen: str, uci_move: str) -> str:
    """
    Renders a coordinate move in standard algebraic notation.

    Falls back to the coordinate move itself when it is not legal in the
    position (e.g. a promotion reported without its piece letter).

    Args:
        fen: The position the move is played from.
        uci_move: A coordinate move such as "g1f3".

    Returns:
        The SAN string, e.g. "Nf3", or `uci_move` unchanged.
    """
    try:
        board = chess.Board(fen)
        move = chess.Move.from_uci(uci_move)
    except ValueError:
        return uci_move
    if not board.is_legal(move):
        return uci_move
    return board.san(move)

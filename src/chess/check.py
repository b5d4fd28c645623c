"""
Check detection. Pure functions over a Board: usable on the canonical board as well as on speculative snapshots.
"""

from src.chess.board import Board
from src.chess.moves import ATTACK_RULES, IsAttackedFn
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.shared_types import Color


def attackers_of(board: Board, square: Square, by_color: Color) -> list[Piece]:
    """All pieces of `by_color` that attack the given square"""
    attackers: list[Piece] = []
    for piece in board.pieces(by_color):
        attack_rule: IsAttackedFn = ATTACK_RULES[piece.type]
        if attack_rule(piece, square, board):
            attackers.append(piece)
    return attackers


def is_square_attacked(board: Board, square: Square, by_color: Color) -> bool:
    """Stops at the first attacker found"""
    return any(
        ATTACK_RULES[piece.type](piece, square, board)
        for piece in board.pieces(by_color)
    )


def is_in_check(board: Board, color: Color) -> bool:
    """
    Is the king of `color` attacked by any enemy piece?

    NOTE: A board without a king of this color is simply 'not in check' (not an error).
    """
    king_square = board.locate_king(color)
    if king_square is None:
        return False
    return is_square_attacked(board, king_square, color.opponent)

"""
Executing a move that has already been validated.

All updates are made on a staged snapshot and committed to the board in a single step, so nobody can observe a
half-applied move (ex. a king that has castled while its rook is still in the corner).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Self

from src.chess.board import Board
from src.chess.castling import CastlingSide, CastlingSquares, castling_side
from src.chess.moves import Move, displacement
from src.chess.pieces import Piece
from src.chess.square import Square
from src.chess.validator import LegalityResult, check_move
from src.core.exceptions import IllegalMoveError
from src.core.shared_types import PieceType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppliedMove:
    """What a move did. `moving_piece` is the mover as it stood before the move."""

    move: Move
    moving_piece: Piece
    captured_piece: Optional[Piece] = None
    castling_side: Optional[CastlingSide] = None
    is_en_passant: bool = False

    @classmethod
    def describe(
        cls,
        moving_piece: Piece,
        destination: Square,
        captured_piece: Optional[Piece],
        side: Optional[CastlingSide],
        is_en_passant: bool,
    ) -> Self:
        return cls(
            move=Move(moving_piece.position, destination),
            moving_piece=moving_piece,
            captured_piece=captured_piece,
            castling_side=side,
            is_en_passant=is_en_passant,
        )


def apply_move(board: Board, piece: Piece, destination: Square) -> AppliedMove:
    """
    Update the board with a validated move
    -----

    (a) capture the enemy piece standing on the destination
    (b) en passant: a pawn moving diagonally onto an empty square takes the pawn right behind that square
    (c) nobody can be taken en passant anymore ...
    (d) ... except a pawn that advances two squares right now
    (e) castling: the rook jumps over to the square next to the king's destination
    (f) the moving piece lands on the destination and has now moved

    NOTE: the board adopts the staged copies of its pieces. Look pieces up again with `occupant_at` after the move.
    """
    staged = board.snapshot()
    mover = staged.occupant_at(piece.position)
    if mover is None or mover != piece:
        raise IllegalMoveError(f"Piece is not on this board: {piece}")

    before = mover.copy()
    df, dr = displacement(mover.position, destination)
    is_pawn = mover.type == PieceType.PAWN
    is_en_passant = False

    # (a)
    captured = staged.remove(destination)

    # (b)
    if is_pawn and df != 0 and captured is None:
        captured = staged.remove(destination.offset(0, -mover.color.forward))
        is_en_passant = captured is not None

    # (c)
    staged.clear_en_passant_targets()

    # (d)
    if is_pawn and abs(dr) == 2:
        mover.is_en_passant_target = True

    # (e)
    side = (
        castling_side(mover.position, destination)
        if mover.type == PieceType.KING
        else None
    )
    if side is not None:
        squares = CastlingSquares.for_king(mover.position, side)
        rook = staged.occupant_at(squares.rook_from)
        if rook is None:
            raise IllegalMoveError(
                f"No rook on {squares.rook_from.to_algebraic()} to castle with"
            )
        staged.relocate(rook, squares.rook_to)
        rook.has_not_moved = False

    applied = AppliedMove.describe(before, destination, captured, side, is_en_passant)

    # (f)
    staged.relocate(mover, destination)
    mover.has_not_moved = False

    board.commit(staged)
    logger.debug("Applied %s", applied.move.to_uci())
    return applied


def try_move(
    board: Board, piece: Piece, destination: Square
) -> tuple[LegalityResult, Optional[AppliedMove]]:
    """Validate, and only apply the move if it is legal."""
    result = check_move(board, piece, destination)
    if not result:
        return result, None
    return result, apply_move(board, piece, destination)

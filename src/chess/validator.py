"""
Move legality.

`check_move` runs an ordered list of checks and stops at the first one that fails:

1. the destination must lie on the board
2. the piece must actually move
3. you cannot capture your own piece
4. the move cannot leave your own king in check (tested on a snapshot, BEFORE the movement rules of the piece)
5. the movement rules of the piece type (sliding pieces need a clear line of sight)

An illegal move is a normal outcome, not an error: it is reported as a LegalityResult that evaluates to False.
The validator never mutates the board it is given.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from src.chess.board import Board
from src.chess.castling import CastlingSquares, castling_side
from src.chess.check import is_in_check
from src.chess.moves import (
    displacement,
    is_adjacent,
    is_diagonal,
    is_knight_jump,
    is_path_clear,
    is_straight,
)
from src.chess.pieces import Piece
from src.chess.square import ALL_SQUARES, Square
from src.core.shared_types import PieceType


class Rejection(Enum):
    NOT_ON_BOARD = "piece is not on the board"
    OUT_OF_BOUNDS = "destination is off the board"
    NO_MOVEMENT = "destination is the square the piece stands on"
    SELF_CAPTURE = "destination holds a piece of the same color"
    LEAVES_KING_IN_CHECK = "move leaves own king in check"
    ILLEGAL_SHAPE = "piece cannot move like that"
    PATH_BLOCKED = "path is blocked"
    CASTLING_NOT_ALLOWED = "castling conditions not met"


@dataclass(frozen=True)
class LegalityResult:
    legal: bool
    reason: Optional[Rejection] = None

    def __bool__(self) -> bool:
        return self.legal


LEGAL = LegalityResult(True)


def _reject(reason: Rejection) -> LegalityResult:
    return LegalityResult(False, reason)


def check_move(board: Board, piece: Piece, destination: Square) -> LegalityResult:
    if not destination.is_within_bounds():
        return _reject(Rejection.OUT_OF_BOUNDS)

    if board.occupant_at(piece.position) != piece:
        return _reject(Rejection.NOT_ON_BOARD)

    if destination == piece.position:
        return _reject(Rejection.NO_MOVEMENT)

    occupant = board.occupant_at(destination)
    if occupant is not None and occupant.color == piece.color:
        return _reject(Rejection.SELF_CAPTURE)

    if exposes_king(board, piece, destination):
        return _reject(Rejection.LEAVES_KING_IN_CHECK)

    movement_rule: MovementRuleFn = MOVEMENT_RULES[piece.type]
    return movement_rule(piece, destination, board)


def is_move_legal(board: Board, piece: Piece, destination: Square) -> bool:
    return bool(check_move(board, piece, destination))


def legal_destinations(board: Board, piece: Piece) -> list[Square]:
    """Every square the piece may legally move to (ex. for highlighting in a UI)"""
    return [square for square in ALL_SQUARES if is_move_legal(board, piece, square)]


def exposes_king(board: Board, piece: Piece, destination: Square) -> bool:
    """Return True if the move puts (or leaves) the mover's own king in check

    plan:
    1. Copy the board
    2. lift the piece off its square and put it down on the destination
    3. determine if the king is in check on the new board
    """
    what_if = board.snapshot()
    moving = what_if.remove(piece.position)
    # for the type checker: check_move already made sure the piece is on the board
    assert moving is not None
    moving.position = destination
    what_if.place(moving)
    return is_in_check(what_if, piece.color)


# --- MOVEMENT RULES ---
def _sliding_move(
    piece: Piece, destination: Square, board: Board, shape_ok: bool
) -> LegalityResult:
    if not shape_ok:
        return _reject(Rejection.ILLEGAL_SHAPE)
    if not is_path_clear(piece.position, destination, board):
        return _reject(Rejection.PATH_BLOCKED)
    return LEGAL


def pawn_move(piece: Piece, destination: Square, board: Board) -> LegalityResult:
    """
    A pawn:
    - moves by a single square forward, onto an empty square
    - can move by two in its first move, if both squares in front of it are empty
    - takes diagonally (one square forward)
    - takes en passant: diagonally onto an empty square, if the pawn behind that square has just advanced by two
    """
    df, dr = displacement(piece.position, destination)
    forward = piece.color.forward
    target = board.occupant_at(destination)

    # pawn pushes
    if df == 0:
        if dr == forward:
            return LEGAL if target is None else _reject(Rejection.PATH_BLOCKED)
        if dr == 2 * forward and piece.has_not_moved:
            in_between = piece.position.offset(0, forward)
            if board.are_all_empty([in_between, destination]):
                return LEGAL
            return _reject(Rejection.PATH_BLOCKED)
        return _reject(Rejection.ILLEGAL_SHAPE)

    # pawn takes
    if abs(df) == 1 and dr == forward:
        if target is not None:
            # same color was already ruled out, so this is an enemy piece
            return LEGAL
        behind = destination.offset(0, -forward)
        passed_pawn = board.occupant_at(behind)
        if (
            passed_pawn is not None
            and passed_pawn.type == PieceType.PAWN
            and passed_pawn.color != piece.color
            and passed_pawn.is_en_passant_target
        ):
            return LEGAL

    return _reject(Rejection.ILLEGAL_SHAPE)


def knight_move(piece: Piece, destination: Square, board: Board) -> LegalityResult:
    """Knights jump: nothing can block them"""
    if is_knight_jump(piece.position, destination):
        return LEGAL
    return _reject(Rejection.ILLEGAL_SHAPE)


def bishop_move(piece: Piece, destination: Square, board: Board) -> LegalityResult:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return _sliding_move(
        piece, destination, board, is_diagonal(piece.position, destination)
    )


def rook_move(piece: Piece, destination: Square, board: Board) -> LegalityResult:
    """Rooks move either horizontally or vertically"""
    return _sliding_move(
        piece, destination, board, is_straight(piece.position, destination)
    )


def queen_move(piece: Piece, destination: Square, board: Board) -> LegalityResult:
    shape_ok = is_diagonal(piece.position, destination) or is_straight(
        piece.position, destination
    )
    return _sliding_move(piece, destination, board, shape_ok)


def king_move(piece: Piece, destination: Square, board: Board) -> LegalityResult:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move: two files along its own rank.
    """
    if is_adjacent(piece.position, destination):
        return LEGAL
    if castling_side(piece.position, destination) is not None:
        return castling_move(piece, destination, board)
    return _reject(Rejection.ILLEGAL_SHAPE)


def castling_move(king: Piece, destination: Square, board: Board) -> LegalityResult:
    """
    **you are allowed to castle if**

    * Neither the king nor the rook in the corner it castles towards has moved before.
    * All squares in between the king and the rook are empty.
    * The square the king passes over is not under attack (the destination was already checked before).
    """
    side = castling_side(king.position, destination)
    if side is None or not king.has_not_moved:
        return _reject(Rejection.CASTLING_NOT_ALLOWED)

    squares = CastlingSquares.for_king(king.position, side)
    rook = board.occupant_at(squares.rook_from)
    if (
        rook is None
        or rook.type != PieceType.ROOK
        or rook.color != king.color
        or not rook.has_not_moved
    ):
        return _reject(Rejection.CASTLING_NOT_ALLOWED)

    if not board.are_all_empty(squares.between):
        return _reject(Rejection.PATH_BLOCKED)

    if exposes_king(board, king, squares.king_passes):
        return _reject(Rejection.CASTLING_NOT_ALLOWED)

    return LEGAL


# -- STRATEGY PATTERN: MOVEMENT RULES ---
MovementRuleFn = Callable[[Piece, Square, Board], LegalityResult]
MOVEMENT_RULES: dict[PieceType, MovementRuleFn] = {
    PieceType.PAWN: pawn_move,
    PieceType.KNIGHT: knight_move,
    PieceType.BISHOP: bishop_move,
    PieceType.ROOK: rook_move,
    PieceType.QUEEN: queen_move,
    PieceType.KING: king_move,
}

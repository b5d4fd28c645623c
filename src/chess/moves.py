"""
Geometry/Base movement and attacking rules

Key idea: Use strategy pattern to define the attacking rules for each piece type.

Legality (including the own-king-in-check rule) is decided later by the validator
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.shared_types import PieceType


class Board(Protocol):
    """Just the parts the attacking strategies need"""

    def occupant_at(self, square: Square) -> Optional[Piece]: ...
    def are_all_empty(self, squares: list[Square]) -> bool: ...


Vector = tuple[int, int]

KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        "e2e4": move the piece that was on e2 to e4
        """
        return cls(Square.from_algebraic(uci[:2]), Square.from_algebraic(uci[2:4]))

    def to_uci(self) -> str:
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}"

    @property
    def delta(self) -> Vector:
        return displacement(self.from_square, self.to_square)


# --- GEOMETRY ---
def displacement(from_square: Square, to_square: Square) -> Vector:
    return to_square.file - from_square.file, to_square.rank - from_square.rank


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def is_diagonal(from_square: Square, to_square: Square) -> bool:
    """|delta_file| = |delta_rank| (and actually moving)"""
    df, dr = displacement(from_square, to_square)
    return df != 0 and abs(df) == abs(dr)


def is_straight(from_square: Square, to_square: Square) -> bool:
    """Stay on the same file XOR the same rank"""
    df, dr = displacement(from_square, to_square)
    return (df == 0) != (dr == 0)


def is_knight_jump(from_square: Square, to_square: Square) -> bool:
    return displacement(from_square, to_square) in KNIGHT_DELTAS


def is_adjacent(from_square: Square, to_square: Square) -> bool:
    df, dr = displacement(from_square, to_square)
    return (df, dr) != (0, 0) and abs(df) <= 1 and abs(dr) <= 1


def squares_between(from_square: Square, to_square: Square) -> list[Square]:
    """
    The squares strictly in between two squares on the same file, rank or diagonal.

    Two squares that do not share a line have nothing in between them (empty list).
    """
    if not (
        is_straight(from_square, to_square) or is_diagonal(from_square, to_square)
    ):
        return []

    df, dr = displacement(from_square, to_square)
    step_file, step_rank = _sign(df), _sign(dr)
    distance = max(abs(df), abs(dr))
    return [
        from_square.offset(step_file * i, step_rank * i) for i in range(1, distance)
    ]


def is_path_clear(from_square: Square, to_square: Square, board: Board) -> bool:
    """Line of sight of a sliding piece: nothing stands strictly in between"""
    return board.are_all_empty(squares_between(from_square, to_square))


# --- ATTACKING RULES ---
def is_attacked_by_pawn(attacker: Piece, target: Square, board: Board) -> bool:
    """
    Pawns take diagonally, one rank forward.

    NOTE: Pawn attacks are not symmetric. A Light pawn attacks UP the board, a Dark pawn DOWN the board.
    """
    df, dr = displacement(attacker.position, target)
    return abs(df) == 1 and dr == attacker.color.forward


def is_attacked_by_knight(attacker: Piece, target: Square, board: Board) -> bool:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return is_knight_jump(attacker.position, target)


def is_attacked_by_bishop(attacker: Piece, target: Square, board: Board) -> bool:
    return is_diagonal(attacker.position, target) and is_path_clear(
        attacker.position, target, board
    )


def is_attacked_by_rook(attacker: Piece, target: Square, board: Board) -> bool:
    return is_straight(attacker.position, target) and is_path_clear(
        attacker.position, target, board
    )


def is_attacked_by_queen(attacker: Piece, target: Square, board: Board) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return is_attacked_by_bishop(attacker, target, board) or is_attacked_by_rook(
        attacker, target, board
    )


def is_attacked_by_king(attacker: Piece, target: Square, board: Board) -> bool:
    return is_adjacent(attacker.position, target)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Piece, Square, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}

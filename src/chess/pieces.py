"""Defines the chess pieces and the characters used to encode them"""

from dataclasses import dataclass

from src.chess.square import Square
from src.core.shared_types import Color, PieceType

# Case carries no meaning in the board encoding: always lowercase.
CODE_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_CODE: dict[PieceType, str] = {
    value: key for key, value in CODE_TO_PIECE.items()
}

CODE_TO_COLOR: dict[str, Color] = {
    "0": Color.LIGHT,
    "1": Color.DARK,
}

COLOR_TO_CODE: dict[Color, str] = {value: key for key, value in CODE_TO_COLOR.items()}

# Order of the pieces on the back rank, starting from the a-file
BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)

SLIDING_PIECES: frozenset[PieceType] = frozenset(
    {PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN}
)


@dataclass
class Piece:
    type: PieceType
    color: Color
    position: Square
    has_not_moved: bool = True
    is_en_passant_target: bool = False

    def copy(self) -> "Piece":
        # every field is immutable, so a shallow copy is a full copy
        return Piece(
            self.type,
            self.color,
            self.position,
            self.has_not_moved,
            self.is_en_passant_target,
        )

    @property
    def is_sliding(self) -> bool:
        return self.type in SLIDING_PIECES

    def __str__(self) -> str:
        return f"{self.color} {self.type} on {self.position.to_algebraic()}"

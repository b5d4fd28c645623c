"""The Board owns the pieces: at most one per square, and every piece lifecycle within a game goes through it"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Self

from src.chess.pieces import BACK_RANK, Piece
from src.chess.square import ALL_SQUARES, BOARD_DIMENSIONS, Square
from src.core.exceptions import IllegalMoveError, InvalidSquareError
from src.core.shared_types import Color, PieceType

NUM_SQUARES = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]
LIGHT_BACK_RANK = 0
DARK_BACK_RANK = BOARD_DIMENSIONS[1] - 1


def _index(square: Square) -> int:
    """Slots are stored file by file: a1, a2, ..., a8, b1, ..."""
    return square.file * BOARD_DIMENSIONS[1] + square.rank


@dataclass
class Board:
    slots: list[Optional[Piece]] = field(default_factory=lambda: [None] * NUM_SQUARES)

    @classmethod
    def empty(cls) -> Self:
        return cls()

    @classmethod
    def standard_setup(cls) -> Self:
        """
        Standard opening position:
        * Light pawns on rank 1, Dark pawns on rank 6
        * back ranks (0 and 7) read Rook, Knight, Bishop, Queen, King, Bishop, Knight, Rook from the a-file onwards
        """
        board = cls.empty()
        for color, back_rank in (
            (Color.LIGHT, LIGHT_BACK_RANK),
            (Color.DARK, DARK_BACK_RANK),
        ):
            pawn_rank = back_rank + color.forward
            for file, piece_type in enumerate(BACK_RANK):
                board.place(Piece(piece_type, color, Square(file, back_rank)))
                board.place(Piece(PieceType.PAWN, color, Square(file, pawn_rank)))
        return board

    def snapshot(self) -> Self:
        """Structural copy: new slot list, new Piece objects. Nothing is shared with the original."""
        return type(self)([piece.copy() if piece else None for piece in self.slots])

    def occupant_at(self, square: Square) -> Optional[Piece]:
        if not square.is_within_bounds():
            return None
        return self.slots[_index(square)]

    def is_occupied(self, square: Square) -> bool:
        return self.occupant_at(square) is not None

    def are_all_empty(self, squares: Iterable[Square]) -> bool:
        return not any(self.is_occupied(square) for square in squares)

    def place(self, piece: Piece) -> None:
        """Put the piece on the square stored in its own position (replacing whatever stood there)."""
        if not piece.position.is_within_bounds():
            raise InvalidSquareError(f"Cannot place a piece off the board: {piece}")
        self.slots[_index(piece.position)] = piece

    def remove(self, square: Square) -> Optional[Piece]:
        """Empty the square and hand back the piece that stood there, if any."""
        piece = self.occupant_at(square)
        if piece is not None:
            self.slots[_index(square)] = None
        return piece

    def relocate(self, piece: Piece, destination: Square) -> None:
        """Transfer the piece from its current square to the destination and update its stored position"""
        if self.occupant_at(piece.position) is not piece:
            raise IllegalMoveError(f"Piece is not on this board: {piece}")
        if not destination.is_within_bounds():
            raise InvalidSquareError(
                f"Cannot move {piece} off the board to {destination}"
            )
        self.slots[_index(piece.position)] = None
        piece.position = destination
        self.slots[_index(destination)] = piece

    def pieces(self, color: Optional[Color] = None) -> Iterator[Piece]:
        """Occupied squares, file by file (a1..a8, b1..b8, ...)"""
        for square in ALL_SQUARES:
            piece = self.slots[_index(square)]
            if piece is None:
                continue
            if color is None or piece.color == color:
                yield piece

    def locate_king(self, color: Color) -> Optional[Square]:
        return next(
            (
                piece.position
                for piece in self.pieces(color)
                if piece.type == PieceType.KING
            ),
            None,
        )

    def clear_en_passant_targets(self) -> None:
        for piece in self.pieces():
            piece.is_en_passant_target = False

    def commit(self, staged: "Board") -> None:
        """Adopt the position of a staged board in one assignment."""
        self.slots = staged.slots

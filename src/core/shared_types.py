"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    LIGHT = "light"
    DARK = "dark"

    @property
    def opponent(self) -> "Color":
        return Color.DARK if self == Color.LIGHT else Color.LIGHT

    @property
    def forward(self) -> int:
        """Light moves UP the board (increasing rank), Dark moves DOWN"""
        return 1 if self == Color.LIGHT else -1


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class MessageType(StrEnum):
    """The `type` field of every frame sent over the game socket."""

    MOVE = "move"
    RESET = "reset"
    SET = "set"
    REJECTED = "rejected"

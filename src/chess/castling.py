"""Helpers for implementing Castling rules. Need to be imported by the validator and the applier"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Self

from src.chess.square import BOARD_DIMENSIONS, Square


class CastlingSide(Enum):
    KING_SIDE = "short"
    QUEEN_SIDE = "long"


@dataclass(frozen=True)
class CastlingRule:
    """Direction the king travels along its rank, and the file of the corner rook that takes part."""

    step: int
    rook_file: int


CASTLING_RULES: dict[CastlingSide, CastlingRule] = {
    CastlingSide.KING_SIDE: CastlingRule(step=1, rook_file=BOARD_DIMENSIONS[0] - 1),
    CastlingSide.QUEEN_SIDE: CastlingRule(step=-1, rook_file=0),
}


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: Everything is relative to the square the king starts from, the rook always comes from the corner.
    """

    king_from: Square
    king_passes: Square
    king_to: Square
    rook_from: Square
    rook_to: Square
    between: tuple[Square, ...]

    @classmethod
    def for_king(cls, king_from: Square, side: CastlingSide) -> Self:
        rule = CASTLING_RULES[side]
        rank = king_from.rank
        king_passes = king_from.offset(rule.step, 0)
        king_to = king_from.offset(2 * rule.step, 0)
        low, high = sorted((king_from.file, rule.rook_file))
        between = tuple(Square(file, rank) for file in range(low + 1, high))
        return cls(
            king_from=king_from,
            king_passes=king_passes,
            king_to=king_to,
            rook_from=Square(rule.rook_file, rank),
            # rook lands next to the king, on the square the king passed over
            rook_to=king_passes,
            between=between,
        )


def castling_side(king_from: Square, king_to: Square) -> Optional[CastlingSide]:
    """A king move along its rank by exactly two files is a castling attempt"""
    if king_from.rank != king_to.rank:
        return None
    for side, rule in CASTLING_RULES.items():
        if king_to.file - king_from.file == 2 * rule.step:
            return side
    return None

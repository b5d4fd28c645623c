"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase

from src.core.exceptions import InvalidSquareError

# Chess board is always 8x8. Indices run 0..7 in both directions.
BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = ascii_lowercase[: BOARD_DIMENSIONS[0]]
RANK_NAMES = "".join(str(rank) for rank in range(1, BOARD_DIMENSIONS[1] + 1))


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        if not is_algebraic(sq):
            raise InvalidSquareError(f"Cannot interpret {sq!r} as a square name.")
        file = FILE_NAMES.index(sq[0])
        rank = int(sq[1]) - 1
        return cls(file, rank)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a'))}{self.rank + 1}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.file < BOARD_DIMENSIONS[0]) and (
            0 <= self.rank < BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        """The square displaced by (df, dr). May lie off the board; check with `is_within_bounds`."""
        return Square(self.file + df, self.rank + dr)


def is_algebraic(sq: str) -> bool:
    """Valid square should be a letter for the file + a single digit for the rank"""
    if len(sq) != 2:
        return False
    file_char, rank_char = sq[0], sq[1]
    if file_char not in FILE_NAMES:
        return False
    return rank_char in RANK_NAMES


ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(file, rank)
    for file in range(BOARD_DIMENSIONS[0])
    for rank in range(BOARD_DIMENSIONS[1])
)

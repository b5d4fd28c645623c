"""Unit tests for /src/chess/square.py"""

from string import ascii_lowercase

import pytest

from src.chess.square import ALL_SQUARES, BOARD_DIMENSIONS, Square, is_algebraic
from src.core.exceptions import InvalidSquareError


@pytest.mark.parametrize(
    "file, rank, notation",
    [
        (file, rank, f"{ascii_lowercase[file]}{rank + 1}")
        for file in range(8)
        for rank in range(8)
    ],
)
def test_creating_from_algebraic(file: int, rank: int, notation: str) -> None:
    """Simply checks if the notation for 'a1' indeed maps to file 0, rank 0, etc."""
    square = Square.from_algebraic(notation)
    assert square.file == file
    assert square.rank == rank
    assert square.to_algebraic() == notation


@pytest.mark.parametrize("notation", ["", "e", "i1", "a0", "a9", "e22", "E2", "2e"])
def test_invalid_algebraic(notation: str) -> None:
    assert not is_algebraic(notation)
    with pytest.raises(InvalidSquareError):
        Square.from_algebraic(notation)


def test_square_within_bounds() -> None:
    """happy case: every square of the board, inclusive of both edges"""
    for file in range(BOARD_DIMENSIONS[0]):
        for rank in range(BOARD_DIMENSIONS[1]):
            assert Square(file, rank).is_within_bounds()


@pytest.mark.parametrize(
    "file, rank", [(8, 0), (0, 8), (8, 8), (-1, 0), (0, -1), (-1, -1)]
)
def test_square_out_of_bounds(file: int, rank: int) -> None:
    """File or rank 8 is already off the board (indices run 0..7)"""
    assert not Square(file, rank).is_within_bounds()


def test_offset() -> None:
    assert Square(4, 1).offset(0, 2) == Square(4, 3)
    assert Square(0, 0).offset(-1, 0) == Square(-1, 0)


def test_all_squares_are_listed_file_by_file() -> None:
    assert len(ALL_SQUARES) == 64
    assert ALL_SQUARES[0] == Square(0, 0)
    assert ALL_SQUARES[1] == Square(0, 1)
    assert ALL_SQUARES[8] == Square(1, 0)
    assert ALL_SQUARES[-1] == Square(7, 7)

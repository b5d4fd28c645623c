"""Helpers to set up positions quickly in tests"""

from src.chess.board import Board
from src.chess.pieces import CODE_TO_PIECE, Piece
from src.chess.square import Square
from src.core.shared_types import Color


def sq(name: str) -> Square:
    """Shorthand used all over the tests"""
    return Square.from_algebraic(name)


def build_board(layout: dict[str, str]) -> Board:
    """
    Place pieces by square name, FEN style: capital letters for Light pieces, small letters for Dark pieces.

    ex) {"e1": "K", "e8": "k", "a1": "R"}

    A piece counts as 'not moved yet' when it stands on its color's starting ranks (like in a real game).
    """
    board = Board.empty()
    for square_name, character in layout.items():
        color = Color.LIGHT if character.isupper() else Color.DARK
        square = sq(square_name)
        home_ranks = (0, 1) if color == Color.LIGHT else (6, 7)
        board.place(
            Piece(
                CODE_TO_PIECE[character.lower()],
                color,
                square,
                has_not_moved=square.rank in home_ranks,
            )
        )
    return board


def at(board: Board, name: str) -> Piece:
    """The piece on the named square. Fails the test if the square is empty."""
    piece = board.occupant_at(sq(name))
    assert piece is not None, f"expected a piece on {name}"
    return piece

"""
Compact encoding of a Board, used to send the authoritative state over the wire and to snapshot it in the database.

Every occupied square becomes one fixed-width record of 6 characters. Records are concatenated without separators:

<kind><color><file><rank><en passant target><has not moved>

* kind: p, n, b, r, q or k (always lowercase)
* color: 0 for Light, 1 for Dark
* file/rank: the square in algebraic notation, 'a1' - 'h8'
* en passant target: 0 or 1
* has not moved: 0 or 1

ex) a Light pawn that has just advanced from e2 to e4 is encoded as "p0e410"

The encoder walks the board file by file (a1..a8, b1..b8, ...). Every record carries its own square,
so the decoder does not depend on that order.
"""

from dataclasses import dataclass
from typing import Optional

from src.chess.board import Board
from src.chess.pieces import (
    CODE_TO_COLOR,
    CODE_TO_PIECE,
    COLOR_TO_CODE,
    PIECE_TO_CODE,
    Piece,
)
from src.chess.square import Square, is_algebraic
from src.core.exceptions import DecodeError

RECORD_LENGTH = 6
FLAG_TO_CODE: dict[bool, str] = {False: "0", True: "1"}
CODE_TO_FLAG: dict[str, bool] = {value: key for key, value in FLAG_TO_CODE.items()}


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of `try_decode`: exactly one of `board` / `error` is set."""

    board: Optional[Board] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def encode_piece(piece: Piece) -> str:
    return "".join(
        [
            PIECE_TO_CODE[piece.type],
            COLOR_TO_CODE[piece.color],
            piece.position.to_algebraic(),
            FLAG_TO_CODE[piece.is_en_passant_target],
            FLAG_TO_CODE[piece.has_not_moved],
        ]
    )


def decode_piece(record: str) -> Piece:
    """Parse a single record. Unknown characters are an error, never silently coerced."""
    if len(record) != RECORD_LENGTH:
        raise DecodeError(
            f"A piece record has {RECORD_LENGTH} characters, got {len(record)}: {record!r}"
        )

    kind_char, color_char, square_str, en_passant_char, not_moved_char = (
        record[0],
        record[1],
        record[2:4],
        record[4],
        record[5],
    )
    if kind_char not in CODE_TO_PIECE:
        raise DecodeError(f"Unknown piece kind {kind_char!r} in record {record!r}")
    if color_char not in CODE_TO_COLOR:
        raise DecodeError(f"Unknown color {color_char!r} in record {record!r}")
    if not is_algebraic(square_str):
        raise DecodeError(f"Invalid square {square_str!r} in record {record!r}")
    if en_passant_char not in CODE_TO_FLAG or not_moved_char not in CODE_TO_FLAG:
        raise DecodeError(f"Flags must be '0' or '1' in record {record!r}")

    return Piece(
        type=CODE_TO_PIECE[kind_char],
        color=CODE_TO_COLOR[color_char],
        position=Square.from_algebraic(square_str),
        has_not_moved=CODE_TO_FLAG[not_moved_char],
        is_en_passant_target=CODE_TO_FLAG[en_passant_char],
    )


def encode_board(board: Board) -> str:
    return "".join(encode_piece(piece) for piece in board.pieces())


def decode_board(encoded: str) -> Board:
    """Build a fresh board from an encoded state. The empty string is the empty board."""
    if len(encoded) % RECORD_LENGTH != 0:
        raise DecodeError(
            f"Encoded board length must be a multiple of {RECORD_LENGTH}, got {len(encoded)}"
        )

    board = Board.empty()
    for start in range(0, len(encoded), RECORD_LENGTH):
        piece = decode_piece(encoded[start : start + RECORD_LENGTH])
        if board.is_occupied(piece.position):
            raise DecodeError(
                f"Two pieces encoded on {piece.position.to_algebraic()}"
            )
        board.place(piece)
    return board


def try_decode(encoded: str) -> DecodeResult:
    """Same as `decode_board`, but reports failure as a value instead of raising."""
    try:
        return DecodeResult(board=decode_board(encoded))
    except DecodeError as error:
        return DecodeResult(error=str(error))


def is_valid_encoding(encoded: str) -> bool:
    return try_decode(encoded).ok

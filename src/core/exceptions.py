"""Exceptions shared by the domain, service, API and persistence layers."""


class ChessError(Exception):
    """Base class: nothing raised from this package is fatal to the process."""


class DecodeError(ChessError):
    """An encoded board state could not be interpreted."""


class InvalidSquareError(ChessError):
    """A square name cannot be parsed, or a piece would be placed off the board."""


class IllegalMoveError(ChessError):
    """The board was asked to do something with a piece it does not hold."""


class InvalidRequestError(ChessError):
    """A wire message does not have the expected shape."""


class RepositoryError(ChessError):
    """Persistence layer failure."""

"""
Synchronization of the authoritative board between the server and its clients.

Server side (SyncSession): accept move requests, validate them again (never trust the client), apply them and
hand back the new encoded state for the transport layer to broadcast. Illegal requests change nothing.

Client side (ClientSession): validate and apply a move locally (optimistic), send the request, and treat the local
board as provisional until the next `set` from the server replaces it wholesale.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from src.api.models import MoveMessage, RejectedMessage, ResetMessage, SetMessage
from src.chess.applier import apply_move
from src.chess.board import Board
from src.chess.codec import decode_board, encode_board
from src.chess.pieces import Piece
from src.chess.square import Square
from src.chess.validator import check_move
from src.core.config import Settings
from src.core.exceptions import DecodeError, InvalidSquareError, RepositoryError
from src.core.shared_types import Color, MessageType
from src.db.repository import BoardRepository

logger = logging.getLogger(__name__)

NOT_YOUR_TURN = "not your turn"
NOT_SAVED = "state could not be saved"


@dataclass(frozen=True)
class Outcome:
    """What the transport layer should do after handling one request.

    * broadcast: send to every participant of the game
    * reply: send to the requester only
    """

    broadcast: Optional[SetMessage] = None
    reply: Optional[RejectedMessage] = None


IGNORED = Outcome()


class SyncSession:
    """Owns the canonical board of one game."""

    def __init__(
        self,
        game_id: str,
        settings: Optional[Settings] = None,
        repository: Optional[BoardRepository] = None,
    ) -> None:
        self.game_id = game_id
        self.settings = settings or Settings()
        self.repo = repository if self.settings.persist_state else None
        self.board = self._restore_board()
        # Only consulted when turns are enforced; the board itself has no notion of turns.
        self.color_to_move = Color.LIGHT

    # -- requests --
    def handle(self, message: Union[MoveMessage, ResetMessage]) -> Outcome:
        if message.type == MessageType.RESET:
            try:
                return Outcome(broadcast=self.reset())
            except RepositoryError:
                return IGNORED
        if message.type == MessageType.MOVE:
            return self.move(message.from_square, message.to_square)
        # unreachable as long as InboundMessage and MessageType agree
        logger.warning("Game %s: unhandled message type %r", self.game_id, message.type)
        return IGNORED

    def reset(self) -> SetMessage:
        """Raises RepositoryError if the new board cannot be saved. The board is then left as it was."""
        message = self._commit_state(Board.standard_setup())
        self.color_to_move = Color.LIGHT
        logger.info("Game %s: board reset", self.game_id)
        return message

    def move(self, from_square: str, to_square: str) -> Outcome:
        """
        Authoritative move
        -----

        1. Nothing on the origin square? Ignore the request.
        2. (only if enforced) is it this color's turn?
        3. Validate again on the canonical board
        4. Apply to a copy, persist it, and only then make it the canonical board
        """
        try:
            origin = Square.from_algebraic(from_square)
            destination = Square.from_algebraic(to_square)
        except InvalidSquareError as error:
            logger.info("Game %s: ignoring move: %s", self.game_id, error)
            return IGNORED

        piece = self.board.occupant_at(origin)
        if piece is None:
            logger.info("Game %s: no piece on %s, ignoring move", self.game_id, from_square)
            return IGNORED

        if self.settings.enforce_turns and piece.color != self.color_to_move:
            return self._reject(from_square, to_square, NOT_YOUR_TURN)

        result = check_move(self.board, piece, destination)
        if not result:
            # for the type checker: an illegal result always carries a reason
            assert result.reason is not None
            return self._reject(from_square, to_square, result.reason.value)

        staged = self.board.snapshot()
        staged_piece = staged.occupant_at(origin)
        # for the type checker: the snapshot holds the same pieces
        assert staged_piece is not None
        applied = apply_move(staged, staged_piece, destination)
        try:
            message = self._commit_state(staged)
        except RepositoryError:
            return self._reject(from_square, to_square, NOT_SAVED)

        self.color_to_move = self.color_to_move.opponent
        logger.info("Game %s: %s played %s", self.game_id, piece.color, applied.move.to_uci())
        return Outcome(broadcast=message)

    def state_message(self) -> SetMessage:
        return SetMessage(state=encode_board(self.board))

    # -- Internal helpers --
    def _reject(self, from_square: str, to_square: str, reason: str) -> Outcome:
        logger.info(
            "Game %s: dropped move %s%s (%s)", self.game_id, from_square, to_square, reason
        )
        if not self.settings.notify_rejections:
            return IGNORED
        return Outcome(
            reply=RejectedMessage(from_square=from_square, to_square=to_square, reason=reason)
        )

    def _commit_state(self, board: Board) -> SetMessage:
        """Persist first: the canonical board only changes once the new state is stored."""
        message = SetMessage(state=encode_board(board))
        if self.repo is not None:
            try:
                self.repo.save_state(self.game_id, message.state)
            except RepositoryError as error:
                logger.error("Game %s: could not save the new state: %s", self.game_id, error)
                raise
        self.board = board
        return message

    def _restore_board(self) -> Board:
        """Pick up where the game was left off, if a snapshot exists. Otherwise start a new game."""
        stored = self.repo.get_state(self.game_id) if self.repo else None
        if stored is None:
            return Board.standard_setup()
        try:
            return decode_board(stored)
        except DecodeError as error:
            logger.warning(
                "Game %s: stored state is corrupt (%s), starting from the standard setup",
                self.game_id,
                error,
            )
            return Board.standard_setup()


class ClientState(Enum):
    IDLE = auto()
    AWAITING_AUTHORITATIVE = auto()


class ClientSession:
    """A participant's view of the game. Its board is only ever provisional."""

    def __init__(self, board: Optional[Board] = None) -> None:
        self.board = board or Board.empty()
        self.state = ClientState.IDLE

    def propose_move(self, piece: Piece, destination: Square) -> Optional[MoveMessage]:
        """Validate locally, show the move right away, and return the request to send to the server."""
        result = check_move(self.board, piece, destination)
        if not result:
            logger.debug("Local move rejected: %s", result.reason)
            return None

        message = MoveMessage(
            from_square=piece.position.to_algebraic(),
            to_square=destination.to_algebraic(),
        )
        apply_move(self.board, piece, destination)
        self.state = ClientState.AWAITING_AUTHORITATIVE
        return message

    def request_reset(self) -> ResetMessage:
        return ResetMessage()

    def receive_set(self, message: SetMessage) -> None:
        """Replace the whole board. Any provisional local move is discarded.

        A malformed state raises DecodeError and the local board stays as it was.
        """
        self.board = decode_board(message.state)
        self.state = ClientState.IDLE

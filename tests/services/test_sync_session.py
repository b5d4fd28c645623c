"""Unit tests for src/services/sync_session.py"""

from typing import Generator

import pytest

from src.api.models import MoveMessage, ResetMessage, SetMessage
from src.chess.board import Board
from src.chess.codec import decode_board, encode_board
from src.core.config import Settings
from src.core.exceptions import DecodeError, RepositoryError
from src.core.shared_types import Color, PieceType
from src.services.sync_session import (
    IGNORED,
    NOT_SAVED,
    NOT_YOUR_TURN,
    ClientSession,
    ClientState,
    SyncSession,
)
from tests.helpers import at, build_board, sq

GAME_ID = "game-1"


# --- MOCK DEPENDENCIES ----
class MockRepository:
    """Mock the BoardRepository using a dictionary of encoded boards."""

    def __init__(self) -> None:
        self._states: dict[str, str] = {}

    def get_state(self, game_id: str) -> str | None:
        return self._states.get(game_id)

    def save_state(self, game_id: str, state: str) -> str:
        self._states[game_id] = state
        return state

    def delete_state(self, game_id: str) -> str | None:
        return self._states.pop(game_id, None)

    def clear(self) -> None:
        self._states.clear()


class BrokenStorage(MockRepository):
    """Reads work, every save fails."""

    def save_state(self, game_id: str, state: str) -> str:
        raise RepositoryError(f"Could not save state of game {game_id}")


@pytest.fixture
def mock_repository() -> Generator[MockRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository()
    try:
        yield repo
    finally:
        repo.clear()


@pytest.fixture
def session() -> SyncSession:
    return SyncSession(GAME_ID, settings=Settings(persist_state=False))


# --- SERVER SIDE: RESET ----
def test_new_session_starts_from_standard_setup(session: SyncSession) -> None:
    assert session.board == Board.standard_setup()
    assert session.state_message() == SetMessage(
        state=encode_board(Board.standard_setup())
    )


def test_reset(session: SyncSession) -> None:
    session.move("e2", "e4")
    message = session.reset()
    assert session.board == Board.standard_setup()
    assert decode_board(message.state) == Board.standard_setup()


def test_reset_is_idempotent(session: SyncSession) -> None:
    session.move("e2", "e4")
    once = session.reset()
    twice = session.reset()
    assert once == twice


# --- SERVER SIDE: MOVES ----
def test_legal_move_is_applied_and_broadcast(session: SyncSession) -> None:
    outcome = session.move("e2", "e4")
    assert outcome.broadcast is not None
    assert outcome.reply is None

    board = decode_board(outcome.broadcast.state)
    assert board == session.board
    assert at(board, "e4").type == PieceType.PAWN
    assert at(board, "e4").is_en_passant_target
    assert board.occupant_at(sq("e2")) is None


def test_move_from_empty_square_is_ignored(session: SyncSession) -> None:
    outcome = session.move("e4", "e5")
    assert outcome.broadcast is None
    assert outcome.reply is None
    assert session.board == Board.standard_setup()


@pytest.mark.parametrize(
    "from_square, to_square", [("z9", "e4"), ("e2", ""), ("e2", "e44")]
)
def test_malformed_square_names_are_ignored(
    session: SyncSession, from_square: str, to_square: str
) -> None:
    assert session.move(from_square, to_square) == IGNORED
    assert session.board == Board.standard_setup()


def test_illegal_move_is_dropped_silently(session: SyncSession) -> None:
    outcome = session.move("e2", "e5")
    assert outcome.broadcast is None
    assert outcome.reply is None
    assert session.board == Board.standard_setup()


def test_illegal_move_can_be_reported_back() -> None:
    session = SyncSession(
        GAME_ID, settings=Settings(persist_state=False, notify_rejections=True)
    )
    outcome = session.move("e2", "e5")
    assert outcome.broadcast is None
    assert outcome.reply is not None
    assert outcome.reply.from_square == "e2"
    assert outcome.reply.to_square == "e5"
    assert outcome.reply.reason == "piece cannot move like that"


def test_turns_are_not_enforced_by_default(session: SyncSession) -> None:
    assert session.move("e2", "e4").broadcast is not None
    assert session.move("d2", "d4").broadcast is not None


def test_turns_can_be_enforced() -> None:
    session = SyncSession(
        GAME_ID,
        settings=Settings(
            persist_state=False, enforce_turns=True, notify_rejections=True
        ),
    )
    # Dark cannot open
    outcome = session.move("e7", "e5")
    assert outcome.reply is not None
    assert outcome.reply.reason == NOT_YOUR_TURN

    assert session.move("e2", "e4").broadcast is not None
    assert session.move("d2", "d4").reply is not None
    assert session.move("e7", "e5").broadcast is not None

    # reset hands the first move back to Light
    session.reset()
    assert session.move("e2", "e4").broadcast is not None


def test_handle_dispatches_messages(session: SyncSession) -> None:
    outcome = session.handle(MoveMessage(from_square="g1", to_square="f3"))
    assert outcome.broadcast is not None
    assert at(session.board, "f3").type == PieceType.KNIGHT

    outcome = session.handle(ResetMessage())
    assert outcome.broadcast == SetMessage(state=encode_board(Board.standard_setup()))


# --- SERVER SIDE: PERSISTENCE ----
def test_state_is_persisted_after_every_change(
    mock_repository: MockRepository,
) -> None:
    session = SyncSession(GAME_ID, repository=mock_repository)
    outcome = session.move("e2", "e4")
    assert outcome.broadcast is not None
    assert mock_repository.get_state(GAME_ID) == outcome.broadcast.state

    session.reset()
    assert mock_repository.get_state(GAME_ID) == encode_board(Board.standard_setup())


def test_session_restores_stored_state(mock_repository: MockRepository) -> None:
    stored = build_board({"e1": "K", "e8": "k", "a1": "R"})
    mock_repository.save_state(GAME_ID, encode_board(stored))

    session = SyncSession(GAME_ID, repository=mock_repository)
    assert session.board == stored


def test_corrupt_stored_state_falls_back_to_standard_setup(
    mock_repository: MockRepository,
) -> None:
    mock_repository.save_state(GAME_ID, "garbage")
    session = SyncSession(GAME_ID, repository=mock_repository)
    assert session.board == Board.standard_setup()


def test_move_is_not_applied_when_saving_fails() -> None:
    session = SyncSession(GAME_ID, repository=BrokenStorage())
    outcome = session.move("e2", "e4")

    assert outcome.broadcast is None
    assert session.board == Board.standard_setup()
    # the turn did not pass either
    assert session.color_to_move == Color.LIGHT


def test_failed_save_can_be_reported_back() -> None:
    session = SyncSession(
        GAME_ID, settings=Settings(notify_rejections=True), repository=BrokenStorage()
    )
    outcome = session.move("e2", "e4")
    assert outcome.reply is not None
    assert outcome.reply.reason == NOT_SAVED


def test_reset_is_not_applied_when_saving_fails() -> None:
    storage = BrokenStorage()
    stored = build_board({"e1": "K", "e8": "k"})
    storage._states[GAME_ID] = encode_board(stored)
    session = SyncSession(GAME_ID, repository=storage)

    with pytest.raises(RepositoryError):
        session.reset()
    assert session.board == stored
    # through the message handler it is just dropped
    assert session.handle(ResetMessage()) == IGNORED
    assert session.board == stored


def test_persistence_can_be_switched_off(mock_repository: MockRepository) -> None:
    session = SyncSession(
        GAME_ID, settings=Settings(persist_state=False), repository=mock_repository
    )
    session.move("e2", "e4")
    assert mock_repository.get_state(GAME_ID) is None


# --- CLIENT SIDE ----
def test_client_starts_idle_with_empty_board() -> None:
    client = ClientSession()
    assert client.state == ClientState.IDLE
    assert client.board == Board.empty()


def test_client_proposes_legal_move() -> None:
    client = ClientSession(Board.standard_setup())
    message = client.propose_move(at(client.board, "e2"), sq("e4"))

    assert message == MoveMessage(from_square="e2", to_square="e4")
    assert client.state == ClientState.AWAITING_AUTHORITATIVE
    # optimistic: shown locally right away
    assert at(client.board, "e4").type == PieceType.PAWN


def test_client_does_not_send_illegal_move() -> None:
    client = ClientSession(Board.standard_setup())
    assert client.propose_move(at(client.board, "e2"), sq("e5")) is None
    assert client.state == ClientState.IDLE
    assert client.board == Board.standard_setup()


def test_set_replaces_local_board_and_discards_provisional_move() -> None:
    client = ClientSession(Board.standard_setup())
    client.propose_move(at(client.board, "e2"), sq("e4"))

    # the server never accepted it and sends the untouched state
    client.receive_set(SetMessage(state=encode_board(Board.standard_setup())))
    assert client.state == ClientState.IDLE
    assert client.board == Board.standard_setup()


def test_malformed_set_leaves_board_untouched() -> None:
    client = ClientSession(Board.standard_setup())
    with pytest.raises(DecodeError):
        client.receive_set(SetMessage(state="k0e1"))
    assert client.board == Board.standard_setup()


def test_client_and_server_converge(session: SyncSession) -> None:
    """client -> local validation -> server validation -> apply -> set -> client replaces its board"""
    client = ClientSession()
    client.receive_set(session.state_message())

    request = client.propose_move(at(client.board, "g1"), sq("f3"))
    assert request is not None
    outcome = session.handle(request)
    assert outcome.broadcast is not None
    client.receive_set(outcome.broadcast)

    assert client.board == session.board
    assert client.state == ClientState.IDLE


def test_client_reset_request() -> None:
    assert ClientSession().request_reset() == ResetMessage()

"""Implementation of (Board)Repository using SQLAlchemy"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.db.schema import DBBoardState

logger = logging.getLogger(__name__)


class SQLBoardRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_state(self, game_id: str) -> str | None:
        record = self._fetch_state(game_id)
        if record:
            return record.state
        return None

    def save_state(self, game_id: str, state: str) -> str:
        record = self._fetch_state(game_id)
        if record is None:
            record = DBBoardState(game_id=game_id, state=state)
            self.db.add(record)
        else:
            record.state = state
        self._commit(f"save state of game {game_id}")
        self.db.refresh(record)
        return record.state

    def delete_state(self, game_id: str) -> str | None:
        record = self._fetch_state(game_id)
        if not record:
            return None
        state = record.state
        self.db.delete(record)
        self._commit(f"delete state of game {game_id}")
        return state

    def _fetch_state(self, game_id: str) -> DBBoardState | None:
        query = select(DBBoardState).where(DBBoardState.game_id == game_id)
        return self.db.scalar(query)

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as error:
            self.db.rollback()
            logger.error("Could not %s: %s", action, error)
            raise RepositoryError(f"Could not {action}") from error

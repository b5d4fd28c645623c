"""Protocol repository (the SQL implementation is in sql_repository.py, tests use an in-memory dict)"""

from typing import Protocol


class BoardRepository(Protocol):
    """Persistence of the canonical, encoded board per game room"""

    def get_state(self, game_id: str) -> str | None:
        """Get the encoded board, if a record exists."""
        ...

    def save_state(self, game_id: str, state: str) -> str:
        """Create or overwrite the record and return the stored state."""
        ...

    def delete_state(self, game_id: str) -> str | None:
        """Remove a game's record."""
        ...

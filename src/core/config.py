"""
Runtime configuration.

Every field can be overridden with an environment variable named CHESS_<FIELD NAME IN CAPITALS>,
ex. CHESS_DATABASE_URL=sqlite:///:memory:
"""

import os
from functools import lru_cache
from typing import Mapping, Optional

from pydantic import BaseModel

ENV_PREFIX = "CHESS_"


class Settings(BaseModel):
    database_url: str = "sqlite:///./chess.db"
    database_echo: bool = False
    log_level: str = "INFO"

    # The board has no notion of turns. Only switch this on if the session should enforce alternation.
    enforce_turns: bool = False
    # Illegal move requests are dropped silently unless this is switched on.
    notify_rejections: bool = False
    persist_state: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Collect the CHESS_* variables and let pydantic do the type coercion ("true" -> True etc.)"""
        environ = os.environ if environ is None else environ
        overrides = {
            name: environ[f"{ENV_PREFIX}{name.upper()}"]
            for name in cls.model_fields
            if f"{ENV_PREFIX}{name.upper()}" in environ
        }
        return cls.model_validate(overrides)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()

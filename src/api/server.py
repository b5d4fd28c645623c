"""
FastAPI application: one WebSocket per participant, one room (canonical board) per game id.

Every inbound frame of a room is handled under the room's lock: validate -> apply -> broadcast runs to completion
before the next frame of that room is looked at.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

from fastapi import (
    APIRouter,
    FastAPI,
    HTTPException,
    Request,
    WebSocket,
    WebSocketDisconnect,
)
from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker

from src.api.models import (
    GameStateResponse,
    HealthResponse,
    SetMessage,
    WireMessage,
    parse_inbound,
)
from src.core.config import Settings, get_settings
from src.core.exceptions import InvalidRequestError
from src.core.log_config import configure_logging
from src.db.database import make_engine, make_session_factory
from src.db.sql_repository import SQLBoardRepository
from src.services.sync_session import SyncSession

logger = logging.getLogger(__name__)


@dataclass
class Room:
    session: SyncSession
    clients: set[WebSocket] = field(default_factory=set)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    db: Optional[Session] = None

    async def broadcast(self, message: SetMessage) -> None:
        """A client whose connection dropped simply misses the update (it gets a full state on reconnect)."""
        if not self.clients:
            return
        payload = message.to_wire()
        await asyncio.gather(
            *[ws.send_text(payload) for ws in list(self.clients)],
            return_exceptions=True,
        )


class RoomRegistry:
    """A room lives while at least one participant is connected to it. Its state outlives it in the database."""

    def __init__(
        self,
        settings: Settings,
        session_factory: Optional[sessionmaker[Session]] = None,
    ) -> None:
        self.settings = settings
        self.session_factory = session_factory
        self._rooms: dict[str, Room] = {}

    def __len__(self) -> int:
        return len(self._rooms)

    def peek(self, game_id: str) -> Optional[Room]:
        return self._rooms.get(game_id)

    def join(self, game_id: str, websocket: WebSocket) -> Room:
        """Open the room on first use. The client is registered right away, so the room cannot be closed under it."""
        room = self._rooms.get(game_id)
        if room is None:
            room = self._new_room(game_id)
            self._rooms[game_id] = room
        room.clients.add(websocket)
        return room

    def leave(self, game_id: str, websocket: WebSocket) -> None:
        room = self._rooms.get(game_id)
        if room is None:
            return
        room.clients.discard(websocket)
        if not room.clients:
            del self._rooms[game_id]
            if room.db is not None:
                room.db.close()
            logger.info("Closed room for game %s", game_id)

    def stored_state(self, game_id: str) -> Optional[str]:
        """Last saved state of a game nobody is connected to"""
        if self.session_factory is None:
            return None
        with self.session_factory() as db:
            return SQLBoardRepository(db).get_state(game_id)

    def close(self) -> None:
        for room in self._rooms.values():
            if room.db is not None:
                room.db.close()
        self._rooms.clear()

    def _new_room(self, game_id: str) -> Room:
        db = self.session_factory() if self.session_factory else None
        repository = SQLBoardRepository(db) if db is not None else None
        session = SyncSession(game_id, settings=self.settings, repository=repository)
        logger.info("Opened room for game %s", game_id)
        return Room(session=session, db=db)


router = APIRouter()


@router.get("/health")
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/games/{game_id}")
async def game_state(game_id: str, request: Request) -> GameStateResponse:
    rooms: RoomRegistry = request.app.state.rooms
    room = rooms.peek(game_id)
    state = room.session.state_message().state if room else rooms.stored_state(game_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"No game with id {game_id!r}")
    return GameStateResponse(game_id=game_id, state=state)


@router.websocket("/ws/game/{game_id}")
async def game_socket(websocket: WebSocket, game_id: str) -> None:
    await websocket.accept()

    rooms: RoomRegistry = websocket.app.state.rooms
    room = rooms.join(game_id, websocket)

    try:
        async with room.lock:
            # Send initial state
            await _send(websocket, room.session.state_message())

        while True:
            data = await websocket.receive_text()
            try:
                message = parse_inbound(data)
            except (ValidationError, InvalidRequestError) as error:
                logger.warning("Game %s: ignoring malformed frame %r: %s", game_id, data, error)
                continue

            async with room.lock:
                outcome = room.session.handle(message)
                if outcome.reply is not None:
                    await _send(websocket, outcome.reply)
                if outcome.broadcast is not None:
                    await room.broadcast(outcome.broadcast)
    except WebSocketDisconnect:
        logger.info("Game %s: client disconnected", game_id)
    finally:
        rooms.leave(game_id, websocket)


async def _send(websocket: WebSocket, message: WireMessage) -> None:
    await websocket.send_text(message.to_wire())


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker[Session]] = None,
) -> FastAPI:
    """
    Build the app.

    Without an explicit session factory, one is created from `settings.database_url` when persistence is enabled.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        factory = session_factory
        if factory is None and settings.persist_state:
            factory = make_session_factory(make_engine(settings))
        app.state.rooms = RoomRegistry(settings, factory)
        try:
            yield
        finally:
            app.state.rooms.close()

    app = FastAPI(title="Chess board sync", lifespan=lifespan)
    app.include_router(router)
    return app

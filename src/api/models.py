"""Messages exchanged over the game socket, plus the HTTP response models"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from src.chess.square import is_algebraic
from src.core.exceptions import InvalidRequestError


class WireMessage(BaseModel):
    """`from` is a Python keyword, so fields are declared as from_square / to_square and aliased on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True)


# --- CLIENT -> SERVER ---
class MoveMessage(WireMessage):
    type: Literal["move"] = "move"
    from_square: str = Field(alias="from")
    to_square: str = Field(alias="to")

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        if not is_algebraic(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value


class ResetMessage(WireMessage):
    type: Literal["reset"] = "reset"


# --- SERVER -> CLIENT ---
class SetMessage(WireMessage):
    type: Literal["set"] = "set"
    state: str


class RejectedMessage(WireMessage):
    type: Literal["rejected"] = "rejected"
    from_square: str = Field(alias="from")
    to_square: str = Field(alias="to")
    reason: str


InboundMessage = Annotated[
    Union[MoveMessage, ResetMessage], Field(discriminator="type")
]
OutboundMessage = Annotated[
    Union[SetMessage, RejectedMessage], Field(discriminator="type")
]

_inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)
_outbound_adapter: TypeAdapter[OutboundMessage] = TypeAdapter(OutboundMessage)


def parse_inbound(raw: str) -> Union[MoveMessage, ResetMessage]:
    """Raises pydantic.ValidationError (or InvalidRequestError for bad square names)"""
    return _inbound_adapter.validate_json(raw)


def parse_outbound(raw: str) -> Union[SetMessage, RejectedMessage]:
    return _outbound_adapter.validate_json(raw)


# --- HTTP RESPONSE MODELS ---
class GameStateResponse(BaseModel):
    game_id: str
    state: str


class HealthResponse(BaseModel):
    status: str = "ok"

"""Pydantic models for WebSocket message protocol."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from othello.engine import Board, Move, Player
from othello.session import GameStatus


# ---------------------------------------------------------------------------
# Client → Server
# ---------------------------------------------------------------------------

class NewGameMsg(BaseModel):
    type: Literal["new_game"] = "new_game"


class PlayMoveMsg(BaseModel):
    type: Literal["play_move"] = "play_move"
    row: int
    col: int


class LeaveGameMsg(BaseModel):
    type: Literal["leave_game"] = "leave_game"


class ReconnectMsg(BaseModel):
    type: Literal["reconnect"] = "reconnect"
    room_id: str
    player_token: str


ClientMessage = NewGameMsg | PlayMoveMsg | LeaveGameMsg | ReconnectMsg


# ---------------------------------------------------------------------------
# Server → Client
# ---------------------------------------------------------------------------

class Score(BaseModel):
    black: int
    white: int

    @classmethod
    def from_counts(cls, counts: dict[Player, int]) -> Score:
        return cls(black=counts[Player.BLACK], white=counts[Player.WHITE])


class GameCreatedMsg(BaseModel):
    type: Literal["game_created"] = "game_created"
    room_id: str
    player_token: str
    your_color: Player
    computer_color: Player


class StateSyncMsg(BaseModel):
    type: Literal["state_sync"] = "state_sync"
    board: Board
    current_turn: Player
    legal_moves: list[Move]
    score: Score
    status: GameStatus
    winner: Player | None = None
    move_count: int


class MovePlayedMsg(BaseModel):
    type: Literal["move_played"] = "move_played"
    row: int
    col: int
    color: Player
    flipped: list[Move] = Field(default_factory=list)
    score: Score


class TurnChangedMsg(BaseModel):
    type: Literal["turn_changed"] = "turn_changed"
    current_turn: Player
    legal_moves: list[Move]
    forced: bool = False


class GameOverMsg(BaseModel):
    type: Literal["game_over"] = "game_over"
    winner: Player | None
    score: Score


class ErrorMsg(BaseModel):
    type: Literal["error"] = "error"
    message: str


def parse_client_message(data: object) -> ClientMessage | None:
    """Parse decoded JSON into a typed client message, or None if invalid."""
    if not isinstance(data, dict):
        return None
    msg_type = data.get("type")
    mapping: dict[str, type[BaseModel]] = {
        "new_game": NewGameMsg,
        "play_move": PlayMoveMsg,
        "leave_game": LeaveGameMsg,
        "reconnect": ReconnectMsg,
    }
    model = mapping.get(msg_type)  # type: ignore[arg-type]
    if model is None:
        return None
    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError:
        return None

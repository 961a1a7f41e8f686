"""Room management: one human-vs-computer game per room, delayed computer moves, cleanup."""

from __future__ import annotations

import asyncio
import logging
import random
import secrets
from dataclasses import dataclass, field
from uuid import uuid4

from fastapi import WebSocket

from othello.config import settings
from othello.engine import IllegalMove, Player, in_bounds
from othello.models import (
    ErrorMsg,
    GameCreatedMsg,
    GameOverMsg,
    MovePlayedMsg,
    Score,
    StateSyncMsg,
    TurnChangedMsg,
)
from othello.session import GameEnded, GameSession, MoveResult, SessionEvent, TurnChanged
from othello.strategy import MoveStrategy, RandomMoveStrategy

logger = logging.getLogger(__name__)


@dataclass
class Seat:
    ws: WebSocket
    token: str
    color: Player
    connected: bool = True


@dataclass
class Room:
    room_id: str
    seat: Seat
    session: GameSession
    events: list[SessionEvent] = field(default_factory=list, repr=False)
    computer_task: asyncio.Task | None = field(default=None, repr=False)
    cleanup_task: asyncio.Task | None = field(default=None, repr=False)
    computer_waiting: bool = False
    # Serialises moves so each move's messages go out before the next move is played
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def state_sync(self) -> dict:
        session = self.session
        return StateSyncMsg(
            board=session.board,
            current_turn=session.current_player,
            legal_moves=sorted(session.legal_moves()),
            score=Score.from_counts(session.score()),
            status=session.status,
            winner=session.winner,
            move_count=session.move_count,
        ).model_dump(mode="json")

    async def send(self, msg_dict: dict):
        if not self.seat.connected:
            return
        try:
            await self.seat.ws.send_json(msg_dict)
        except Exception:
            logger.debug("Dropped %s for room %s", msg_dict.get("type"), self.room_id)


class RoomManager:
    def __init__(
        self,
        strategy: MoveStrategy | None = None,
        computer_move_delay: float | None = None,
        pass_rule: str | None = None,
        disconnect_grace: float | None = None,
    ):
        self.rooms: dict[str, Room] = {}
        self._ws_to_room: dict[WebSocket, str] = {}
        self.strategy = strategy or RandomMoveStrategy(random.Random(settings.random_seed))
        self.computer_move_delay = (
            settings.computer_move_delay if computer_move_delay is None else computer_move_delay
        )
        self.pass_rule = pass_rule or settings.pass_rule
        self.disconnect_grace = settings.disconnect_grace if disconnect_grace is None else disconnect_grace

    def _generate_room_id(self) -> str:
        while True:
            room_id = secrets.token_hex(3)  # 6-char hex
            if room_id not in self.rooms:
                return room_id

    async def create_room(self, ws: WebSocket) -> Room:
        # A client plays one game at a time
        previous = self._ws_to_room.pop(ws, None)
        if previous is not None:
            self._cleanup_room(previous)

        session = GameSession(computer=Player.WHITE, pass_rule=self.pass_rule)
        seat = Seat(ws=ws, token=str(uuid4()), color=session.human)
        room = Room(room_id=self._generate_room_id(), seat=seat, session=session)
        session.on_turn_changed(room.events.append)

        self.rooms[room.room_id] = room
        self._ws_to_room[ws] = room.room_id
        logger.info("Room %s created", room.room_id)

        await room.send(
            GameCreatedMsg(
                room_id=room.room_id,
                player_token=seat.token,
                your_color=seat.color,
                computer_color=session.computer,
            ).model_dump(mode="json")
        )
        await room.send(room.state_sync())

        if session.is_computer_turn():
            self._schedule_computer_move(room)
        return room

    async def play_move(self, ws: WebSocket, row: int, col: int):
        room = self.get_room_for_ws(ws)
        if room is None:
            await ws.send_json(ErrorMsg(message="Not in a room").model_dump())
            return

        # Waits for a computer move that is still sending its messages
        async with room.lock:
            session = room.session
            if session.is_game_over:
                await room.send(ErrorMsg(message="Game is already over").model_dump())
                return
            if session.current_player != room.seat.color:
                await room.send(ErrorMsg(message="Not your turn").model_dump())
                return
            if not in_bounds(row, col):
                await room.send(ErrorMsg(message="Coordinates out of bounds").model_dump())
                return

            try:
                result = session.play((row, col), room.seat.color)
            except IllegalMove as exc:
                logger.debug("Room %s: %s", room.room_id, exc)
                await room.send(ErrorMsg(message=f"Illegal move: {exc.reason}").model_dump())
                return

            await self._publish(room, result)

    async def _publish(self, room: Room, result: MoveResult | None):
        """Send the move (if any) followed by the turn events it produced.

        Callers hold ``room.lock``.
        """
        if result is not None:
            row, col = result.move
            await room.send(
                MovePlayedMsg(
                    row=row,
                    col=col,
                    color=result.player,
                    flipped=result.flipped,
                    score=Score.from_counts(room.session.score()),
                ).model_dump(mode="json")
            )

        events = list(room.events)
        room.events.clear()
        for event in events:
            if isinstance(event, TurnChanged):
                await room.send(
                    TurnChangedMsg(
                        current_turn=event.player,
                        legal_moves=sorted(event.legal_moves),
                        forced=event.forced,
                    ).model_dump(mode="json")
                )
            elif isinstance(event, GameEnded):
                await room.send(
                    GameOverMsg(winner=event.winner, score=Score.from_counts(event.score)).model_dump(mode="json")
                )

        if room.session.is_computer_turn():
            self._schedule_computer_move(room)

    def _schedule_computer_move(self, room: Room):
        """Schedule the computer's move after the delay.

        A previous computer task is cancelled only while it is still waiting;
        once it has started playing it runs to completion.
        """
        task = room.computer_task
        if task and not task.done() and room.computer_waiting:
            task.cancel()
        room.computer_waiting = True

        async def computer_turn():
            await asyncio.sleep(self.computer_move_delay)
            async with room.lock:
                room.computer_waiting = False
                if room.room_id not in self.rooms:
                    return
                # Legal moves are recomputed inside play_computer, not taken from the last event
                result = room.session.play_computer(self.strategy)
                await self._publish(room, result)

        room.computer_task = asyncio.create_task(computer_turn())

    async def reconnect(self, ws: WebSocket, room_id: str, player_token: str):
        room = self.rooms.get(room_id)
        if room is None:
            await ws.send_json(ErrorMsg(message="Room not found").model_dump())
            return
        if room.seat.token != player_token:
            await ws.send_json(ErrorMsg(message="Invalid player token").model_dump())
            return

        if room.cleanup_task and not room.cleanup_task.done():
            room.cleanup_task.cancel()
        room.cleanup_task = None

        self._ws_to_room.pop(room.seat.ws, None)
        room.seat.ws = ws
        room.seat.connected = True
        self._ws_to_room[ws] = room_id
        logger.info("Room %s reconnected", room_id)

        async with room.lock:
            await room.send(room.state_sync())

            pending = room.computer_task is not None and not room.computer_task.done()
            if room.session.is_computer_turn() and not pending:
                self._schedule_computer_move(room)

    async def leave_room(self, ws: WebSocket):
        room_id = self._ws_to_room.pop(ws, None)
        if room_id is not None:
            self._cleanup_room(room_id)

    async def handle_disconnect(self, ws: WebSocket):
        room_id = self._ws_to_room.pop(ws, None)
        if room_id is None:
            return

        room = self.rooms.get(room_id)
        if room is None:
            return

        room.seat.connected = False
        logger.info("Room %s disconnected, cleanup in %ss", room_id, self.disconnect_grace)

        async def cleanup_after_timeout():
            await asyncio.sleep(self.disconnect_grace)
            if not room.seat.connected:
                self._cleanup_room(room_id)

        room.cleanup_task = asyncio.create_task(cleanup_after_timeout())

    def _cleanup_room(self, room_id: str):
        room = self.rooms.pop(room_id, None)
        if room is None:
            return
        current = asyncio.current_task()
        for task in (room.computer_task, room.cleanup_task):
            if task and not task.done() and task is not current:
                task.cancel()
        logger.info("Room %s removed", room_id)

    def get_room_for_ws(self, ws: WebSocket) -> Room | None:
        room_id = self._ws_to_room.get(ws)
        if room_id is None:
            return None
        return self.rooms.get(room_id)


room_manager = RoomManager()

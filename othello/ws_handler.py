"""WebSocket endpoint and message routing."""

import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from othello.models import (
    ErrorMsg,
    LeaveGameMsg,
    NewGameMsg,
    PlayMoveMsg,
    ReconnectMsg,
    parse_client_message,
)
from othello.room import room_manager

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    try:
        while True:
            text = await ws.receive_text()
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                data = None
            msg = parse_client_message(data)
            if msg is None:
                await ws.send_json(ErrorMsg(message="Unknown or invalid message").model_dump())
                continue

            if isinstance(msg, NewGameMsg):
                await room_manager.create_room(ws)

            elif isinstance(msg, PlayMoveMsg):
                await room_manager.play_move(ws, msg.row, msg.col)

            elif isinstance(msg, ReconnectMsg):
                await room_manager.reconnect(ws, msg.room_id, msg.player_token)

            elif isinstance(msg, LeaveGameMsg):
                await room_manager.leave_room(ws)
    except WebSocketDisconnect:
        await room_manager.handle_disconnect(ws)

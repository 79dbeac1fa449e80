from typing import Callable, Dict, Optional

from flask import current_app, request

from sketchchain import socketio
from sketchchain.commands import (
    Command, CreateRoom, JoinRoom, SetUsername, StartGame,
    SubmitPrompt, SubmitDrawing, SubmitGuess, NewGame, decode_command,
)
from sketchchain.errors import ProtocolError, RoomCodeExhausted, RoomNotFound
from sketchchain.services.rooms import Rooms
from sketchchain.services.rooms.dispatcher import ERROR, make_event
from sketchchain.services.rooms.registry import Connection

EXTENSION_KEY = 'sketchchain.rooms'
ROOM_NOT_FOUND_MESSAGE = 'Room does not exist.'
ROOM_CODE_EXHAUSTED_MESSAGE = 'Could not allocate a room code.'


def _rooms() -> Rooms:
    return current_app.extensions[EXTENSION_KEY]


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    _rooms().registry.open(_get_sid())
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    _rooms().game.handle_disconnect(sid)


def handle_message(data):
    """Decode one envelope and route it to the state machine."""
    sid = _get_sid()
    try:
        command = decode_command(data)
    except ProtocolError as exc:
        current_app.logger.warning(f"[protocol-error] sid={sid} dropped: {exc}")
        return
    if command is None:
        current_app.logger.debug(f"[unknown-type] sid={sid} ignored")
        return

    rooms = _rooms()
    try:
        HANDLERS[type(command)](rooms, sid, command)
    except RoomNotFound as exc:
        current_app.logger.info(f"[join-miss] sid={sid} room={exc.room_id}")
        rooms.dispatcher.send_to(sid, make_event(ERROR, message=ROOM_NOT_FOUND_MESSAGE))
    except RoomCodeExhausted as exc:
        current_app.logger.error(f"[room-code-exhausted] sid={sid} {exc}")
        rooms.dispatcher.send_to(sid, make_event(ERROR, message=ROOM_CODE_EXHAUSTED_MESSAGE))


# ---- command handlers ----

def _bound(rooms: Rooms, sid: str, command: Command) -> Optional[Connection]:
    conn = rooms.registry.get(sid)
    if conn is None or not conn.is_bound:
        current_app.logger.debug(f"[unbound] sid={sid} ignored {type(command).__name__}")
        return None
    return conn


def _on_create_room(rooms: Rooms, sid: str, command: CreateRoom) -> None:
    rooms.game.create_room(sid, command.user_id)


def _on_join_room(rooms: Rooms, sid: str, command: JoinRoom) -> None:
    rooms.game.join_room(sid, command.room_id, command.user_id)


def _on_set_username(rooms: Rooms, sid: str, command: SetUsername) -> None:
    conn = _bound(rooms, sid, command)
    if conn:
        rooms.game.set_display_name(conn.room_id, conn.player_id, command.user_name, sid=sid)


def _on_start_game(rooms: Rooms, sid: str, command: StartGame) -> None:
    conn = _bound(rooms, sid, command)
    if conn:
        rooms.game.start_game(conn.room_id, conn.player_id)


def _on_submit_prompt(rooms: Rooms, sid: str, command: SubmitPrompt) -> None:
    conn = _bound(rooms, sid, command)
    if conn:
        rooms.game.submit_prompt(conn.room_id, conn.player_id, command.prompt)


def _on_submit_drawing(rooms: Rooms, sid: str, command: SubmitDrawing) -> None:
    conn = _bound(rooms, sid, command)
    if conn:
        rooms.game.submit_drawing(conn.room_id, conn.player_id, command.target_starter_id, command.drawing)


def _on_submit_guess(rooms: Rooms, sid: str, command: SubmitGuess) -> None:
    conn = _bound(rooms, sid, command)
    if conn:
        rooms.game.submit_guess(conn.room_id, conn.player_id, command.target_starter_id, command.guess)


def _on_new_game(rooms: Rooms, sid: str, command: NewGame) -> None:
    conn = _bound(rooms, sid, command)
    if conn:
        rooms.game.new_game(conn.room_id, conn.player_id)


HANDLERS: Dict[type, Callable] = {
    CreateRoom: _on_create_room,
    JoinRoom: _on_join_room,
    SetUsername: _on_set_username,
    StartGame: _on_start_game,
    SubmitPrompt: _on_submit_prompt,
    SubmitDrawing: _on_submit_drawing,
    SubmitGuess: _on_submit_guess,
    NewGame: _on_new_game,
}

def check_handlers_cover_commands() -> None:
    """Every command variant must have exactly one handler."""
    missing = set(Command.__args__) - set(HANDLERS)
    extra = set(HANDLERS) - set(Command.__args__)
    if missing or extra:
        raise RuntimeError(f"command handler table out of sync: missing={missing} extra={extra}")


check_handlers_cover_commands()


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Envelopes arrive either as text on ``message`` or pre-parsed on ``json``.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
    socketio.on_event('json', handle_message, namespace=namespace)

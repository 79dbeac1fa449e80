"""Inbound client commands.

Every message is an envelope ``{"type": str, "payload": object}``. Each
recognised type decodes into one frozen dataclass below; unknown types
decode to ``None`` and malformed envelopes raise ``ProtocolError``.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from sketchchain.errors import ProtocolError


@dataclass(frozen=True)
class CreateRoom:
    user_id: str


@dataclass(frozen=True)
class JoinRoom:
    room_id: str
    user_id: str


@dataclass(frozen=True)
class SetUsername:
    user_name: str


@dataclass(frozen=True)
class StartGame:
    pass


@dataclass(frozen=True)
class SubmitPrompt:
    prompt: Any


@dataclass(frozen=True)
class SubmitDrawing:
    drawing: Any
    target_starter_id: str


@dataclass(frozen=True)
class SubmitGuess:
    guess: Any
    target_starter_id: str


@dataclass(frozen=True)
class NewGame:
    pass


Command = Union[CreateRoom, JoinRoom, SetUsername, StartGame,
                SubmitPrompt, SubmitDrawing, SubmitGuess, NewGame]


def _text(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ProtocolError(f"payload.{key} must be a non-empty string")
    return value


def _present(payload: Dict[str, Any], key: str) -> Any:
    if key not in payload:
        raise ProtocolError(f"payload.{key} is required")
    return payload[key]


_DECODERS = {
    'CREATE_ROOM': lambda p: CreateRoom(user_id=_text(p, 'userId')),
    'JOIN_ROOM': lambda p: JoinRoom(room_id=_text(p, 'roomId').strip().upper(), user_id=_text(p, 'userId')),
    'SET_USERNAME': lambda p: SetUsername(user_name=_text(p, 'userName')),
    'START_GAME': lambda p: StartGame(),
    'SUBMIT_PROMPT': lambda p: SubmitPrompt(prompt=_present(p, 'prompt')),
    'SUBMIT_DRAWING': lambda p: SubmitDrawing(drawing=_present(p, 'drawing'),
                                              target_starter_id=_text(p, 'targetStarterId')),
    'SUBMIT_GUESS': lambda p: SubmitGuess(guess=_present(p, 'guess'),
                                          target_starter_id=_text(p, 'targetStarterId')),
    'NEW_GAME': lambda p: NewGame(),
}

COMMAND_TYPES = frozenset(_DECODERS)


def decode_command(raw) -> Optional[Command]:
    """Decode a raw inbound message (JSON text, bytes or an already-parsed dict)."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise ProtocolError(f"message is not utf-8: {exc}") from exc
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise ProtocolError(f"message is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ProtocolError("message must be a JSON object")
    msg_type = raw.get('type')
    if not isinstance(msg_type, str):
        raise ProtocolError("message.type must be a string")
    decoder = _DECODERS.get(msg_type)
    if decoder is None:
        return None
    payload = raw.get('payload')
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ProtocolError("payload must be a JSON object")
    return decoder(payload)

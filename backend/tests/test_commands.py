import json

import pytest

from sketchchain.commands import (
    CreateRoom, JoinRoom, NewGame, SetUsername, StartGame, SubmitDrawing,
    SubmitGuess, SubmitPrompt, COMMAND_TYPES, decode_command,
)
from sketchchain.errors import ProtocolError


def _env(type_, **payload):
    return json.dumps({'type': type_, 'payload': payload})


def test_decodes_every_inbound_type():
    assert decode_command(_env('CREATE_ROOM', userId='u1')) == CreateRoom(user_id='u1')
    assert decode_command(_env('JOIN_ROOM', roomId=' ab12cd ', userId='u2')) == JoinRoom(room_id='AB12CD', user_id='u2')
    assert decode_command(_env('SET_USERNAME', userName='Ann')) == SetUsername(user_name='Ann')
    assert decode_command(_env('START_GAME')) == StartGame()
    assert decode_command(_env('SUBMIT_PROMPT', prompt='a cat')) == SubmitPrompt(prompt='a cat')
    assert decode_command(_env('SUBMIT_DRAWING', drawing='data:x', targetStarterId='u1')) == \
        SubmitDrawing(drawing='data:x', target_starter_id='u1')
    assert decode_command(_env('SUBMIT_GUESS', guess='a dog', targetStarterId='u1')) == \
        SubmitGuess(guess='a dog', target_starter_id='u1')
    assert decode_command(_env('NEW_GAME')) == NewGame()
    assert len(COMMAND_TYPES) == 8


def test_accepts_parsed_dicts_bytes_and_missing_payload():
    assert decode_command({'type': 'START_GAME'}) == StartGame()
    assert decode_command(b'{"type": "NEW_GAME", "payload": {}}') == NewGame()


def test_unknown_type_is_ignored():
    assert decode_command(_env('DANCE', moves=3)) is None


@pytest.mark.parametrize('raw', [
    'not json',
    b'\xff\xfe',
    '[1, 2]',
    '{"payload": {}}',
    '{"type": ["CREATE_ROOM"]}',
    '{"type": "CREATE_ROOM", "payload": "u1"}',
    '{"type": "CREATE_ROOM", "payload": {}}',
    '{"type": "JOIN_ROOM", "payload": {"roomId": "ABC123", "userId": 7}}',
    '{"type": "SUBMIT_DRAWING", "payload": {"targetStarterId": "u1"}}',
])
def test_malformed_messages_raise_protocol_error(raw):
    with pytest.raises(ProtocolError):
        decode_command(raw)


def test_router_has_one_handler_per_command_type(monkeypatch):
    from sketchchain import socketio_events
    socketio_events.check_handlers_cover_commands()
    monkeypatch.delitem(socketio_events.HANDLERS, NewGame)
    with pytest.raises(RuntimeError):
        socketio_events.check_handlers_cover_commands()

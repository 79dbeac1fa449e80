"""Room domain services: store, connection registry, broadcast, game state machine, reaper.

Nothing here imports Flask or Socket.IO; the transport is handed in as a
``send(sid, text)`` callable so the state machine can be driven directly
in tests.
"""

from dataclasses import dataclass
from typing import Callable

from .dispatcher import BroadcastDispatcher
from .game import GameStateMachine
from .registry import ConnectionRegistry
from .store import RoomStore


@dataclass
class Rooms:
    store: RoomStore
    registry: ConnectionRegistry
    dispatcher: BroadcastDispatcher
    game: GameStateMachine


def build_rooms(send: Callable[[str, str], None], min_players: int = 2,
                code_length: int = 6, max_code_attempts: int = 10) -> Rooms:
    store = RoomStore(code_length=code_length, max_attempts=max_code_attempts)
    registry = ConnectionRegistry()
    dispatcher = BroadcastDispatcher(registry, send)
    game = GameStateMachine(store, registry, dispatcher, min_players=min_players)
    return Rooms(store=store, registry=registry, dispatcher=dispatcher, game=game)

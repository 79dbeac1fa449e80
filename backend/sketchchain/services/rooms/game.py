import logging
from typing import Any, Optional

from sketchchain.errors import RoomNotFound
from sketchchain.models import (
    LOBBY, PROMPT, DRAWING, GUESSING, REVEAL, TEXT, DRAWING_KIND,
    Book, ChainEntry, Player, Room, placeholder_name,
)
from .dispatcher import BroadcastDispatcher, ROOM_CREATED, ROOM_UPDATE, make_event
from .registry import ConnectionRegistry
from .store import RoomStore

logger = logging.getLogger(__name__)


def advance_round_if_complete(room: Room) -> bool:
    """Move the room to the next round once every book holds an entry for this one.

    Round parity decides the next phase: odd rounds are guessing, even
    rounds drawing. When every book has been passed to every player the
    room goes to reveal and ``current_round`` stays on the last round played.
    """
    if not all(book.has_entry_for(room.current_round) for book in room.books):
        return False
    next_round = room.current_round + 1
    if next_round >= len(room.players):
        room.state = REVEAL
    else:
        room.current_round = next_round
        room.state = GUESSING if next_round % 2 == 1 else DRAWING
    return True


class GameStateMachine:
    """Room lifecycle and round progression.

    Every mutation runs under the room's lock and ends with a full
    ``ROOM_UPDATE`` snapshot to the room. Commands whose preconditions fail
    are dropped without touching the room or broadcasting.
    """

    def __init__(self, store: RoomStore, registry: ConnectionRegistry,
                 dispatcher: BroadcastDispatcher, min_players: int = 2):
        self.store = store
        self.registry = registry
        self.dispatcher = dispatcher
        self.min_players = min_players

    # ---- lobby ----

    def create_room(self, sid: str, creator_id: str) -> str:
        def build(code: str) -> Room:
            # Bound before the room is visible, so a sweep never sees it unconnected
            self.registry.bind(sid, code, creator_id)
            creator = Player(id=creator_id, display_name=placeholder_name(creator_id))
            return Room(id=code, host_id=creator_id, players=[creator])

        created = self.store.create(build)
        with self.store.locked(created.id) as room:
            if room is None:
                # the creator's own disconnect already tore it down
                logger.info(f"[room-create] room={created.id} gone before reply")
                return created.id
            self.dispatcher.send_to(sid, make_event(ROOM_CREATED, roomId=room.id, room=room.to_dict()))
        logger.info(f"[room-create] room={created.id} host={creator_id}")
        return created.id

    def join_room(self, sid: str, room_id: str, player_id: str) -> Room:
        with self.store.locked(room_id) as room:
            if room is None:
                raise RoomNotFound(room_id)
            if room.get_player(player_id) is None:
                room.players.append(Player(id=player_id, display_name=placeholder_name(player_id)))
                logger.info(f"[room-join] room={room_id} player={player_id} players={len(room.players)}")
            else:
                logger.info(f"[room-rejoin] room={room_id} player={player_id}")
            self.registry.bind(sid, room_id, player_id)
            self._publish(room)
            return room

    def set_display_name(self, room_id: str, player_id: str, name: str, sid: Optional[str] = None) -> bool:
        with self.store.locked(room_id) as room:
            if room is None:
                return self._ignored('set_display_name', room_id, 'no such room')
            if sid is not None:
                self.registry.rename(sid, name)
            player = room.get_player(player_id)
            if player is None:
                return self._ignored('set_display_name', room_id, f'unknown player {player_id}')
            player.display_name = name
            player.is_ready = True
            self._publish(room)
            return True

    def start_game(self, room_id: str, requester_id: str) -> bool:
        with self.store.locked(room_id) as room:
            if room is None:
                return self._ignored('start_game', room_id, 'no such room')
            if room.host_id != requester_id:
                return self._ignored('start_game', room_id, f'{requester_id} is not host')
            if len(room.players) < self.min_players:
                return self._ignored('start_game', room_id, f'{len(room.players)} < {self.min_players} players')
            room.current_round = 0
            room.books = []
            room.state = PROMPT
            logger.info(f"[game-start] room={room_id} players={len(room.players)}")
            self._publish(room)
            return True

    def new_game(self, room_id: str, requester_id: str) -> bool:
        with self.store.locked(room_id) as room:
            if room is None:
                return self._ignored('new_game', room_id, 'no such room')
            if room.host_id != requester_id:
                return self._ignored('new_game', room_id, f'{requester_id} is not host')
            room.state = LOBBY
            room.current_round = 0
            room.books = []
            for player in room.players:
                player.is_ready = False
            logger.info(f"[game-reset] room={room_id}")
            self._publish(room)
            return True

    # ---- submissions ----

    def submit_prompt(self, room_id: str, player_id: str, text: Any) -> bool:
        with self.store.locked(room_id) as room:
            if room is None:
                return self._ignored('submit_prompt', room_id, 'no such room')
            if room.state != PROMPT:
                return self._ignored('submit_prompt', room_id, f'state is {room.state}')
            player = room.get_player(player_id)
            if player is None:
                return self._ignored('submit_prompt', room_id, f'{player_id} is not a player')
            if room.get_book(player_id) is not None:
                return self._ignored('submit_prompt', room_id, f'{player_id} already has a book')
            room.books.append(Book(
                starter_id=player_id,
                starter_name=player.display_name,
                chain=[ChainEntry(round=0, kind=TEXT, content=text, creator_id=player_id)],
            ))
            if len(room.books) == len(room.players):
                room.current_round = 1
                room.state = DRAWING
                logger.info(f"[round-advance] room={room_id} round=1 state={DRAWING}")
            self._publish(room)
            return True

    def submit_drawing(self, room_id: str, player_id: str, target_starter_id: str, drawing: Any) -> bool:
        return self._append_entry(room_id, player_id, target_starter_id, drawing,
                                  expected_state=DRAWING, kind=DRAWING_KIND)

    def submit_guess(self, room_id: str, player_id: str, target_starter_id: str, guess: Any) -> bool:
        return self._append_entry(room_id, player_id, target_starter_id, guess,
                                  expected_state=GUESSING, kind=TEXT)

    def _append_entry(self, room_id, player_id, target_starter_id, content, expected_state, kind) -> bool:
        op = f'submit_{expected_state}'
        with self.store.locked(room_id) as room:
            if room is None:
                return self._ignored(op, room_id, 'no such room')
            if room.state != expected_state:
                return self._ignored(op, room_id, f'state is {room.state}')
            if room.get_player(player_id) is None:
                return self._ignored(op, room_id, f'{player_id} is not a player')
            book = room.get_book(target_starter_id)
            if book is None:
                return self._ignored(op, room_id, f'no book for {target_starter_id}')
            if book.has_entry_for(room.current_round):
                return self._ignored(op, room_id, f'book {target_starter_id} already has round {room.current_round}')
            book.chain.append(ChainEntry(round=room.current_round, kind=kind, content=content, creator_id=player_id))
            if advance_round_if_complete(room):
                logger.info(f"[round-advance] room={room_id} round={room.current_round} state={room.state}")
            self._publish(room)
            return True

    # ---- connection teardown ----

    def handle_disconnect(self, sid: str) -> None:
        conn = self.registry.close(sid)
        if conn is None or not conn.is_bound:
            return
        room_id, player_id = conn.room_id, conn.player_id
        with self.store.locked(room_id) as room:
            if room is None:
                return
            if room.state == LOBBY:
                room.players = [p for p in room.players if p.id != player_id]
                if not room.players:
                    self.store.delete(room_id)
                    logger.info(f"[room-delete] room={room_id} last player left")
                    return
                if room.host_id == player_id:
                    room.host_id = room.players[0].id
                    logger.info(f"[host-reassign] room={room_id} host={room.host_id}")
            # Mid-game the slot stays so round arithmetic keeps its player count
            self._publish(room)

    # ---- helpers ----

    def _publish(self, room: Room) -> None:
        self.dispatcher.broadcast(room.id, make_event(ROOM_UPDATE, room=room.to_dict()))

    @staticmethod
    def _ignored(op: str, room_id: str, reason: str) -> bool:
        logger.debug(f"[ignored] op={op} room={room_id} reason={reason}")
        return False

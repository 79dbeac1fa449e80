import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

DEFAULT_DISPLAY_NAME = 'Anonymous'


@dataclass
class Connection:
    sid: str
    room_id: Optional[str] = None
    player_id: Optional[str] = None
    display_name: str = DEFAULT_DISPLAY_NAME

    @property
    def is_bound(self) -> bool:
        return self.room_id is not None


class ConnectionRegistry:
    """sid -> Connection, plus a room -> sids index for broadcast."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self._by_room: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def open(self, sid: str) -> Connection:
        with self._lock:
            conn = self._connections.get(sid)
            if conn is None:
                conn = Connection(sid=sid)
                self._connections[sid] = conn
            return conn

    def is_open(self, sid: str) -> bool:
        with self._lock:
            return sid in self._connections

    def get(self, sid: str) -> Optional[Connection]:
        with self._lock:
            return self._connections.get(sid)

    def bind(self, sid: str, room_id: str, player_id: str) -> Connection:
        """Attach a connection to (room, player); moves it out of any previous room."""
        with self._lock:
            conn = self._connections.setdefault(sid, Connection(sid=sid))
            if conn.room_id is not None and conn.room_id != room_id:
                self._discard_from_room(conn.room_id, sid)
            conn.room_id = room_id
            conn.player_id = player_id
            self._by_room.setdefault(room_id, set()).add(sid)
            return conn

    def rename(self, sid: str, display_name: str) -> None:
        with self._lock:
            conn = self._connections.get(sid)
            if conn is not None:
                conn.display_name = display_name

    def close(self, sid: str) -> Optional[Connection]:
        """Forget a connection and return its last binding."""
        with self._lock:
            conn = self._connections.pop(sid, None)
            if conn is not None and conn.room_id is not None:
                self._discard_from_room(conn.room_id, sid)
            return conn

    def sids_in_room(self, room_id: str) -> List[str]:
        with self._lock:
            return list(self._by_room.get(room_id, ()))

    def has_connections(self, room_id: str) -> bool:
        with self._lock:
            return bool(self._by_room.get(room_id))

    def _discard_from_room(self, room_id: str, sid: str) -> None:
        sids = self._by_room.get(room_id)
        if sids is None:
            return
        sids.discard(sid)
        if not sids:
            del self._by_room[room_id]

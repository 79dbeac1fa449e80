import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from sketchchain.errors import RoomCodeExhausted
from sketchchain.models import Room, generate_room_code

logger = logging.getLogger(__name__)


class RoomStore:
    """In-memory room map with one lock per room.

    The map guard is only held for dictionary access. Room state is only
    touched inside ``locked(room_id)``; operations on different rooms never
    wait on each other.
    """

    def __init__(self, code_length: int = 6, max_attempts: int = 10):
        self.code_length = code_length
        self.max_attempts = max_attempts
        self._rooms: Dict[str, Room] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._rooms)

    def __contains__(self, room_id) -> bool:
        with self._guard:
            return room_id in self._rooms

    def room_ids(self) -> List[str]:
        with self._guard:
            return list(self._rooms)

    def create(self, build: Callable[[str], Room],
               code_factory: Callable[[int], str] = generate_room_code) -> Room:
        """Allocate a free code and insert ``build(code)`` under it."""
        for attempt in range(1, self.max_attempts + 1):
            code = code_factory(self.code_length)
            with self._guard:
                if code in self._rooms:
                    logger.info(f"[room-code-collision] code={code} attempt={attempt}")
                    continue
                room = build(code)
                self._rooms[code] = room
                self._locks[code] = threading.Lock()
                return room
        raise RoomCodeExhausted(f"No free room code after {self.max_attempts} attempts")

    def get(self, room_id) -> Optional[Room]:
        with self._guard:
            return self._rooms.get(room_id)

    def delete(self, room_id) -> bool:
        """Drop a room. Callers hold the room's lock."""
        with self._guard:
            self._locks.pop(room_id, None)
            return self._rooms.pop(room_id, None) is not None

    @contextmanager
    def locked(self, room_id) -> Iterator[Optional[Room]]:
        """Hold the room's lock and yield the room, or ``None`` if it is gone.

        A room deleted (or replaced under the same code) while we waited
        yields ``None``.
        """
        with self._guard:
            lock = self._locks.get(room_id)
        if lock is None:
            yield None
            return
        with lock:
            with self._guard:
                current = self._locks.get(room_id) is lock
                room = self._rooms.get(room_id) if current else None
            yield room

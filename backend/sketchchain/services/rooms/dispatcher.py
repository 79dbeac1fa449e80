import json
import logging
from typing import Any, Callable, Dict

from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)

ROOM_CREATED = 'ROOM_CREATED'
ROOM_UPDATE = 'ROOM_UPDATE'
ERROR = 'ERROR'


def make_event(event_type: str, **payload) -> Dict[str, Any]:
    return {'type': event_type, 'payload': payload}


class BroadcastDispatcher:
    """Serialize an event once and hand it to every open connection in a room.

    ``send(sid, text)`` is the transport hook; with Socket.IO it only
    enqueues, so a slow client never holds up the caller.
    """

    def __init__(self, registry: ConnectionRegistry, send: Callable[[str, str], None]):
        self.registry = registry
        self._send = send

    def broadcast(self, room_id: str, event: Dict[str, Any]) -> int:
        data = json.dumps(event)
        delivered = 0
        for sid in self.registry.sids_in_room(room_id):
            if self._deliver(sid, data):
                delivered += 1
        return delivered

    def send_to(self, sid: str, event: Dict[str, Any]) -> bool:
        return self._deliver(sid, json.dumps(event))

    def _deliver(self, sid: str, data: str) -> bool:
        # The connection may have closed since the room snapshot was taken
        if not self.registry.is_open(sid):
            return False
        try:
            self._send(sid, data)
        except Exception as exc:
            logger.warning(f"[send-failed] sid={sid} error={exc}")
            return False
        return True

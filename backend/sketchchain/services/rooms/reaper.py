import logging
from typing import List

from .registry import ConnectionRegistry
from .store import RoomStore

logger = logging.getLogger(__name__)


def reap_idle_rooms(store: RoomStore, registry: ConnectionRegistry) -> List[str]:
    """Delete every room that no live connection points at.

    Each check runs under the room's lock so a concurrent join either
    lands first (and keeps the room) or finds it gone.
    """
    reaped = []
    for room_id in store.room_ids():
        with store.locked(room_id) as room:
            if room is None or registry.has_connections(room_id):
                continue
            store.delete(room_id)
            reaped.append(room_id)
            logger.info(f"[reaper-delete] room={room_id} state={room.state} players={len(room.players)}")
    return reaped


def start_reaper(app, socketio, rooms) -> None:
    """Run ``reap_idle_rooms`` every REAPER_INTERVAL_SEC on a Socket.IO background task.

    - No-ops in TESTING mode or when the interval is 0
    - The loop never exits; a failed sweep is logged and the next one runs on schedule
    """
    interval = int(app.config.get('REAPER_INTERVAL_SEC', 0))
    if app.config.get('TESTING') or interval <= 0:
        return

    def _worker():
        app.logger.info(f"[reaper-start] interval={interval}s")
        while True:
            socketio.sleep(interval)
            try:
                reaped = reap_idle_rooms(rooms.store, rooms.registry)
            except Exception:
                app.logger.exception("[reaper-error] sweep failed")
                continue
            app.logger.info(f"[reaper-sweep] deleted={len(reaped)} remaining={len(rooms.store)}")

    socketio.start_background_task(_worker)

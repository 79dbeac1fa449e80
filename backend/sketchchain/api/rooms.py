from flask import Blueprint, current_app, jsonify

from sketchchain.socketio_events import EXTENSION_KEY

rooms_api = Blueprint('rooms', __name__)


def _rooms():
    return current_app.extensions[EXTENSION_KEY]


@rooms_api.route('', methods=['GET'])
def list_rooms():
    """
    Summarises every live room. Read-only; snapshots are taken under each room's lock.
    """
    rooms = _rooms()
    summaries = []
    for room_id in rooms.store.room_ids():
        with rooms.store.locked(room_id) as room:
            if room is None:
                continue
            summaries.append({
                'id': room.id,
                'state': room.state,
                'playerCount': len(room.players),
                'connected': len(rooms.registry.sids_in_room(room.id)),
            })
    return jsonify(summaries)


@rooms_api.route('/<string:room_id>', methods=['GET'])
def get_room_state(room_id):
    """
    Returns the same full snapshot clients receive in ROOM_UPDATE.
    """
    rooms = _rooms()
    with rooms.store.locked(room_id.upper()) as room:
        if room is None:
            return jsonify({'error': 'Room not found'}), 404
        snapshot = room.to_dict()
    return jsonify(snapshot)

from flask import Blueprint, current_app, jsonify

from sketchchain.socketio_events import EXTENSION_KEY

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'SketchChain server'})

@main.route('/health')
def health():
    rooms = current_app.extensions[EXTENSION_KEY]
    return jsonify({
        'status': 'ok',
        'rooms': len(rooms.store),
        'connections': len(rooms.registry),
    })

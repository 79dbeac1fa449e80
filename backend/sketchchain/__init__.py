from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')

    # One room registry per app; the transport hook enqueues text on the client's sid
    from sketchchain.services.rooms import build_rooms
    rooms = build_rooms(
        send=lambda sid, data: socketio.send(data, to=sid, namespace=namespace),
        min_players=int(flask_app.config.get('MIN_PLAYERS', 2)),
        code_length=int(flask_app.config.get('ROOM_CODE_LENGTH', 6)),
        max_code_attempts=int(flask_app.config.get('ROOM_CODE_MAX_ATTEMPTS', 10)),
    )
    from sketchchain.socketio_events import EXTENSION_KEY, register_socketio_handlers
    flask_app.extensions[EXTENSION_KEY] = rooms

    # Import and register blueprints here
    from sketchchain.main import main
    flask_app.register_blueprint(main)

    from sketchchain.api.rooms import rooms_api
    flask_app.register_blueprint(rooms_api, url_prefix='/api/rooms')

    # Register Socket.IO event handlers
    register_socketio_handlers(namespace=namespace)

    from sketchchain.services.rooms.reaper import start_reaper
    start_reaper(flask_app, socketio, rooms)

    return flask_app

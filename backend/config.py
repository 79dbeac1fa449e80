import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list of origins allowed to open a socket / call the API
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
    ).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Minimum players before the host may start
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    # Room codes: length and how many draws before giving up on a free code
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    ROOM_CODE_MAX_ATTEMPTS = int(os.environ.get('ROOM_CODE_MAX_ATTEMPTS', '10'))
    # Idle-room sweep period (seconds). 0 disables.
    REAPER_INTERVAL_SEC = int(os.environ.get('REAPER_INTERVAL_SEC', str(30 * 60)))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

import json
import os
import sys
import pytest

# Ensure the backend root (containing the `sketchchain` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from sketchchain import create_app, socketio
from sketchchain.services.rooms import build_rooms


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/ws'
    MIN_PLAYERS = 2
    ROOM_CODE_LENGTH = 6
    ROOM_CODE_MAX_ATTEMPTS = 10
    REAPER_INTERVAL_SEC = 0
    LOG_LEVEL = 'DEBUG'


class RecordingSender:
    """Stands in for the socket transport: remembers every (sid, event) sent."""

    def __init__(self):
        self.sent = []

    def __call__(self, sid, data):
        self.sent.append((sid, json.loads(data)))

    def to(self, sid):
        return [event for target, event in self.sent if target == sid]

    def last(self, sid):
        events = self.to(sid)
        return events[-1] if events else None

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def sender():
    return RecordingSender()


@pytest.fixture()
def rooms(sender):
    r = build_rooms(send=sender)
    # Connections open on transport connect; tests open them up front
    for sid in ('s1', 's2', 's3', 's4'):
        r.registry.open(sid)
    return r


@pytest.fixture()
def make_rooms():
    """Fresh (rooms, sender) pairs for tests that repeat a scenario."""
    def _make():
        s = RecordingSender()
        return build_rooms(send=s), s
    return _make


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def _make_sio_client(flask_app):
    return socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )


@pytest.fixture()
def sio_client(flask_app):
    test_client = _make_sio_client(flask_app)
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for extra players; every client is disconnected at teardown."""
    made = []

    def _make():
        c = _make_sio_client(flask_app)
        made.append(c)
        return c

    yield _make
    for c in made:
        if c.is_connected('/ws'):
            c.disconnect(namespace='/ws')

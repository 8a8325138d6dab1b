import os
import sys
import random
import pytest

# Ensure the project root (containing the `app` module) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from app import create_app
from game import GameRules, LobbySession, TopicProvider

TEST_TOPICS = ['Pizza', 'Beach', 'Space', 'Jungle', 'Castle', 'Circus']


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    LOG_LEVEL = 'WARNING'
    SOCKETIO_ASYNC_MODE = 'threading'
    DISCUSSION_SECONDS = 3
    FAKER_ESCAPE_POINTS = 3
    CATCH_POINTS = 2
    MIN_PLAYERS = 1
    DECOY_COUNT = 3
    LOBBY_CODE_LENGTH = 4
    MAX_CODE_ATTEMPTS = 100
    LOBBY_IDLE_MINUTES = 60
    MAX_NAME_LENGTH = 20
    MAX_WORD_LENGTH = 40
    MAX_TOPIC_LENGTH = 60


class InlineScheduler:
    """Runs background tasks immediately; sleeping is a no-op."""

    def __init__(self):
        self.sleeps = 0

    def start_background_task(self, target, *args, **kwargs):
        target(*args, **kwargs)

    def sleep(self, seconds):
        self.sleeps += 1


class ManualScheduler:
    """Captures background tasks until the test runs them."""

    def __init__(self, on_sleep=None):
        self.tasks = []
        self.sleeps = 0
        self.on_sleep = on_sleep

    def start_background_task(self, target, *args, **kwargs):
        self.tasks.append((target, args, kwargs))

    def sleep(self, seconds):
        self.sleeps += 1
        if self.on_sleep:
            self.on_sleep(self.sleeps)

    def run_pending(self):
        ran = 0
        while self.tasks:
            target, args, kwargs = self.tasks.pop(0)
            target(*args, **kwargs)
            ran += 1
        return ran


class RecordingSink:
    """Outbound sink that keeps every (event, payload) it receives."""

    def __init__(self, name=''):
        self.name = name
        self.events = []

    def __call__(self, event, payload):
        self.events.append((event, payload))

    def names(self):
        return [event for event, _ in self.events]

    def payloads(self, event):
        return [payload for name, payload in self.events if name == event]

    def last(self, event):
        found = self.payloads(event)
        return found[-1] if found else None

    def clear(self):
        self.events = []


class PinnedRandom(random.Random):
    """Random source whose choice() returns a chosen element when present."""

    def __init__(self, pick=None):
        super().__init__(0)
        self.pick = pick

    def choice(self, seq):
        if self.pick in seq:
            return self.pick
        return super().choice(seq)


@pytest.fixture()
def flask_app():
    application, socketio = create_app(TestConfig, scheduler=InlineScheduler())
    application.extensions['blend_in']['socketio'] = socketio
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['blend_in']['registry']


@pytest.fixture()
def sio_factory(flask_app):
    socketio = flask_app.extensions['blend_in']['socketio']
    clients = []

    def connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def rules():
    return GameRules(discussion_seconds=3, faker_escape_points=3, catch_points=2,
                     min_players=1, decoy_count=3)


@pytest.fixture()
def host_sink():
    return RecordingSink('host')


@pytest.fixture()
def make_session(scheduler, rules, host_sink):
    """Build a session in the waiting phase, optionally pinning the faker."""

    def build(code='XYZZ', faker=None, host_id='host'):
        return LobbySession(
            code=code,
            host_id=host_id,
            scheduler=scheduler,
            host_sink=host_sink,
            rules=rules,
            topic_provider=TopicProvider(TEST_TOPICS, rng=random.Random(3)),
            rng=PinnedRandom(faker)
        )

    return build


def join_players(session, *player_ids):
    """Join players (name == id) and return their recording sinks."""
    sinks = {}
    for player_id in player_ids:
        sinks[player_id] = RecordingSink(player_id)
        session.add_player(player_id, player_id, sinks[player_id])
    return sinks

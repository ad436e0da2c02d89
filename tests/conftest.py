import base64
import io
import os
import sys
import threading

import pytest
from PIL import Image

# Ensure the project root is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from ai import AIError, AIServices, Ranking, SpeechResult, Story  # noqa: E402
from games import (  # noqa: E402
    AIDrawingGame, BuzzRaceGame, GameRegistry, GameServices, GroupStoryGame, WordCategoryGame
)
from games.scheduler import ScheduledCall  # noqa: E402
from games.word_category import FixedCategoryProvider  # noqa: E402
from sessions import Broadcaster, SessionHub, SessionRegistry  # noqa: E402

TEST_SETTINGS = {
    'WORD_SUBMISSION_SECONDS': 60,
    'WORD_REVEAL_SECONDS': 5,
    'WORD_VOTING_SECONDS': 10,
    'WORD_CHALLENGE_RESULT_SECONDS': 3,
    'WORD_CATEGORIES_PER_ROUND': 2,
    'WORD_POINTS_PER_WORD': 10,
    'WORD_KEEP_SCORES_BETWEEN_ROUNDS': True,
    'DRAWING_SECONDS': 60,
    'ANSWERING_SECONDS': 30,
}

TEST_CATEGORIES = ['Animals', 'Fruits', 'Cities']


class ManualScheduler:
    """Scheduler driven by a virtual clock; nothing runs until the test says so."""

    def __init__(self):
        self.now = 0.0
        self.calls = []
        self.spawned = []
        self.lock = threading.RLock()

    def time(self):
        return self.now

    def serialized(self):
        return self.lock

    def spawn(self, target, *args):
        self.spawned.append((target, args))

    def call_later(self, delay, callback, *args):
        call = ScheduledCall(callback, args, due=self.now + delay)
        self.calls.append(call)
        return call

    def pending(self):
        return [c for c in self.calls if not c.cancelled and not c.done]

    def advance(self, seconds):
        deadline = self.now + seconds
        while True:
            due = [c for c in self.pending() if c.due <= deadline]
            if not due:
                break
            call = min(due, key=lambda c: c.due)
            self.calls.remove(call)
            self.now = call.due
            with self.lock:
                call.run()
        self.now = deadline
        self.calls = self.pending()

    def run_spawned(self):
        while self.spawned:
            target, args = self.spawned.pop(0)
            target(*args)


class RecordingEmitter:
    """Stands in for the SocketIO server and records every emit."""

    def __init__(self):
        self.sent = []

    def emit(self, event, data=None, to=None, **kwargs):
        self.sent.append((event, data, to))

    def events(self, event=None, to=None):
        return [
            data for name, data, target in self.sent
            if (event is None or name == event) and (to is None or target == to)
        ]

    def last_state(self, to):
        states = self.events('session:state', to)
        return states[-1] if states else None

    def clear(self):
        self.sent = []


class FakeJudge:
    def __init__(self):
        self.error = None
        self.calls = []

    def rank(self, word, collage_b64, labels):
        self.calls.append((word, labels))
        if self.error:
            raise AIError(self.error)
        return [Ranking(label=label, rank=i + 1, reason=f"Drawing {label} is great")
                for i, label in enumerate(labels)]


class FakeImages:
    def __init__(self):
        self.error = None
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise AIError(self.error)
        return 'aW1hZ2U='


class FakeSpeech:
    def __init__(self):
        self.texts = []

    def synthesize(self, text):
        self.texts.append(text)
        return SpeechResult(text=text, duration_ms=1500, audio_b64='YXVkaW8=')


class FakeStoryteller:
    def __init__(self):
        self.error = None
        self.details = []

    def generate_questions(self, count, previous_story=None):
        return [f"Question {i + 1}?" for i in range(count)]

    def write_story(self, details, previous_story=None):
        self.details.append(list(details))
        if self.error:
            raise AIError(self.error)
        return Story(text='Once upon a time there was a dragon.', image_prompt='A friendly dragon')


def make_png(color='red', size=(40, 30)) -> str:
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format='PNG')
    return base64.b64encode(buffer.getvalue()).decode('ascii')


class Party:
    """Drives a hub the way a presenter and several handsets would."""

    def __init__(self, hub, emitter, scheduler):
        self.hub = hub
        self.emitter = emitter
        self.scheduler = scheduler
        self.session = None
        self.presenter_sid = 'tv'
        self.sids = {}
        self.ids = {}

    def create(self):
        ok, _, session = self.hub.create_session(self.presenter_sid)
        assert ok
        self.session = session
        return session

    def join(self, name, sid=None):
        sid = sid or f"sid-{name.lower()}"
        ok, message, participant = self.hub.join_participant(sid, self.session.code, name)
        assert ok, message
        self.sids[name] = sid
        self.ids[name] = participant.id
        return participant

    def participant(self, name):
        return self.session.get_participant(self.ids[name])

    def start(self, game_id, master='Alice'):
        ok, message, _ = self.hub.select_game(self.sids[master], game_id)
        assert ok, message
        ok, message, _ = self.hub.start_game(self.sids[master])
        assert ok, message
        return self.session.game_state

    def act(self, name, action_type, **payload):
        return self.hub.game_action(self.sids[name], {'type': action_type, 'payload': payload})

    def disconnect(self, name):
        return self.hub.disconnect(self.sids[name])

    @property
    def state(self):
        return self.session.game_state


@pytest.fixture()
def png():
    return make_png


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def emitter():
    return RecordingEmitter()


@pytest.fixture()
def fake_ai():
    return AIServices(
        judge=FakeJudge(),
        images=FakeImages(),
        speech=FakeSpeech(),
        storyteller=FakeStoryteller()
    )


@pytest.fixture()
def hub(scheduler, emitter, fake_ai):
    games = GameRegistry()
    broadcaster = Broadcaster(emitter, games)
    services = GameServices(broadcaster=broadcaster, scheduler=scheduler, ai=fake_ai,
                            settings=dict(TEST_SETTINGS))
    games.register(WordCategoryGame(services, FixedCategoryProvider(TEST_CATEGORIES)))
    games.register(BuzzRaceGame(services))
    games.register(AIDrawingGame(services))
    games.register(GroupStoryGame(services))
    return SessionHub(SessionRegistry(grace_seconds=60), games, broadcaster, scheduler)


@pytest.fixture()
def party(hub, emitter, scheduler):
    driver = Party(hub, emitter, scheduler)
    driver.create()
    return driver


@pytest.fixture()
def other_party(hub, emitter, scheduler):
    driver = Party(hub, emitter, scheduler)
    driver.presenter_sid = 'tv-2'
    driver.create()
    return driver


@pytest.fixture()
def flask_app(scheduler, fake_ai):
    from app import create_app

    app, socketio = create_app(
        {
            'TESTING': True,
            'SECRET_KEY': 'test-secret',
            'SOCKETIO_ASYNC_MODE': 'threading',
            'SOCKETIO_ASYNC_HANDLERS': False,
            'WORD_CATEGORIES_PER_ROUND': 2,
        },
        scheduler=scheduler,
        ai_services=fake_ai
    )
    app.socketio = socketio
    return app


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def make_client():
        test_client = flask_app.socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        test_client.get_received()
        clients.append(test_client)
        return test_client

    yield make_client

    for test_client in clients:
        if test_client.is_connected():
            test_client.disconnect()

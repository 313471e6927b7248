import json
import os
import sys
import threading
import pytest
import fakeredis

# Ensure the backend root (containing the `trivia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from trivia import create_app
from trivia.services.directory import UserDirectory
from trivia.services.questions import QuestionSourceError
from trivia.services.game import keys
from trivia.services.game.rounds import RoundManager
from trivia.services.game.scoring import ScoreLedger
from trivia.services.game.settings import GameSettings


EVEREST = {
    'id': 101,
    'category': {'title': 'mountains'},
    'question': "Earth's highest peak",
    'answer': 'Mount Everest',
    'value': 500,
}
MISSISSIPPI = {
    'id': 102,
    'category': {'title': 'rivers'},
    'question': 'It flows past Memphis',
    'answer': '<i>the Mississippi</i>',
    'value': None,
}

NOW = 1700000000.0


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    REDIS_URL = 'redis://localhost:6379/15'
    OUTGOING_WEBHOOK_TOKEN = 'test-token'
    CHANNEL_BLACKLIST = '#random, #general'
    ADMIN_USERS = 'alex'
    BOT_USERNAME = 'trebekbot'
    BOT_ICON = ':trebek:'
    SLACK_API_TOKEN = None
    QUESTION_API_URL = 'http://questions.test/api/random'
    QUESTION_FETCH_ATTEMPTS = 3
    HTTP_TIMEOUT_SEC = 1
    SECONDS_TO_ANSWER = 30
    SIMILARITY_THRESHOLD = 0.9


class ScriptedQuestions:
    """Hands out canned questions in order; the last one repeats."""

    def __init__(self, *questions):
        self.questions = [dict(q) for q in questions] or [dict(EVEREST)]
        self.calls = 0
        self.fail = False
        self.barrier = None
        self._lock = threading.Lock()

    def fetch_random_question(self):
        if self.fail:
            raise QuestionSourceError('no usable question after 3 attempts')
        with self._lock:
            index = min(self.calls, len(self.questions) - 1)
            self.calls += 1
            question = dict(self.questions[index])
        if self.barrier is not None:
            self.barrier.wait(timeout=5)
        return question


def seed_names(store, user_id, name, first_name=None, real_name=None):
    names = {'id': user_id, 'name': name}
    if first_name:
        names['first_name'] = first_name
    if real_name:
        names['real_name'] = real_name
    store.set(keys.user_names_key(user_id), json.dumps(names))


@pytest.fixture()
def store():
    client = fakeredis.FakeRedis(decode_responses=True)
    seed_names(client, 'U1', 'alex', first_name='Alex', real_name='Alex Trebek')
    seed_names(client, 'U2', 'ken', first_name='Ken', real_name='Ken Jennings')
    seed_names(client, 'U3', 'brad', real_name='Brad Rutter')
    yield client
    client.flushall()


@pytest.fixture()
def questions():
    return ScriptedQuestions(EVEREST, MISSISSIPPI)


@pytest.fixture()
def settings():
    return GameSettings.from_config(vars(TestConfig))


@pytest.fixture()
def directory(store):
    return UserDirectory(store, api_token=None)


@pytest.fixture()
def ledger(store):
    return ScoreLedger(store)


@pytest.fixture()
def manager(store, questions, ledger, directory, settings):
    return RoundManager(store, questions, ledger, directory, settings)


@pytest.fixture()
def flask_app(store, questions):
    application = create_app(TestConfig, store=store, questions=questions)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def post(client):
    def _post(text, user_id='U1', user_name='alex', channel_id='C1', channel_name='trivia',
              timestamp=NOW, token='test-token'):
        res = client.post('/', data={
            'token': token,
            'team_id': 'T0001',
            'channel_id': channel_id,
            'channel_name': channel_name,
            'timestamp': str(timestamp),
            'user_id': user_id,
            'user_name': user_name,
            'text': text,
            'trigger_word': 'trebekbot',
        })
        assert res.status_code == 200
        return res.get_json()
    return _post

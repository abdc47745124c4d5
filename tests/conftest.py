import time

import pytest

from app import create_app
from config import db
from responder import UpstreamError

FALLBACK = "fallback reply"
ERROR = "connection error reply"


class FakeResponder:
    """Scripted stand-in for the webhook client."""

    def __init__(self):
        self.payload = {"output": "hello", "html_code": None}
        self.error = None
        self.delay = 0
        self.calls = []

    def ask(self, chat_input, session_id):
        self.calls.append((chat_input, session_id))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.payload

    def fail(self, message="connection refused"):
        self.error = UpstreamError(message)

    def close(self):
        pass


def make_app(responder, **overrides):
    settings = {
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "RATELIMIT_ENABLED": False,
        "FALLBACK_REPLY": FALLBACK,
        "ERROR_REPLY": ERROR,
    }
    settings.update(overrides)
    return create_app(settings, responder=responder)


@pytest.fixture
def responder():
    return FakeResponder()


@pytest.fixture
def app(responder):
    app = make_app(responder)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def new_session(client):
    def _create():
        return client.post("/api/sessions").get_json()["sessionId"]
    return _create

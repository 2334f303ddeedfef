# tests/conftest.py
from datetime import datetime

import pytest

from smartbrain import create_app, db
from smartbrain.config.settings import TestingConfig
from smartbrain.repositories.api_request_repository import ApiRequestRepository
from smartbrain.repositories.user_repository import UserRepository
from smartbrain.services.auth_service import hash_password

FROZEN_NOW = datetime(2026, 3, 15, 12, 30)
ORIGIN = 'http://localhost:3000'

SAMPLE_BOXES = [
    {"value": 0.998, "topRow": "0.120", "leftCol": "0.310", "bottomRow": "0.480", "rightCol": "0.620"},
]


class FakeDetector:
    def __init__(self):
        self.boxes = list(SAMPLE_BOXES)
        self.error = None
        self.calls = []
        self.closed = False

    def detect(self, image_url):
        self.calls.append(image_url)
        if self.error is not None:
            raise self.error
        return list(self.boxes)

    def close(self):
        self.closed = True


@pytest.fixture(scope='session')
def password_hash():
    return hash_password('secret-password')


@pytest.fixture
def detector():
    return FakeDetector()


@pytest.fixture
def app(detector):
    app = create_app(TestingConfig, detector=detector, clock=lambda: FROZEN_NOW)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    client = app.test_client()
    client.environ_base['HTTP_ORIGIN'] = ORIGIN
    return client


@pytest.fixture
def make_user(app, password_hash):
    counter = {'n': 0}

    def _make_user(authorized=True, entries=0, email=None):
        counter['n'] += 1
        return UserRepository().create_user(
            f"User {counter['n']}",
            email or f"user{counter['n']}@example.com",
            password_hash,
            is_authorized=authorized,
            entries=entries,
        )

    return _make_user


@pytest.fixture
def record_calls(app):
    def _record_calls(user_id, count, at=FROZEN_NOW):
        ledger = ApiRequestRepository()
        for _ in range(count):
            ledger.add_request(user_id, '/api/clarifai', requested_at=at)
        db.session.commit()

    return _record_calls

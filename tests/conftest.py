import pytest
import redis

from flask import Flask

from config import TestConfig
from extensions import db
from src.app_factory import create_app
from src.models import Clinic, User


class FakeRedis:
    """In-memory stand-in for the handful of list commands the activity feed uses."""

    def __init__(self):
        self.lists = {}
        self.ttls = {}

    def lpush(self, key, *values):
        items = self.lists.setdefault(key, [])
        for value in values:
            items.insert(0, value)
        return len(items)

    def ltrim(self, key, start, end):
        items = self.lists.get(key, [])
        self.lists[key] = items[start:] if end == -1 else items[start:end + 1]
        return True

    def lrange(self, key, start, end):
        items = self.lists.get(key, [])
        return items[start:] if end == -1 else items[start:end + 1]

    def expire(self, key, seconds):
        self.ttls[key] = seconds
        return True

    def delete(self, key):
        self.ttls.pop(key, None)
        return 1 if self.lists.pop(key, None) is not None else 0


class BrokenRedis:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise redis.ConnectionError("redis is down")
        return fail


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    from src.services import activity_service
    fake = FakeRedis()
    monkeypatch.setattr(activity_service, "r", fake)
    return fake


@pytest.fixture
def broken_redis(monkeypatch):
    from src.services import activity_service
    monkeypatch.setattr(activity_service, "r", BrokenRedis())


@pytest.fixture
def app(monkeypatch, fake_redis) -> Flask:
    app = create_app(TestConfig)
    # Route db_context to the test app
    from src.services import db_context as dbc
    monkeypatch.setattr(dbc, "flask_app", app)

    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_ctx(app: Flask):
    with app.app_context():
        yield


@pytest.fixture
def client(app: Flask):
    return app.test_client()


@pytest.fixture
def clinic(app_ctx):
    clinic = Clinic(name="Riverside Clinic", subdomain="riverside")
    db.session.add(clinic)
    db.session.flush()
    doctor = User(clinic_id=clinic.id, name="Sarah Jenkins", email="sarah@riverside.test", type="doctor")
    nurse = User(clinic_id=clinic.id, name="Tom Hale", email="tom@riverside.test", type="staff")
    db.session.add_all([doctor, nurse])
    db.session.commit()
    return clinic


@pytest.fixture
def doctor(clinic):
    return User.query.filter_by(clinic_id=clinic.id, type="doctor").first()


@pytest.fixture
def demo_clinic_id(app: Flask) -> int:
    from src.cli import seed_demo_data
    with app.app_context():
        return seed_demo_data().id

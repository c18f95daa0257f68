import os
import tempfile
from datetime import date

_DB_DIR = tempfile.mkdtemp(prefix="tasks-test-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db")
os.environ["DEFAULT_TIMEZONE"] = "UTC"
os.environ["WEEK_START_DAY"] = "0"
os.environ.pop("API_SHARED_KEY", None)

import pytest

import app as app_module
from models import db, Task, User


@pytest.fixture
def app():
    flask_app = app_module.app
    flask_app.config.update(TESTING=True)
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
    yield flask_app
    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(name="Ada", email="ada@example.com", password="secret1"):
        with app.app_context():
            user = User(name=name, email=email)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture
def make_task(app):
    def _make(user_id, **fields):
        values = {
            "title": "Standup",
            "start_date": "2024-06-03",
            "start_time": "09:00",
            "end_date": "2024-06-03",
            "end_time": "10:30",
            "all_day": False,
        }
        values.update(fields)
        for key in ("start_date", "end_date"):
            values[key] = _to_date(values[key])
        with app.app_context():
            task = Task(user_id=user_id, **values)
            db.session.add(task)
            db.session.commit()
            return task.id
    return _make


def _to_date(value):
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


@pytest.fixture
def auth_client(client, make_user):
    user_id = make_user()
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
    client.user_id = user_id
    return client

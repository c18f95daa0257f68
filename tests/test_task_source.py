import pytest
from sqlalchemy.exc import OperationalError

from services import task_source
from services.task_source import TaskSourceError, fetch_tasks


def test_fetch_tasks_orders_by_start(app, make_user, make_task):
    user_id = make_user()
    other_id = make_user(name="Eve", email="eve@example.com")
    late = make_task(user_id, title="late", start_time="15:00", end_time="16:00")
    early = make_task(user_id, title="early", start_time="08:00", end_time="09:00")
    make_task(other_id, title="not mine")
    with app.app_context():
        tasks = fetch_tasks(user_id)
    assert [t.id for t in tasks] == [early, late]


def test_fetch_tasks_skips_unparsable_rows(app, make_user, make_task):
    user_id = make_user()
    make_task(user_id, title="broken", start_time="9am")
    good = make_task(user_id, title="fine")
    with app.app_context():
        tasks = fetch_tasks(user_id)
    assert [t.id for t in tasks] == [good]


def test_database_errors_become_task_source_errors(app, monkeypatch):
    class BrokenQuery:
        def filter_by(self, **kwargs):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    class BrokenTask:
        query = BrokenQuery()

    monkeypatch.setattr(task_source, "Task", BrokenTask)
    with app.app_context():
        with pytest.raises(TaskSourceError):
            fetch_tasks(1)

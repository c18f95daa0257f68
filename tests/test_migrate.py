import sqlite3

import migrate


def _legacy_db(path):
    conn = sqlite3.connect(str(path))
    conn.execute(
        "CREATE TABLE task (id INTEGER PRIMARY KEY, user_id INTEGER, title VARCHAR(200), "
        "description TEXT, start_date DATE, start_time VARCHAR(5), end_date DATE, end_time VARCHAR(5))"
    )
    conn.execute(
        "INSERT INTO task (user_id, title, start_date, start_time, end_date, end_time) "
        "VALUES (1, 'old', '2024-06-03', '9:00', '2024-06-03', '10:30')"
    )
    conn.commit()
    conn.close()


def _columns(path):
    conn = sqlite3.connect(str(path))
    try:
        return {row[1] for row in conn.execute("PRAGMA table_info(task)")}
    finally:
        conn.close()


def test_migrate_adds_columns_and_pads_times(tmp_path):
    db_path = tmp_path / "tasks.db"
    _legacy_db(db_path)
    migrate.migrate(db_path)

    assert {"image_url", "all_day", "created_at"} <= _columns(db_path)
    conn = sqlite3.connect(str(db_path))
    try:
        row = conn.execute("SELECT start_time, end_time, all_day FROM task").fetchone()
    finally:
        conn.close()
    assert row == ("09:00", "10:30", 0)


def test_migrate_is_idempotent(tmp_path):
    db_path = tmp_path / "tasks.db"
    _legacy_db(db_path)
    migrate.migrate(db_path)
    migrate.migrate(db_path)
    assert {"image_url", "all_day", "created_at"} <= _columns(db_path)

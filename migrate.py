"""
Migration helper for SQLite databases created before image URLs and all-day tasks.
Run:  python migrate.py [path/to/tasks.db]

What it does (idempotent):
- Add image_url VARCHAR(500) to task
- Add all_day BOOLEAN (default 0) to task and backfill NULLs
- Add created_at DATETIME to task
- Zero-pad legacy 'H:MM' start_time/end_time values to 'HH:MM'
"""
import sqlite3
import sys
from pathlib import Path

DB_PATH = Path("instance") / "tasks.db"


def column_exists(cursor, table, column):
    cursor.execute(f"PRAGMA table_info({table})")
    return any(row[1] == column for row in cursor.fetchall())


def add_column(cursor, table, column, col_type, default_sql=None):
    if column_exists(cursor, table, column):
        print(f"[skip] {column} already exists on {table}")
        return False
    cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}")
    if default_sql is not None:
        cursor.execute(f"UPDATE {table} SET {column} = {default_sql} WHERE {column} IS NULL")
    print(f"[add] {column} added to {table}")
    return True


def pad_time_values(cur):
    updated = 0
    for column in ("start_time", "end_time"):
        rows = cur.execute(f"SELECT id, {column} FROM task WHERE length({column}) = 4").fetchall()
        for task_id, value in rows:
            cur.execute(f"UPDATE task SET {column}=? WHERE id=?", (f"0{value}", task_id))
            updated += 1
    print(f"[update] zero-padded {updated} time values")
    return updated


def migrate(db_path=DB_PATH):
    conn = sqlite3.connect(str(db_path))
    cur = conn.cursor()
    try:
        add_column(cur, "task", "image_url", "VARCHAR(500)")
        add_column(cur, "task", "all_day", "BOOLEAN DEFAULT 0", default_sql="0")
        add_column(cur, "task", "created_at", "DATETIME")
        pad_time_values(cur)
        conn.commit()
        print("Migration complete.")
    finally:
        conn.close()


def main():
    migrate(Path(sys.argv[1]) if len(sys.argv) > 1 else DB_PATH)


if __name__ == "__main__":
    main()

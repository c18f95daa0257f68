"""Task data source for the calendar: one user's tasks, normalized for placement."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from calendar_layout import normalize_tasks
from models import Task

logger = logging.getLogger(__name__)


class TaskSourceError(Exception):
    """Raised when the tasks of a user cannot be fetched."""


def user_tasks_query(user_id):
    """Tasks of one user ordered by start date-time, then id."""
    return Task.query.filter_by(user_id=user_id).order_by(
        Task.start_date.asc(),
        Task.start_time.asc(),
        Task.id.asc()
    )


def fetch_tasks(user_id):
    """Return the user's tasks as SlotTasks ordered by start date-time."""
    try:
        records = user_tasks_query(user_id).all()
    except SQLAlchemyError as exc:
        logger.error("Failed to fetch tasks for user %s: %s", user_id, exc)
        raise TaskSourceError(str(exc)) from exc
    return normalize_tasks(records)

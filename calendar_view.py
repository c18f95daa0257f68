"""State of the weekly calendar view: loading -> ready | error."""
import logging

from calendar_layout import SUNDAY, build_week_grid, shift_week, week_dates, coerce_date
from services.task_source import TaskSourceError

logger = logging.getLogger(__name__)

LOADING = 'loading'
READY = 'ready'
ERROR = 'error'

FETCH_ERROR_MESSAGE = 'Could not load your tasks. Please try again later.'


class WeekView:
    """
    Holds the fetched task list and the week reference date.

    Tasks are fetched once per load; week navigation only moves the
    reference date and the grid is recomputed from memory.
    """

    def __init__(self, task_source, user_id, reference, week_start=SUNDAY):
        self.task_source = task_source
        self.user_id = user_id
        self.reference = coerce_date(reference)
        self.week_start = week_start
        self.state = LOADING
        self.tasks = []
        self.error = None

    def load(self):
        self.state = LOADING
        try:
            tasks = self.task_source(self.user_id)
        except TaskSourceError as exc:
            logger.warning("Task fetch failed for user %s: %s", self.user_id, exc)
            self.tasks = []
            self.error = FETCH_ERROR_MESSAGE
            self.state = ERROR
            return self
        self.tasks = list(tasks)
        self.error = None
        self.state = READY
        return self

    def switch_user(self, user_id):
        if user_id == self.user_id and self.state != LOADING:
            return self
        self.user_id = user_id
        return self.load()

    def next_week(self):
        return self._navigate(1)

    def previous_week(self):
        return self._navigate(-1)

    def _navigate(self, weeks):
        if self.is_ready:
            self.reference = shift_week(self.reference, weeks)
        return self

    @property
    def is_ready(self):
        return self.state == READY

    @property
    def is_error(self):
        return self.state == ERROR

    @property
    def dates(self):
        return week_dates(self.reference, self.week_start)

    def grid(self):
        if not self.is_ready:
            return None
        return build_week_grid(self.tasks, self.reference, self.week_start)

    def to_dict(self):
        data = {
            'state': self.state,
            'reference': self.reference.isoformat(),
            'dates': [d.isoformat() for d in self.dates],
        }
        if self.is_ready:
            data.update(self.grid().to_dict())
        elif self.is_error:
            data['error'] = self.error
        return data

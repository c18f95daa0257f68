"""
Weekly calendar placement.

Tasks are normalized once into offset-free date + time-of-day pairs
(``SlotTask``). The grid is 7 days x 24 hours; a non all-day task draws a
single box in the cell of its starting hour, sized by its duration, and an
all-day task draws one marker in the day's all-day lane.
"""
import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from services.validation_service import parse_bool, parse_day_value, parse_time_str

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7
SUNDAY = 0


@dataclass
class SlotTask:
    """Read-only view of a task as the placement code sees it."""
    id: Optional[int]
    title: str
    start_date: date
    start_time: time
    end_date: date
    end_time: time
    all_day: bool = False
    description: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def start(self) -> datetime:
        return datetime.combine(self.start_date, self.start_time)

    @property
    def end(self) -> datetime:
        return datetime.combine(self.end_date, self.end_time)

    @classmethod
    def from_record(cls, record):
        """
        Build a SlotTask from a Task model or its dict form.

        Raises ValueError when a date or time field cannot be parsed.
        """
        get = record.get if isinstance(record, dict) else (lambda key: getattr(record, key, None))
        return cls(
            id=get('id'),
            title=get('title') or '',
            start_date=coerce_date(get('start_date')),
            start_time=_coerce_time(get('start_time')),
            end_date=coerce_date(get('end_date')),
            end_time=_coerce_time(get('end_time')),
            all_day=parse_bool(get('all_day')),
            description=get('description'),
            image_url=get('image_url'),
        )


@dataclass
class Placement:
    task: SlotTask
    day: date
    hour: Optional[int]
    top: float
    height: float

    @property
    def all_day(self) -> bool:
        return self.hour is None

    def to_dict(self):
        return {
            'task_id': self.task.id,
            'title': self.task.title,
            'day': self.day.isoformat(),
            'hour': self.hour,
            'all_day': self.all_day,
            'top': self.top,
            'height': self.height,
        }


@dataclass
class WeekGrid:
    dates: List[date]
    all_day: Dict[date, List[Placement]] = field(default_factory=dict)
    cells: Dict[Tuple[date, int], List[Placement]] = field(default_factory=dict)

    def cell(self, day: date, hour: int) -> List[Placement]:
        return self.cells.get((day, hour), [])

    def lane(self, day: date) -> List[Placement]:
        return self.all_day.get(day, [])

    def placements(self) -> List[Placement]:
        result = []
        for day in self.dates:
            result.extend(self.lane(day))
            for hour in range(HOURS_PER_DAY):
                result.extend(self.cell(day, hour))
        return result

    def to_dict(self):
        return {
            'dates': [d.isoformat() for d in self.dates],
            'all_day': {d.isoformat(): [p.to_dict() for p in self.lane(d)] for d in self.dates},
            'placements': [p.to_dict() for p in self.placements() if not p.all_day],
        }


def coerce_date(value) -> date:
    day = parse_day_value(value) if value else None
    if day is None:
        raise ValueError(f"invalid date {value!r}")
    return day


def _coerce_time(value) -> time:
    parsed = parse_time_str(value)
    if parsed is None:
        raise ValueError(f"invalid time {value!r}")
    return parsed.replace(second=0, microsecond=0)


def normalize_tasks(records: Iterable) -> List[SlotTask]:
    """Normalize records in order, skipping any that cannot be placed."""
    tasks = []
    for record in records:
        try:
            task = record if isinstance(record, SlotTask) else SlotTask.from_record(record)
        except ValueError as exc:
            logger.warning("Skipping task %s from placement: %s", _record_id(record), exc)
            continue
        if not task.all_day and task.end <= task.start:
            logger.warning("Skipping task %s from placement: end is not after start", task.id)
            continue
        tasks.append(task)
    return tasks


def _record_id(record):
    if isinstance(record, dict):
        return record.get('id')
    return getattr(record, 'id', None)


# Week window

def day_of_week_index(d: date) -> int:
    """Day-of-week index with 0 = Sunday ... 6 = Saturday."""
    return (d.weekday() + 1) % DAYS_PER_WEEK


def week_start_date(reference, week_start: int = SUNDAY) -> date:
    reference = coerce_date(reference)
    offset = (day_of_week_index(reference) - week_start) % DAYS_PER_WEEK
    return reference - timedelta(days=offset)


def week_dates(reference, week_start: int = SUNDAY) -> List[date]:
    """Return the seven dates of the week containing ``reference``."""
    first = week_start_date(reference, week_start)
    return [first + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def shift_week(reference, weeks: int) -> date:
    return coerce_date(reference) + timedelta(days=DAYS_PER_WEEK * weeks)


def format_day_label(d: date) -> str:
    return d.strftime("%a, %m/%d")


def month_label(d: date) -> str:
    return calendar.month_name[d.month]


def hour_labels() -> List[str]:
    labels = []
    for hour in range(HOURS_PER_DAY):
        display = 12 if hour % 12 == 0 else hour % 12
        labels.append(f"{display}:00 {'AM' if hour < 12 else 'PM'}")
    return labels


# Membership and position

def slot_bounds(day: date, hour: int) -> Tuple[datetime, datetime]:
    slot_start = datetime.combine(day, time(hour=hour))
    return slot_start, slot_start + timedelta(hours=1)


def task_in_slot(task: SlotTask, day: date, hour: int) -> bool:
    if task.all_day:
        return task.start_date == day
    slot_start, slot_end = slot_bounds(day, hour)
    return task.start < slot_end and task.end > slot_start


def placement_for_slot(task: SlotTask, day: date, hour: int) -> Optional[Placement]:
    """
    Box geometry for a task that overlaps the (day, hour) cell.

    Only the task's starting cell draws; other overlapped cells return None.
    Height may exceed 100 and spills into the following cells.
    """
    if task.all_day:
        return None
    if task.start_date != day or task.start_time.hour != hour:
        return None
    duration_hours = (task.end - task.start).total_seconds() / 3600
    return Placement(
        task=task,
        day=day,
        hour=hour,
        top=task.start_time.minute / 60 * 100,
        height=duration_hours * 100,
    )


def all_day_placement(task: SlotTask, day: date) -> Optional[Placement]:
    if not task.all_day or task.start_date != day:
        return None
    return Placement(task=task, day=day, hour=None, top=0.0, height=100.0)


def slot_placements(tasks: Iterable[SlotTask], day: date, hour: int) -> List[Placement]:
    placements = []
    for task in tasks:
        if not task_in_slot(task, day, hour):
            continue
        placement = placement_for_slot(task, day, hour)
        if placement:
            placements.append(placement)
    return placements


def all_day_placements(tasks: Iterable[SlotTask], day: date) -> List[Placement]:
    placements = []
    for task in tasks:
        placement = all_day_placement(task, day)
        if placement:
            placements.append(placement)
    return placements


def build_week_grid(records: Iterable, reference, week_start: int = SUNDAY) -> WeekGrid:
    tasks = normalize_tasks(records)
    grid = WeekGrid(dates=week_dates(reference, week_start))
    for day in grid.dates:
        lane = all_day_placements(tasks, day)
        if lane:
            grid.all_day[day] = lane
        for hour in range(HOURS_PER_DAY):
            placements = slot_placements(tasks, day, hour)
            if placements:
                grid.cells[(day, hour)] = placements
    return grid

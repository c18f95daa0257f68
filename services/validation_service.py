import re
from datetime import date, datetime, time, timedelta


TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
IMAGE_URL_PATTERN = re.compile(r"^https?://.+")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6

ALL_DAY_START = "00:00"
ALL_DAY_END = "23:59"

REQUIRED_TASK_FIELDS = ("title", "start_date", "start_time", "end_date", "end_time")


class TaskValidationError(ValueError):
    """Raised when a task payload cannot be written."""


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ["1", "true", "yes", "on"]


def parse_time_str(val):
    """Parse a 24h 'HH:MM' string into a time object; return None on failure."""
    if isinstance(val, time):
        return val
    m = TIME_PATTERN.match(str(val or "").strip())
    if not m:
        return None
    return time(hour=int(m.group(1)), minute=int(m.group(2)))


def parse_day_value(raw):
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return datetime.strptime(str(raw).strip()[:10], "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def parse_week_start_day(raw, default=0):
    """WEEK_START_DAY setting: an integer 0-6 with 0 = Sunday."""
    if raw is None or not str(raw).strip():
        return default
    try:
        day = int(str(raw).strip())
    except ValueError:
        day = None
    if day is None or not 0 <= day <= 6:
        raise ValueError(f"WEEK_START_DAY must be an integer from 0 (Sunday) to 6 (Saturday), got {raw!r}")
    return day


def normalize_email(raw):
    return str(raw or "").strip().lower()


def is_valid_email(raw):
    return bool(EMAIL_PATTERN.match(normalize_email(raw)))


def is_valid_image_url(raw):
    return not raw or bool(IMAGE_URL_PATTERN.match(raw))


def _clean_text(raw):
    return (str(raw).strip() or None) if raw is not None else None


def default_task_times(now):
    """Form defaults: start at the next whole hour, end one hour later."""
    start = now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
    end = start + timedelta(hours=1)
    return {
        "start_date": start.date().isoformat(),
        "start_time": start.strftime("%H:%M"),
        "end_date": end.date().isoformat(),
        "end_time": end.strftime("%H:%M"),
    }


def validate_task_payload(data, partial=False, current=None):
    """
    Validate and clean a task create/update payload.

    With partial=True only the keys present in ``data`` are returned, but the
    end > start check runs against the merged result using ``current``
    (a dict of the stored task) for the missing fields.
    Raises TaskValidationError with a user-facing message.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TaskValidationError("Request body must be a JSON object")
    all_day = parse_bool(data.get("all_day"), default=bool((current or {}).get("all_day")))

    if all_day:
        if not data.get("start_time") and not partial:
            data = dict(data, start_time=ALL_DAY_START)
        if not data.get("end_time") and not partial:
            data = dict(data, end_time=ALL_DAY_END)

    if not partial:
        missing = [key for key in REQUIRED_TASK_FIELDS if not str(data.get(key) or "").strip()]
        if missing:
            raise TaskValidationError("Missing required fields")

    cleaned = {}
    if "title" in data:
        title = _clean_text(data.get("title"))
        if not title:
            raise TaskValidationError("Title is required")
        cleaned["title"] = title
    if "description" in data:
        cleaned["description"] = _clean_text(data.get("description"))
    if "image_url" in data:
        image_url = _clean_text(data.get("image_url"))
        if not is_valid_image_url(image_url):
            raise TaskValidationError("Invalid image URL format")
        cleaned["image_url"] = image_url
    for key in ("start_date", "end_date"):
        if key in data:
            day = parse_day_value(data.get(key))
            if not day:
                raise TaskValidationError(f"Invalid {key.replace('_', ' ')}")
            cleaned[key] = day
    for key in ("start_time", "end_time"):
        if key in data:
            parsed = parse_time_str(data.get(key))
            if not parsed:
                raise TaskValidationError(f"Invalid {key.replace('_', ' ')}, expected HH:MM")
            cleaned[key] = parsed.strftime("%H:%M")
    if "all_day" in data or not partial:
        cleaned["all_day"] = all_day

    merged = dict(current or {})
    merged.update(cleaned)
    start = datetime.combine(parse_day_value(merged.get("start_date")), parse_time_str(merged.get("start_time")))
    end = datetime.combine(parse_day_value(merged.get("end_date")), parse_time_str(merged.get("end_time")))
    if end <= start:
        raise TaskValidationError("End time must be after start time.")
    return cleaned

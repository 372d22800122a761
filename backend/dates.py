"""Calendar-day helpers. Datetimes are naive restaurant-local time."""
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from config import settings

# indicative seating times shown to guests, the day is booked as a whole
TIME_SLOTS = [
    "19:00",
    "19:30",
    "20:00",
    "20:30",
    "21:00",
    "21:30",
    "22:00",
]


def to_local_naive(value, tz=None):
    if value.tzinfo is None:
        return value
    zone = ZoneInfo(tz or settings.TIMEZONE)
    return value.astimezone(zone).replace(tzinfo=None)


def calendar_day(value):
    if isinstance(value, datetime):
        return to_local_naive(value).date()
    return value


def calendar_day_bounds(value):
    """Return midnight of the day and midnight of the following day (exclusive)."""
    day = calendar_day(value)
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def today(tz=None):
    return datetime.now(ZoneInfo(tz or settings.TIMEZONE)).date()


def parse_booking_date(text):
    # returns the naive local datetime and whether a time of day was given
    text = (text or "").strip()
    if not text:
        raise ValueError("Data non valida")
    if len(text) == 10:
        try:
            return datetime.combine(date.fromisoformat(text), time.min), False
        except ValueError:
            raise ValueError("Data non valida") from None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError("Data non valida") from None
    return to_local_naive(parsed), True


def parse_day(text):
    parsed, _ = parse_booking_date(text)
    return parsed.date()


def apply_reschedule(stored, new_value, has_time):
    if has_time:
        return new_value
    return datetime.combine(new_value.date(), stored.time())

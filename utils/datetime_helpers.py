"""Timezone-aware date/time helpers and the storage timestamp format."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from flask import current_app

from utils.errors import ValidationError

# Stored text format; lexical order equals chronological order
DATETIME_FORMAT = '%Y-%m-%dT%H:%M:%S'


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'Europe/Warsaw')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def get_now() -> datetime:
    """Get current datetime in the configured timezone."""
    return datetime.now(get_timezone())


def now_str() -> str:
    """Current local time in storage format."""
    return get_now().strftime(DATETIME_FORMAT)


def parse_datetime(value, field: str = 'date') -> datetime:
    """
    Parse an API date or datetime into a naive local datetime.

    Accepts 'YYYY-MM-DD', ISO-8601 datetimes (with 'Z' or an offset, which
    are converted to the configured timezone) and date/datetime objects.

    Raises:
        ValidationError: If the value is empty or not a valid date
    """
    if value is None or value == '':
        raise ValidationError(f'Missing field: {field}')

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f'Invalid date for {field}: {value}')
    else:
        raise ValidationError(f'Invalid date for {field}: {value}')

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(get_timezone()).replace(tzinfo=None)
    return parsed.replace(microsecond=0)


def to_storage(value, field: str = 'date') -> str:
    """Parse an API value and format it for storage."""
    return parse_datetime(value, field).strftime(DATETIME_FORMAT)


def utc_cutoff(days: int) -> str:
    """UTC instant `days` ago, in SQLite CURRENT_TIMESTAMP format."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)
    return cutoff.strftime('%Y-%m-%d %H:%M:%S')

# app/billing/dates.py

from datetime import date, datetime
from typing import Union
from zoneinfo import ZoneInfo

from app.config import BILLING_TIMEZONE
from app.errors import ValidationError

# Tried in order after the ISO parsers
_FALLBACK_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%d-%m-%Y", "%Y/%m/%d")


def _calendar_date(dt: datetime) -> date:
    if dt.tzinfo is not None and BILLING_TIMEZONE:
        dt = dt.astimezone(ZoneInfo(BILLING_TIMEZONE))
    return dt.date()


def normalize_billing_date(value: Union[str, date, datetime], field: str = "billing_date") -> date:
    """
    Reduce a billing date given in any accepted shape to a calendar date.

    Accepts date/datetime objects, ISO dates and timestamps (``Z`` or
    ``+hh:mm`` offsets included), US-style ``MM/DD/YYYY`` / ``MM/DD/YY``,
    ``DD-MM-YYYY`` and ``YYYY/MM/DD``. An aware timestamp keeps the date it
    names in its own offset unless a billing time zone is configured.
    """
    if isinstance(value, datetime):
        return _calendar_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be a non-empty date")

    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass

    iso = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return _calendar_date(datetime.fromisoformat(iso))
    except ValueError:
        pass

    # "01/15/2024 10:30" style: keep only the date part
    head = raw.split()[0]
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(head, fmt).date()
        except ValueError:
            continue

    raise ValidationError(f"{field} is not a recognizable date: {value!r}")

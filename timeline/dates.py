# timeline/dates.py
# Display dates for timeline events.

from datetime import datetime
import logging

log = logging.getLogger(__name__)

# Tried in order; the first that parses wins.
INPUT_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%m/%d/%Y",
)


def parse_event_date(value: str):
    """Return a date for ``value`` or None when it is not a recognised date."""
    text = value.strip()
    for fmt in INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        # ISO datetimes such as "2025-05-10T18:30:00Z"
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_event_date(value):
    """
    "2025-05-10" -> "May 10, 2025". Unparseable input comes back unchanged,
    and so does an already formatted date, so edits can resend what they got.
    """
    if not value:
        return value
    parsed = parse_event_date(str(value))
    if parsed is None:
        log.warning("Could not parse date %r; storing it as given.", value)
        return value
    return f"{parsed:%B} {parsed.day}, {parsed.year}"

"""Watermark timestamps and the cut of new records."""

from datetime import datetime, tzinfo
from typing import List, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import MalformedTimestamp
from .logging import get_logger
from .models import RecordSummary

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_TIMEZONE = "Asia/Tokyo"


def load_timezone(name: str) -> tzinfo:
    """Resolve a named timezone.

    Raises:
        ValueError: If the name is not a known IANA timezone
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def parse_timestamp(value: str, tz: tzinfo) -> datetime:
    """Parse a ``YYYY-MM-DD HH:MM:SS`` string as a wall-clock time in ``tz``.

    Raises:
        MalformedTimestamp: If the value is not a string in the expected pattern
    """
    if not isinstance(value, str):
        raise MalformedTimestamp(value, "not a string")
    try:
        naive = datetime.strptime(value.strip(), TIMESTAMP_FORMAT)
    except ValueError as e:
        raise MalformedTimestamp(value, str(e)) from e
    return naive.replace(tzinfo=tz)


def format_timestamp(moment: datetime, tz: tzinfo) -> str:
    """Render an aware datetime as a ``YYYY-MM-DD HH:MM:SS`` string in ``tz``."""
    return moment.astimezone(tz).strftime(TIMESTAMP_FORMAT)


def cut(summaries: Sequence[RecordSummary], watermark: datetime, tz: tzinfo) -> List[RecordSummary]:
    """Return the prefix of summaries played strictly after the watermark.

    Summaries must already be ordered by last activity time, newest first.
    The scan stops at the first entry played at or before the watermark.
    Every timestamp is parsed before the scan so a corrupt feed is rejected
    as a whole.

    Args:
        summaries: Record summaries, newest first
        watermark: Last processed timestamp
        tz: Timezone the summary timestamps are expressed in

    Returns:
        The new summaries, in source order

    Raises:
        MalformedTimestamp: If any summary carries an unparseable timestamp
    """
    played = [parse_timestamp(summary.last_activity_time, tz) for summary in summaries]
    for index, (summary, played_at) in enumerate(zip(summaries, played)):
        if played_at <= watermark:
            logger.debug(f"Cut at index {index}: {summary.title!r} played at {summary.last_activity_time}")
            return list(summaries[:index])
    return list(summaries)

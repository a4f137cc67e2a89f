# src/simpletodo/core/timeutil.py

from __future__ import annotations

from datetime import UTC, datetime

FILENAME_STAMP_FORMAT = "%Y%m%d_%H%M%S"
CSV_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_utc() -> datetime:
    return datetime.now(UTC)


def to_iso(dt: datetime) -> str:
    """
    Serialize an instant as ISO-8601 UTC with a Z suffix.

    Millisecond precision (".123Z") unless the instant carries sub-millisecond
    digits, which are then kept (".123456Z") so parse_iso() gives back the same
    instant. Naive datetimes are taken as local time.
    """
    timespec = "milliseconds" if dt.microsecond % 1000 == 0 else "microseconds"
    return dt.astimezone(UTC).isoformat(timespec=timespec).replace("+00:00", "Z")


def parse_iso(raw: str) -> datetime:
    """Parse an ISO-8601 string into an aware datetime (naive input = local time)."""
    dt = datetime.fromisoformat(raw.strip())
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def filename_stamp(dt: datetime) -> str:
    """yyyyMMdd_HHmmss in local time, used in backup/export file names."""
    return dt.astimezone().strftime(FILENAME_STAMP_FORMAT)


def format_csv_datetime(dt: datetime) -> str:
    return dt.astimezone().strftime(CSV_DATETIME_FORMAT)


def parse_csv_datetime(raw: str) -> datetime:
    """Inverse of format_csv_datetime; the wall-clock value is read as local time."""
    return datetime.strptime(raw.strip(), CSV_DATETIME_FORMAT).astimezone()

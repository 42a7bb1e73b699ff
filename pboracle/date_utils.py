"""
Date Utilities - Powerball Oracle
=================================

Centralized date handling: normalization of the many date formats used by
the result sources, the Eastern Time clock and the Powerball drawing
calendar (Monday, Wednesday and Saturday at 11 PM ET).
"""

import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

import pytz
from loguru import logger

DateLike = Union[str, date, datetime]

_MONTH_ALIASES = {"sept": "sep"}

# Numeric layouts, tried in order. Each entry maps regex groups to (year, month, day).
_NUMERIC_PATTERNS = [
    (re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b"), (3, 1, 2)),  # MM/DD/YYYY
    (re.compile(r"\b(\d{1,2})-(\d{1,2})-(\d{4})\b"), (3, 1, 2)),  # MM-DD-YYYY
    (re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})"), (1, 2, 3)),    # YYYY-MM-DD[THH:MM:SS]
    (re.compile(r"\b(\d{4})/(\d{1,2})/(\d{1,2})\b"), (1, 2, 3)),  # YYYY/MM/DD
]

# "May 31, 2025", "Sat, May 31, 2025", "Saturday, May 31 2025", "Sep. 3, 2025"
_MONTH_NAME_PATTERN = re.compile(r"\b([A-Za-z]{3,9})\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})\b")


class DateManager:
    """
    Central manager for every date operation in Powerball Oracle.

    - Standard timezone (America/New_York)
    - Canonical YYYY-MM-DD normalization
    - Drawing calendar calculations
    """

    POWERBALL_TIMEZONE = pytz.timezone('America/New_York')

    # Powerball drawing days (Monday=0, Wednesday=2, Saturday=5)
    DRAWING_DAYS = [0, 2, 5]

    # Drawing hour (11 PM ET)
    DRAWING_HOUR = 23

    CANONICAL_FORMAT = '%Y-%m-%d'

    @classmethod
    def get_current_et_time(cls) -> datetime:
        """
        Returns the current date and time in Eastern Time.

        Returns:
            datetime: timezone-aware current ET time
        """
        system_utc = datetime.now(pytz.UTC)
        current_time = system_utc.astimezone(cls.POWERBALL_TIMEZONE)
        logger.debug(f"ET time: {current_time.isoformat()}")
        return current_time

    @classmethod
    def convert_to_et(cls, dt: Union[datetime, str]) -> datetime:
        """
        Converts a datetime or ISO string to Eastern Time.

        Naive values are assumed to already be in ET.
        """
        if isinstance(dt, str):
            try:
                parsed_dt = datetime.fromisoformat(dt.replace('Z', '+00:00'))
            except ValueError as e:
                logger.warning(f"Failed to parse date string '{dt}': {e}")
                parsed_dt = datetime.strptime(dt[:10], cls.CANONICAL_FORMAT)
        else:
            parsed_dt = dt

        if parsed_dt.tzinfo is None:
            return cls.POWERBALL_TIMEZONE.localize(parsed_dt)
        return parsed_dt.astimezone(cls.POWERBALL_TIMEZONE)

    @classmethod
    def normalize_date(cls, value: Optional[DateLike]) -> Optional[str]:
        """
        Normalizes a date from any supported source format to YYYY-MM-DD.

        Supported inputs: date/datetime objects, MM/DD/YYYY, MM-DD-YYYY,
        YYYY-MM-DD (optionally followed by a time), YYYY/MM/DD and
        month-name forms such as "May 31, 2025" or "Saturday, May 31, 2025".

        Args:
            value: Raw date value from a source

        Returns:
            Optional[str]: Canonical date, or None when the value cannot be
            read as a real calendar date
        """
        if value is None:
            return None

        if isinstance(value, datetime):
            return value.strftime(cls.CANONICAL_FORMAT)
        if isinstance(value, date):
            return value.strftime(cls.CANONICAL_FORMAT)
        if not isinstance(value, str):
            logger.warning(f"Unsupported date value type: {type(value)}")
            return None

        text = value.strip()
        if not text:
            return None

        for pattern, (year_group, month_group, day_group) in _NUMERIC_PATTERNS:
            match = pattern.search(text)
            if match:
                return cls._build_date(
                    int(match.group(year_group)),
                    int(match.group(month_group)),
                    int(match.group(day_group)),
                    text,
                )

        match = _MONTH_NAME_PATTERN.search(text)
        if match:
            month_text = match.group(1).lower()
            month_text = _MONTH_ALIASES.get(month_text, month_text)
            for fmt in ('%B %d %Y', '%b %d %Y'):
                try:
                    parsed = datetime.strptime(f"{month_text} {match.group(2)} {match.group(3)}", fmt)
                    return parsed.strftime(cls.CANONICAL_FORMAT)
                except ValueError:
                    continue

        logger.warning(f"Unrecognized date format: '{text}'")
        return None

    @classmethod
    def _build_date(cls, year: int, month: int, day: int, original: str) -> Optional[str]:
        try:
            return date(year, month, day).strftime(cls.CANONICAL_FORMAT)
        except ValueError as e:
            logger.warning(f"Invalid calendar date '{original}': {e}")
            return None

    @classmethod
    def calculate_next_drawing_date(cls, reference_date: Optional[datetime] = None) -> str:
        """
        Calculates the next drawing date from a reference date.

        Args:
            reference_date: Reference datetime (defaults to now in ET)

        Returns:
            str: Next drawing date as YYYY-MM-DD
        """
        if reference_date is None:
            reference_date = cls.get_current_et_time()
        else:
            reference_date = cls.convert_to_et(reference_date)

        # A drawing day before the cutoff hour draws the same day
        if reference_date.weekday() in cls.DRAWING_DAYS and reference_date.hour < cls.DRAWING_HOUR:
            return reference_date.strftime(cls.CANONICAL_FORMAT)

        for i in range(1, 8):
            next_date = reference_date + timedelta(days=i)
            if next_date.weekday() in cls.DRAWING_DAYS:
                logger.debug(f"Next drawing date found: {next_date.date()} (in {i} days)")
                return next_date.strftime(cls.CANONICAL_FORMAT)

        fallback_date = (reference_date + timedelta(days=1)).strftime(cls.CANONICAL_FORMAT)
        logger.warning(f"Fallback to next day: {fallback_date}")
        return fallback_date

    @classmethod
    def is_valid_drawing_date(cls, date_str: str) -> bool:
        """
        Checks whether a YYYY-MM-DD date falls on a drawing day.
        """
        try:
            date_obj = datetime.strptime(date_str, cls.CANONICAL_FORMAT)
        except (TypeError, ValueError) as e:
            logger.error(f"Invalid date format for drawing validation: {date_str} - {e}")
            return False
        return date_obj.weekday() in cls.DRAWING_DAYS

    @classmethod
    def validate_date_format(cls, date_str: str) -> bool:
        """
        Validates that a value is a real calendar date in strict YYYY-MM-DD form.
        """
        if not isinstance(date_str, str) or len(date_str) != 10 or date_str.count('-') != 2:
            return False
        try:
            datetime.strptime(date_str, cls.CANONICAL_FORMAT)
            return True
        except ValueError:
            return False

    @classmethod
    def format_date_for_display(cls, date_str: str) -> str:
        """Formats YYYY-MM-DD as DD-Mon-YYYY; unreadable input is returned unchanged."""
        try:
            date_obj = datetime.strptime(date_str, cls.CANONICAL_FORMAT)
            return date_obj.strftime('%d-%b-%Y')
        except (TypeError, ValueError) as e:
            logger.error(f"Error formatting date for display: {date_str} - {e}")
            return date_str

    @classmethod
    def get_previous_day(cls, reference_date: Optional[datetime] = None) -> str:
        """Returns the day before the reference date (default: today in ET)."""
        if reference_date is None:
            reference_date = cls.get_current_et_time()
        return (reference_date - timedelta(days=1)).strftime(cls.CANONICAL_FORMAT)

    @classmethod
    def days_until_next_drawing(cls, reference_date: Optional[datetime] = None) -> int:
        """
        Calculates how many calendar days remain until the next drawing.
        """
        if reference_date is None:
            reference_date = cls.get_current_et_time()
        else:
            reference_date = cls.convert_to_et(reference_date)

        next_drawing = datetime.strptime(cls.calculate_next_drawing_date(reference_date), cls.CANONICAL_FORMAT)
        return (next_drawing.date() - reference_date.date()).days

    @classmethod
    def get_recent_drawing_dates(cls, count: int = 10, reference_date: Optional[datetime] = None) -> List[str]:
        """
        Returns the most recent past drawing dates in chronological order.

        Args:
            count: Number of dates to return
            reference_date: Reference datetime (defaults to now in ET)
        """
        if reference_date is None:
            reference_date = cls.get_current_et_time()

        drawing_dates = []
        check_date = reference_date - timedelta(days=1)

        while len(drawing_dates) < count:
            if check_date.weekday() in cls.DRAWING_DAYS:
                drawing_dates.append(check_date.strftime(cls.CANONICAL_FORMAT))
            check_date -= timedelta(days=1)

        drawing_dates.reverse()
        return drawing_dates


def day_of_year(moment: datetime) -> int:
    """Day of the year, 1-based."""
    return moment.timetuple().tm_yday


def julian_day(moment: datetime) -> int:
    """Julian Day Number of the calendar date of `moment`."""
    a = (14 - moment.month) // 12
    y = moment.year + 4800 - a
    m = moment.month + 12 * a - 3
    return moment.day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def get_current_et_time() -> datetime:
    """Convenience function for the current ET time."""
    return DateManager.get_current_et_time()


def normalize_date(value: Optional[DateLike]) -> Optional[str]:
    """Convenience function for canonical date normalization."""
    return DateManager.normalize_date(value)


def calculate_next_drawing_date(reference_date: Optional[datetime] = None) -> str:
    """Convenience function for the next drawing date."""
    return DateManager.calculate_next_drawing_date(reference_date)


def is_valid_drawing_date(date_str: str) -> bool:
    """Convenience function for drawing day validation."""
    return DateManager.is_valid_drawing_date(date_str)


def validate_date_format(date_str: str) -> bool:
    """Convenience function for date format validation."""
    return DateManager.validate_date_format(date_str)

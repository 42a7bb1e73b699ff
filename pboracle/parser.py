"""
Result parsers.

Every public parser turns a raw source payload into DrawRecord objects and
never raises: malformed input is logged and skipped. `build_draw_record` is
the single place where the number and date rules are enforced.
"""
import io
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd
from bs4 import BeautifulSoup
from loguru import logger

from pboracle.config import (
    DRAW_TOKEN_COUNT,
    NY_OPEN_DATA_LIMIT,
    POWERBALL_MAX,
    POWERBALL_MIN,
    WHITE_BALL_COUNT,
    WHITE_BALL_MAX,
    WHITE_BALL_MIN,
)
from pboracle.date_utils import is_valid_drawing_date, normalize_date, validate_date_format
from pboracle.models import DrawRecord
from pboracle.recovery import recover

_TOKEN_SEPARATORS = re.compile(r"[\s,;|\-]+")

_JACKPOT_AMOUNT = r"(\d[\d,]*(?:\.\d+)?)\s*(billion|million|thousand|[bmk])?(?![a-z])"
# A $-prefixed amount wins over bare numbers such as dates
_DOLLAR_JACKPOT_PATTERN = re.compile(r"\$\s*" + _JACKPOT_AMOUNT, re.IGNORECASE)
_JACKPOT_PATTERN = re.compile(_JACKPOT_AMOUNT, re.IGNORECASE)
_JACKPOT_SCALES = {
    "billion": 10 ** 9, "b": 10 ** 9,
    "million": 10 ** 6, "m": 10 ** 6,
    "thousand": 10 ** 3, "k": 10 ** 3,
}

# NY open data (data.ny.gov) Powerball view
NY_COLUMN_NAMES = {"date": "Draw Date", "numbers": "Winning Numbers", "multiplier": "Multiplier"}
NY_DEFAULT_INDEXES = {"date": 8, "numbers": 9, "multiplier": 10}

# NC Lottery CSV download
NC_DATE_COLUMN = "Date"
NC_WHITE_COLUMNS = ["Number 1", "Number 2", "Number 3", "Number 4", "Number 5"]
NC_POWERBALL_COLUMN = "Powerball"
NC_MULTIPLIER_COLUMN = "Power Play"

_POWERBALL_CLASSES = {"powerball", "red-ball", "bonus-ball"}


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _to_int(value: Any) -> Optional[int]:
    """Reads an integer from an int, an integral float or a numeric string."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not re.fullmatch(r"[+-]?\d+", text):
        return None
    return int(text)


def _clean_text(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    text = str(value).strip()
    return text or None


def parse_number_tokens(numbers: Union[str, Sequence[Any], None]) -> Optional[List[int]]:
    """
    Splits a draw number field into integers.

    Accepts "01 29 37 56 68 13", "1,29,37,56,68,13" or a sequence of ints or
    numeric strings. Returns None if any token is not an integer.
    """
    if numbers is None:
        return None
    if isinstance(numbers, str):
        raw_tokens = [token for token in _TOKEN_SEPARATORS.split(numbers.strip()) if token]
    elif isinstance(numbers, (list, tuple)):
        raw_tokens = list(numbers)
    else:
        return None

    tokens = []
    for raw in raw_tokens:
        number = _to_int(raw)
        if number is None:
            return None
        tokens.append(number)
    return tokens


def parse_jackpot_amount(text: Any) -> Optional[str]:
    """
    Extracts a whole-dollar jackpot amount as a digit string.

    "$1,234,567" -> "1234567", "$20 Million" -> "20000000",
    "$1.5 Billion" -> "1500000000". Returns None when no amount is present.
    """
    if _is_missing(text):
        return None
    text = str(text)
    match = _DOLLAR_JACKPOT_PATTERN.search(text) or _JACKPOT_PATTERN.search(text)
    if not match:
        return None
    try:
        amount = Decimal(match.group(1).replace(",", ""))
    except InvalidOperation:
        return None
    suffix = (match.group(2) or "").lower()
    amount *= _JACKPOT_SCALES.get(suffix, 1)
    return str(int(amount))


def build_draw_record(
    date_value: Any,
    numbers: Union[str, Sequence[Any], None],
    jackpot: Any = None,
    multiplier: Any = None,
    bonus: Any = None,
) -> Optional[DrawRecord]:
    """
    Builds a validated DrawRecord, or returns None if any rule is broken.

    Args:
        date_value: Draw date in any format `normalize_date` understands
        numbers: Six tokens (five white balls then the Powerball), or only
            the five white balls when `bonus` is given
        jackpot: Raw jackpot text, normalized with `parse_jackpot_amount`
        multiplier: Raw multiplier value
        bonus: Powerball given as a separate field

    Returns:
        Optional[DrawRecord]: The record, with white balls sorted ascending.
    """
    tokens = parse_number_tokens(numbers)
    if tokens is None:
        logger.warning(f"Skipping draw {date_value!r}: unreadable numbers {numbers!r}")
        return None

    if bonus is not None:
        bonus_number = _to_int(bonus)
        if bonus_number is None:
            logger.warning(f"Skipping draw {date_value!r}: unreadable Powerball {bonus!r}")
            return None
        tokens.append(bonus_number)

    if len(tokens) != DRAW_TOKEN_COUNT:
        logger.warning(
            f"Skipping draw {date_value!r}: expected {DRAW_TOKEN_COUNT} numbers, got {len(tokens)} ({numbers!r})"
        )
        return None

    white = tokens[:WHITE_BALL_COUNT]
    red = tokens[WHITE_BALL_COUNT]

    if any(n < WHITE_BALL_MIN or n > WHITE_BALL_MAX for n in white):
        logger.warning(f"Skipping draw {date_value!r}: white ball out of range {white}")
        return None
    if len(set(white)) != WHITE_BALL_COUNT:
        logger.warning(f"Skipping draw {date_value!r}: duplicate white balls {white}")
        return None
    if red < POWERBALL_MIN or red > POWERBALL_MAX:
        logger.warning(f"Skipping draw {date_value!r}: Powerball out of range {red}")
        return None

    draw_date = normalize_date(date_value)
    if draw_date is None:
        logger.warning(f"Skipping draw: unparseable date {date_value!r}")
        return None
    if not is_valid_drawing_date(draw_date):
        # Off-schedule drawings are accepted
        logger.warning(f"Draw {draw_date} is not on a regular drawing day")

    return DrawRecord(
        date=draw_date,
        white=tuple(sorted(white)),
        red=red,
        jackpot=parse_jackpot_amount(jackpot),
        multiplier=_clean_text(multiplier),
    )


def parse_stored_record(data: Any) -> Optional[DrawRecord]:
    """Rebuilds a DrawRecord from its persisted dict form."""
    if not isinstance(data, dict):
        logger.warning(f"Skipping stored record with unexpected type: {type(data)}")
        return None
    if not validate_date_format(data.get("date")):
        logger.warning(f"Skipping stored record with non-canonical date {data.get('date')!r}")
        return None
    return build_draw_record(
        data.get("date"),
        data.get("white"),
        jackpot=data.get("jackpot"),
        multiplier=data.get("multiplier"),
        bonus=data.get("red"),
    )


def _ny_column_indexes(columns: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    indexes = dict(NY_DEFAULT_INDEXES)
    by_name = {}
    for position, column in enumerate(columns):
        if isinstance(column, dict) and column.get("name"):
            by_name[str(column["name"]).strip().lower()] = position
    for key, name in NY_COLUMN_NAMES.items():
        if name.lower() in by_name:
            indexes[key] = by_name[name.lower()]
    return indexes


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if 0 <= index < len(row) else None


@recover(fallback=[])
def parse_ny_open_data(payload: Any, limit: int = NY_OPEN_DATA_LIMIT) -> List[DrawRecord]:
    """
    Parses the data.ny.gov Powerball rows.json payload.

    Rows arrive oldest first; the last `limit` rows (all rows when `limit`
    is 0) are returned newest first.
    """
    if not isinstance(payload, dict):
        logger.warning("NY open data payload is not a JSON object")
        return []

    rows = payload.get("data") or []
    columns = payload.get("meta", {}).get("view", {}).get("columns", [])
    indexes = _ny_column_indexes(columns)
    logger.info(f"NY open data returned {len(rows)} rows")

    records = []
    recent_rows = rows[-limit:] if limit > 0 else rows
    for row in reversed(recent_rows):
        if not isinstance(row, (list, tuple)):
            logger.warning(f"Skipping NY row with unexpected type: {type(row)}")
            continue
        draw_date = _cell(row, indexes["date"])
        winning_numbers = _cell(row, indexes["numbers"])
        if not draw_date or not winning_numbers:
            logger.warning("Skipping NY row with missing date or numbers")
            continue
        record = build_draw_record(
            draw_date,
            str(winning_numbers),
            multiplier=_cell(row, indexes["multiplier"]),
        )
        if record is not None:
            records.append(record)

    logger.info(f"Parsed {len(records)} valid drawings from NY open data")
    return records


@recover(fallback=[])
def parse_nc_lottery_csv(content: Union[bytes, str], limit: int = NY_OPEN_DATA_LIMIT) -> List[DrawRecord]:
    """Parses the NC Lottery Powerball CSV download, newest first."""
    buffer = io.BytesIO(content) if isinstance(content, bytes) else io.StringIO(content)
    df = pd.read_csv(buffer, dtype=str)
    df.columns = [str(column).strip() for column in df.columns]

    required = [NC_DATE_COLUMN, *NC_WHITE_COLUMNS, NC_POWERBALL_COLUMN]
    if not all(column in df.columns for column in required):
        logger.error(f"Downloaded CSV does not have the expected columns. Got: {df.columns.tolist()}")
        return []

    # Disclaimer lines at the bottom of the file have no valid date
    df = df[df[NC_DATE_COLUMN].str.strip().str.match(r"^\d{1,2}/\d{1,2}/\d{4}$", na=False)].copy()
    df["draw_date"] = pd.to_datetime(df[NC_DATE_COLUMN].str.strip(), format="%m/%d/%Y", errors="coerce")
    df = df.dropna(subset=["draw_date"])
    df.sort_values(by="draw_date", ascending=False, inplace=True)
    df.drop_duplicates(subset=["draw_date"], inplace=True)
    if limit > 0:
        df = df.head(limit)

    records = []
    for _, row in df.iterrows():
        record = build_draw_record(
            row["draw_date"].to_pydatetime(),
            [row[column] for column in NC_WHITE_COLUMNS],
            bonus=row[NC_POWERBALL_COLUMN],
            multiplier=row.get(NC_MULTIPLIER_COLUMN),
        )
        if record is not None:
            records.append(record)

    logger.info(f"Parsed {len(records)} valid drawings from NC Lottery CSV")
    return records


def _element_numbers(elements) -> List[int]:
    numbers = []
    for element in elements:
        number = _to_int(element.get_text(strip=True))
        if number is not None:
            numbers.append(number)
    return numbers


def _first_text(soup, selector: str) -> Optional[str]:
    element = soup.select_one(selector)
    return element.get_text(" ", strip=True) if element is not None else None


@recover(fallback=[])
def parse_powerball_official(html: str) -> List[DrawRecord]:
    """Parses the latest drawing from powerball.com previous results."""
    soup = BeautifulSoup(html, "html.parser")
    container = soup.select_one(".game-ball-group")
    if container is None:
        logger.warning("powerball.com: could not find result container")
        return []

    white = _element_numbers(container.select(".white-balls .item-powerball"))
    red = _element_numbers(container.select(".red-balls .item-powerball"))
    if len(white) != WHITE_BALL_COUNT or not red:
        logger.warning(f"powerball.com: expected 5 white balls and a Powerball, got {white} / {red}")
        return []

    record = build_draw_record(
        _first_text(soup, ".draw-date"),
        white,
        jackpot=_first_text(soup, ".current-jackpot .jackpot-amount"),
        bonus=red[0],
    )
    return [record] if record else []


@recover(fallback=[])
def parse_usamega(html: str) -> List[DrawRecord]:
    """Parses the first row of the usamega.com results table."""
    soup = BeautifulSoup(html, "html.parser")
    row = soup.select_one(".t_standard tbody tr")
    if row is None:
        logger.warning("usamega.com: could not find results table")
        return []

    cells = row.find_all("td")
    if not cells:
        logger.warning("usamega.com: results row has no cells")
        return []

    numbers = _element_numbers(row.select(".ball"))
    record = build_draw_record(
        cells[0].get_text(" ", strip=True),
        numbers,
        jackpot=cells[-1].get_text(" ", strip=True),
    )
    return [record] if record else []


@recover(fallback=[])
def parse_lottery_dot_com(html: str) -> List[DrawRecord]:
    """Parses the latest Powerball drawing from lottery.com."""
    soup = BeautifulSoup(html, "html.parser")

    white = []
    for element in soup.select(".results-ball, .result-ball, .ball"):
        if _POWERBALL_CLASSES.intersection(element.get("class") or []):
            continue
        number = _to_int(element.get_text(strip=True))
        if number is not None and WHITE_BALL_MIN <= number <= WHITE_BALL_MAX:
            white.append(number)

    red = None
    for element in soup.select(".powerball, .red-ball, .bonus-ball"):
        number = _to_int(element.get_text(strip=True))
        if number is not None and POWERBALL_MIN <= number <= POWERBALL_MAX:
            red = number
            break

    if len(white) < WHITE_BALL_COUNT or red is None:
        logger.warning("lottery.com: could not parse all numbers")
        return []

    record = build_draw_record(
        _first_text(soup, ".date, .draw-date, .result-date"),
        white[:WHITE_BALL_COUNT],
        bonus=red,
    )
    return [record] if record else []

"""
Result fetching.

Sources are tried in ranked order, one attempt each with a bounded timeout.
The first source whose payload parses into at least one drawing wins. When
every source fails the caller gets None and may fall back to
`generate_fallback_draw`.
"""
import functools
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests
from loguru import logger

from pboracle.config import (
    FALLBACK_SOURCE_NAME,
    FETCH_TIMEOUT_SECONDS,
    HEALTH_CHECK_TIMEOUT_SECONDS,
    NY_OPEN_DATA_LIMIT,
    POWERBALL_MAX,
    USER_AGENT,
    WHITE_BALL_COUNT,
    WHITE_BALL_MAX,
)
from pboracle.date_utils import DateManager
from pboracle.models import DrawRecord
from pboracle.parser import (
    parse_lottery_dot_com,
    parse_nc_lottery_csv,
    parse_ny_open_data,
    parse_powerball_official,
    parse_usamega,
)

NY_OPEN_DATA_URL = "https://data.ny.gov/api/views/d6yy-54nr/rows.json"
NC_LOTTERY_CSV_URL = "https://nclottery.com/powerball-download"
POWERBALL_OFFICIAL_URL = "https://www.powerball.com/previous-results"
USAMEGA_URL = "https://www.usamega.com/powerball-drawing.asp"
LOTTERY_DOT_COM_URL = "https://www.lottery.com/results/powerball"

FALLBACK_JACKPOT = "100000000"

REQUEST_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


@dataclass
class DataSource:
    """A remote endpoint plus the parser for its payload."""
    name: str
    url: str
    parser: Callable[[Any], List[DrawRecord]]
    response_format: str = "html"  # "json", "csv" or "html"


@dataclass
class FetchResult:
    source: str
    records: List[DrawRecord] = field(default_factory=list)
    is_fallback: bool = False

    @property
    def latest(self) -> Optional[DrawRecord]:
        return self.records[0] if self.records else None


def build_sources(names: Sequence[str], ny_limit: int = NY_OPEN_DATA_LIMIT) -> List[DataSource]:
    """
    Builds the ranked source list from source keys.

    Unknown keys are logged and ignored.
    """
    registry: Dict[str, DataSource] = {
        "ny_open_data": DataSource(
            "NY Open Data", NY_OPEN_DATA_URL,
            functools.partial(parse_ny_open_data, limit=ny_limit), "json",
        ),
        "nc_lottery_csv": DataSource(
            "NC Lottery CSV", NC_LOTTERY_CSV_URL,
            functools.partial(parse_nc_lottery_csv, limit=ny_limit), "csv",
        ),
        "powerball_official": DataSource("Powerball.com", POWERBALL_OFFICIAL_URL, parse_powerball_official),
        "usamega": DataSource("USA Mega", USAMEGA_URL, parse_usamega),
        "lottery_dot_com": DataSource("Lottery.com", LOTTERY_DOT_COM_URL, parse_lottery_dot_com),
    }

    sources = []
    for name in names:
        if name in registry:
            sources.append(registry[name])
        else:
            logger.warning(f"Unknown data source '{name}' ignored")
    return sources


def fetch_payload(source: DataSource, timeout: float = FETCH_TIMEOUT_SECONDS) -> Optional[Any]:
    """
    Downloads one source payload.

    Returns:
        The decoded JSON, raw CSV bytes or HTML text, or None on any network
        error, non-success status, timeout or undecodable JSON.
    """
    try:
        logger.info(f"Trying {source.name} ({source.url})...")
        response = requests.get(source.url, headers=REQUEST_HEADERS, allow_redirects=True, timeout=timeout)
        response.raise_for_status()
        if source.response_format == "json":
            return response.json()
        if source.response_format == "csv":
            return response.content
        return response.text
    except requests.exceptions.Timeout:
        logger.warning(f"Timed out after {timeout}s fetching {source.name}")
        return None
    except requests.exceptions.RequestException as e:
        logger.warning(f"Network error fetching {source.name}: {e}")
        return None
    except ValueError as e:
        logger.warning(f"Invalid JSON from {source.name}: {e}")
        return None


def fetch_from_sources(sources: Sequence[DataSource], timeout: float = FETCH_TIMEOUT_SECONDS) -> Optional[FetchResult]:
    """
    Tries each source in order and returns the first one that yields drawings.

    Returns:
        Optional[FetchResult]: None when every source failed.
    """
    for source in sources:
        payload = fetch_payload(source, timeout=timeout)
        if payload is None:
            continue

        records = source.parser(payload)
        if records:
            logger.info(f"Successfully fetched {len(records)} drawings from {source.name}")
            return FetchResult(source=source.name, records=list(records))

        logger.warning(f"{source.name} responded but no valid drawings could be parsed")

    logger.error(f"All {len(sources)} data sources failed")
    return None


def generate_fallback_draw(reference: Optional[datetime] = None) -> FetchResult:
    """
    Builds a deterministic synthetic drawing dated the day before `reference`.

    The numbers depend only on the date, so repeated calls on the same day
    agree. The result is tagged with the fallback source name so it is never
    mistaken for real data.
    """
    draw_date = DateManager.get_previous_day(reference)
    seed = sum(int(part) for part in draw_date.split("-"))

    white: List[int] = []
    for i in range(WHITE_BALL_COUNT):
        number = (seed * (i + 1) * 17 + i * 23) % WHITE_BALL_MAX + 1
        while number in white:
            number = number % WHITE_BALL_MAX + 1
        white.append(number)

    red = (seed * 7) % POWERBALL_MAX + 1

    record = DrawRecord(date=draw_date, white=tuple(sorted(white)), red=red, jackpot=FALLBACK_JACKPOT)
    logger.warning(f"Using fallback drawing for {draw_date}: {record.numbers_display()}")
    return FetchResult(source=FALLBACK_SOURCE_NAME, records=[record], is_fallback=True)


def check_source_health(
    sources: Sequence[DataSource], timeout: float = HEALTH_CHECK_TIMEOUT_SECONDS
) -> Dict[str, Dict[str, Any]]:
    """
    Sends a HEAD request to every source and records how it answered.

    Returns:
        Mapping of source name to {"status", "response_time_ms", "error"},
        where status is "healthy" or "error". Never raises on network errors.
    """
    health: Dict[str, Dict[str, Any]] = {}
    for source in sources:
        started = time.perf_counter()
        try:
            response = requests.head(source.url, headers=REQUEST_HEADERS, allow_redirects=True, timeout=timeout)
            error = None if response.ok else f"HTTP {response.status_code}"
        except requests.exceptions.RequestException as e:
            error = str(e) or type(e).__name__
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        health[source.name] = {
            "status": "healthy" if error is None else "error",
            "response_time_ms": elapsed_ms,
            "error": error,
        }
        if error:
            logger.warning(f"Health check failed for {source.name}: {error}")
        else:
            logger.info(f"{source.name} is healthy ({elapsed_ms} ms)")
    return health

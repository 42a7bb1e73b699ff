from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from loguru import logger

from pboracle.analysis import hot_and_cold_numbers
from pboracle.config import FALLBACK_SOURCE_NAME, FETCH_TIMEOUT_SECONDS, MAX_STORED_RESULTS
from pboracle.data_merger import merge_draws
from pboracle.fetcher import DataSource, FetchResult, fetch_from_sources, generate_fallback_draw
from pboracle.models import Dataset, DrawRecord
from pboracle.persistence_manager import PersistenceManager

STATUS_UPDATED = "updated"
STATUS_UP_TO_DATE = "up_to_date"
STATUS_FALLBACK = "fallback"
STATUS_FAILED = "failed"


@dataclass
class UpdateResult:
    """Outcome of one run of the update pipeline."""
    status: str
    dataset: Dataset = field(default_factory=Dataset)
    source: Optional[str] = None
    added: int = 0
    trimmed: int = 0
    latest: Optional[DrawRecord] = None
    is_fallback: bool = False

    @property
    def total(self) -> int:
        return len(self.dataset.results)

    @property
    def succeeded(self) -> bool:
        return self.status != STATUS_FAILED


def update_dataset_from_sources(
    manager: PersistenceManager,
    sources: Sequence[DataSource],
    max_results: int = MAX_STORED_RESULTS,
    timeout: float = FETCH_TIMEOUT_SECONDS,
    allow_fallback: bool = True,
    now: Optional[datetime] = None,
) -> UpdateResult:
    """
    Fetches the latest drawings, merges them into the stored dataset and
    saves it when something changed.

    When every source fails and `allow_fallback` is set, the synthetic
    fallback drawing is returned as `latest` but never written to the
    dataset.

    Raises:
        PersistenceError: if the dataset cannot be read or written.
    """
    logger.info("Starting data update process...")
    dataset = manager.load_dataset()

    fetched: Optional[FetchResult] = fetch_from_sources(sources, timeout=timeout)
    if fetched is None:
        if not allow_fallback:
            logger.error("Update process failed: no source produced any drawing and fallback is disabled.")
            return UpdateResult(status=STATUS_FAILED, dataset=dataset, latest=dataset.latest)

        fallback = generate_fallback_draw(now)
        logger.warning(f"All sources failed, serving synthetic drawing from {FALLBACK_SOURCE_NAME}")
        return UpdateResult(
            status=STATUS_FALLBACK,
            dataset=dataset,
            source=fallback.source,
            latest=fallback.latest,
            is_fallback=True,
        )

    # First candidate per date wins, so keep source order newest first
    candidates = sorted(fetched.records, key=lambda record: record.date, reverse=True)
    merged = merge_draws(dataset, candidates, max_results=max_results, now=now, source=fetched.source)

    if not merged.changed:
        logger.info(f"Data is up to date with {len(dataset.results)} results. Latest: {dataset.latest.date if dataset.latest else 'none'}")
        return UpdateResult(status=STATUS_UP_TO_DATE, dataset=dataset, source=fetched.source, latest=dataset.latest)

    manager.save_dataset(merged.dataset)
    _log_frequency_summary(merged.dataset)

    latest = merged.dataset.latest
    logger.info(f"Latest drawing: {latest.date} - {latest.numbers_display()}")
    return UpdateResult(
        status=STATUS_UPDATED,
        dataset=merged.dataset,
        source=fetched.source,
        added=merged.added,
        trimmed=merged.trimmed,
        latest=latest,
    )


def _log_frequency_summary(dataset: Dataset, count: int = 5) -> None:
    report = hot_and_cold_numbers(dataset, count)
    white = ", ".join(f"{number}({times})" for number, times in report["white"]["hot"])
    red = ", ".join(f"{number}({times})" for number, times in report["red"]["hot"])
    logger.info(f"Most frequent white balls: {white}")
    logger.info(f"Most frequent Powerballs: {red}")


def get_latest_winning_numbers(dataset: Dataset, update: Optional[UpdateResult] = None) -> Optional[DrawRecord]:
    """
    Returns the drawing to check plays against.

    The newest stored drawing wins; the update's drawing (possibly the
    synthetic fallback) is only used when nothing is stored.
    """
    if dataset.latest is not None:
        return dataset.latest
    if update is not None and update.latest is not None:
        if update.is_fallback:
            logger.warning(f"No stored drawings, using {update.source} numbers for comparison")
        return update.latest
    logger.warning("No winning numbers available")
    return None

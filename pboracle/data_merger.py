"""
Dataset merging.

New drawings are merged into the stored history by date: known dates are
skipped, the history stays newest first and bounded, and the frequency table
is recomputed from the retained results on every change so it can never
drift from them.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from loguru import logger

from pboracle.config import MAX_STORED_RESULTS
from pboracle.models import Dataset, DrawRecord, Frequency, empty_frequency
from pboracle.recovery import safe_execute


@dataclass
class MergeResult:
    dataset: Dataset
    added: int = 0
    trimmed: int = 0

    @property
    def changed(self) -> bool:
        return self.added > 0


def compute_frequency(results: Iterable[DrawRecord]) -> Frequency:
    """
    Tallies how often each number appears in `results`.

    Every white ball 1-69 and every Powerball 1-26 is present, with 0 for
    numbers that never appeared.
    """
    frequency = empty_frequency()
    white_counts = frequency["white"]
    red_counts = frequency["red"]

    for record in results:
        for number in record.white:
            if number in white_counts:
                white_counts[number] += 1
            else:
                logger.warning(f"Ignoring out-of-range white ball {number} in {record.date}")
        if record.red in red_counts:
            red_counts[record.red] += 1
        else:
            logger.warning(f"Ignoring out-of-range Powerball {record.red} in {record.date}")

    return frequency


def select_new_records(existing: Dataset, candidates: Sequence[DrawRecord]) -> List[DrawRecord]:
    """Returns the candidates whose date is not yet stored, first occurrence wins."""
    seen_dates = set(existing.dates)
    new_records = []
    for record in candidates:
        if record.date in seen_dates:
            logger.debug(f"Drawing {record.date} already stored, skipping")
            continue
        seen_dates.add(record.date)
        new_records.append(record)
    return new_records


def _merge_draws(
    existing: Dataset,
    candidates: Sequence[DrawRecord],
    max_results: int,
    now: Optional[datetime],
    source: Optional[str],
) -> MergeResult:
    new_records = select_new_records(existing, candidates)
    if not new_records:
        logger.info("No new drawings found. Data is up to date.")
        return MergeResult(dataset=existing)

    logger.info(f"Adding {len(new_records)} new drawings")
    combined = new_records + list(existing.results)
    # Back-filled drawings older than the stored head must not stay in front
    combined.sort(key=lambda record: record.date, reverse=True)

    trimmed = max(0, len(combined) - max_results)
    if trimmed:
        combined = combined[:max_results]
        logger.info(f"Trimmed {trimmed} old results, keeping last {max_results}")

    stamp = (now or datetime.now(timezone.utc)).isoformat()
    dataset = replace(
        existing,
        last_updated=stamp,
        results=combined,
        frequency=compute_frequency(combined),
        source=source if source is not None else existing.source,
    )
    return MergeResult(dataset=dataset, added=len(new_records), trimmed=trimmed)


def merge_draws(
    existing: Dataset,
    candidates: Sequence[DrawRecord],
    max_results: int = MAX_STORED_RESULTS,
    now: Optional[datetime] = None,
    source: Optional[str] = None,
) -> MergeResult:
    """
    Merges candidate drawings into `existing` and reports what changed.

    New candidates are combined with the stored results and the whole list
    is re-sorted newest first, so back-filled older drawings land in date
    order and truncation always drops the oldest. When no candidate
    is new the original dataset object is returned untouched so callers can
    skip persistence.

    Args:
        existing: Current dataset (not modified)
        candidates: Validated drawings in any order
        max_results: Maximum number of results retained
        now: Timestamp for `last_updated` (defaults to the current UTC time)
        source: Name of the source the candidates came from

    Returns:
        MergeResult: The resulting dataset and the added/trimmed counts.
    """
    return safe_execute(
        "merge_draws",
        _merge_draws,
        MergeResult(dataset=existing),
        existing,
        candidates,
        max_results,
        now,
        source,
    )


def merge(
    existing: Dataset,
    candidates: Sequence[DrawRecord],
    max_results: int = MAX_STORED_RESULTS,
    now: Optional[datetime] = None,
) -> Dataset:
    """Merges candidates into `existing` and returns the resulting dataset."""
    return merge_draws(existing, candidates, max_results=max_results, now=now).dataset


def rebuild_frequency(dataset: Dataset) -> Dataset:
    """Returns a copy of `dataset` whose frequency is recomputed from its results."""
    return replace(dataset, frequency=compute_frequency(dataset.results))

"""
Tests for Dataset Merging - Powerball Oracle
============================================

Date deduplication, ordering, the size cap and the frequency tally.
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from pboracle.data_merger import compute_frequency, merge, merge_draws, rebuild_frequency, select_new_records
from pboracle.models import Dataset, DrawRecord, empty_frequency

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _record(draw_date, white=(1, 2, 3, 4, 5), red=6):
    return DrawRecord(draw_date, tuple(white), red)


def _dataset(records):
    return Dataset(results=list(records), frequency=compute_frequency(records))


def _history(count, start=date(2020, 1, 1)):
    """`count` drawings with distinct dates, newest first."""
    records = []
    for i in range(count):
        white = tuple(sorted({(i % 65) + 1, (i % 65) + 2, (i % 65) + 3, (i % 65) + 4, (i % 65) + 5}))
        records.append(_record((start + timedelta(days=i)).isoformat(), white, (i % 26) + 1))
    records.reverse()
    return records


class TestComputeFrequency:
    """Test suite for the frequency tally."""

    def test_every_number_present(self):
        """All 69 white and 26 red numbers are keyed, zero when never drawn."""
        frequency = compute_frequency([])
        assert frequency == empty_frequency()
        assert sorted(frequency["white"]) == list(range(1, 70))
        assert sorted(frequency["red"]) == list(range(1, 27))

    def test_counts(self):
        """Counts reflect every drawing."""
        frequency = compute_frequency([
            _record("2025-05-28", (1, 2, 3, 4, 5), 6),
            _record("2025-05-24", (1, 10, 20, 30, 40), 6),
        ])
        assert frequency["white"][1] == 2
        assert frequency["white"][40] == 1
        assert frequency["white"][69] == 0
        assert frequency["red"][6] == 2
        assert sum(frequency["white"].values()) == 10
        assert sum(frequency["red"].values()) == 2

    def test_out_of_range_ignored(self):
        """Numbers outside the domains are not counted."""
        frequency = compute_frequency([_record("2025-05-28", (1, 2, 3, 4, 70), 27)])
        assert sum(frequency["white"].values()) == 4
        assert sum(frequency["red"].values()) == 0


class TestMerge:
    """Test suite for merging new drawings into the history."""

    def test_merge_example(self):
        """One new and one known drawing merged into a two-drawing history."""
        existing = _dataset([_record("2025-05-28"), _record("2025-05-24", (10, 20, 30, 40, 50), 26)])
        candidates = [_record("2025-05-31", (7, 8, 9, 10, 11), 12), _record("2025-05-28")]

        result = merge_draws(existing, candidates, now=NOW, source="NY Open Data")

        assert result.added == 1
        assert result.changed
        assert result.dataset.dates == ["2025-05-31", "2025-05-28", "2025-05-24"]
        assert result.dataset.last_updated == NOW.isoformat()
        assert result.dataset.source == "NY Open Data"
        assert result.dataset.frequency == compute_frequency(result.dataset.results)
        # The input is left untouched
        assert existing.dates == ["2025-05-28", "2025-05-24"]

    def test_no_new_records_returns_same_object(self):
        """Nothing novel means no change and no new timestamp."""
        existing = _dataset([_record("2025-05-28")])
        result = merge_draws(existing, [_record("2025-05-28", (9, 10, 11, 12, 13), 1)], now=NOW)

        assert result.dataset is existing
        assert result.added == 0
        assert not result.changed
        assert existing.last_updated is None

    def test_idempotent(self):
        """Merging the same candidates twice changes nothing the second time."""
        candidates = [_record("2025-05-31"), _record("2025-05-28")]
        once = merge(Dataset(), candidates, now=NOW)
        twice = merge(once, candidates, now=NOW + timedelta(days=1))

        assert twice is once
        assert twice.dates == ["2025-05-31", "2025-05-28"]

    def test_duplicate_candidates_first_wins(self):
        """A candidate repeating an earlier candidate's date is dropped."""
        first = _record("2025-05-31", (1, 2, 3, 4, 5), 6)
        second = _record("2025-05-31", (9, 10, 11, 12, 13), 14)

        assert select_new_records(Dataset(), [first, second]) == [first]

    def test_truncated_to_cap(self):
        """The oldest drawings are dropped beyond the cap and the tally follows."""
        existing = _dataset(_history(200))
        newest = _record("2030-01-01", (60, 61, 62, 63, 64), 25)

        result = merge_draws(existing, [newest], max_results=200, now=NOW)

        assert len(result.dataset.results) == 200
        assert result.trimmed == 1
        assert result.dataset.results[0] == newest
        assert existing.results[-1] not in result.dataset.results
        assert result.dataset.frequency == compute_frequency(result.dataset.results)
        assert sum(result.dataset.frequency["white"].values()) == 5 * 200
        assert sum(result.dataset.frequency["red"].values()) == 200

    def test_unique_dates_and_order(self):
        """Results stay date-unique and newest first across several merges."""
        dataset = Dataset()
        for batch in (_history(3), _history(5)[:3], _history(8)[:4]):
            dataset = merge(dataset, batch, max_results=6, now=NOW)

        assert len(dataset.dates) == len(set(dataset.dates))
        assert dataset.dates == sorted(dataset.dates, reverse=True)
        assert len(dataset.results) <= 6

    def test_backfilled_drawing_placed_in_date_order(self):
        """An older drawing arriving late is stored behind the newer ones."""
        existing = _dataset([_record("2025-05-31")])
        candidates = [_record("2025-06-02"), _record("2025-05-31"), _record("2025-05-28")]

        result = merge_draws(existing, candidates, now=NOW)

        assert result.added == 2
        assert result.dataset.dates == ["2025-06-02", "2025-05-31", "2025-05-28"]

    def test_backfill_at_cap_drops_the_oldest(self):
        """At the cap the back-filled oldest drawing is the one trimmed."""
        existing = _dataset(_history(200, start=date(2020, 1, 2)))
        candidates = [_record("2030-01-01", (60, 61, 62, 63, 64), 25), _record("2019-12-31")]

        result = merge_draws(existing, candidates, max_results=200, now=NOW)
        dates = result.dataset.dates

        assert len(dates) == 200
        assert dates == sorted(dates, reverse=True)
        assert "2019-12-31" not in dates
        assert "2020-01-02" not in dates
        assert "2020-01-03" in dates
        assert dates[0] == "2030-01-01"
        assert result.dataset.frequency == compute_frequency(result.dataset.results)

    @pytest.mark.parametrize("max_results", [1, 3, 10])
    def test_frequency_matches_results(self, max_results):
        """The tally always equals the tally of the retained results."""
        dataset = merge(Dataset(), _history(12), max_results=max_results, now=NOW)
        assert len(dataset.results) == max_results
        assert dataset.frequency == compute_frequency(dataset.results)

    def test_rebuild_frequency(self):
        """A stale tally is replaced by the real one."""
        dataset = Dataset(results=[_record("2025-05-28")])
        rebuilt = rebuild_frequency(dataset)

        assert rebuilt.frequency["white"][1] == 1
        assert dataset.frequency["white"][1] == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

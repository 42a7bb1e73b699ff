"""
Tests for the Numerology Generators - Powerball Oracle
======================================================

Every method must produce a legal play for any moment.
"""

import random
from datetime import datetime, timedelta

import pytest
from pboracle import numerology
from pboracle.data_merger import compute_frequency
from pboracle.models import Dataset, DrawRecord
from pboracle.numerology import (
    CALCULATION_METHODS,
    NumerologyResult,
    calculate_frequency_analysis,
    calculate_gematria,
    chinese_zodiac_index,
    ensure_valid_numbers,
    generate_all_methods,
    is_valid_play,
    lunar_phase,
    mayan_tzolkin,
)


def _moments():
    """Year boundaries, leap days and a spread of times between 2000 and 2100."""
    moments = [
        datetime(2000, 1, 1, 0, 0),
        datetime(2000, 2, 29, 12, 30),
        datetime(2012, 12, 21, 23, 59),
        datetime(2024, 2, 29, 6, 15),
        datetime(2024, 12, 31, 23, 0),
        datetime(2025, 1, 1, 0, 1),
        datetime(2099, 12, 31, 22, 45),
        datetime(2100, 3, 1, 11, 11),
    ]
    current = datetime(2000, 1, 3, 0, 0)
    while current.year < 2100:
        moments.append(current)
        current += timedelta(days=97, hours=5, minutes=17)
    return moments


def _dataset():
    results = [
        DrawRecord("2025-05-31", (1, 2, 3, 4, 5), 6),
        DrawRecord("2025-05-28", (1, 2, 3, 4, 10), 6),
        DrawRecord("2025-05-26", (1, 2, 3, 11, 12), 7),
    ]
    return Dataset(last_updated="2025-06-01T12:00:00+00:00", results=results, frequency=compute_frequency(results))


class TestEnsureValidNumbers:
    """Test suite for candidate reduction."""

    def test_folds_out_of_range_and_drops_duplicates(self):
        """Out-of-range values wrap into the range and later duplicates are ignored."""
        assert ensure_valid_numbers([70, 1, 1, 0, 5, 9, 12], 1, 69, 5) == [1, 5, 9, 12, 69]

    def test_takes_candidates_in_order(self):
        """Only the first `count` distinct candidates are used."""
        assert ensure_valid_numbers([50, 40, 30, 20, 10, 5], 1, 69, 5) == [10, 20, 30, 40, 50]

    def test_pads_with_seeded_random(self):
        """Short inputs are padded with unused random numbers."""
        first = ensure_valid_numbers([3, 3, 3], 1, 69, 5, rng=random.Random(42))
        second = ensure_valid_numbers([3, 3, 3], 1, 69, 5, rng=random.Random(42))

        assert first == second
        assert len(set(first)) == 5
        assert 3 in first
        assert first == sorted(first)

    def test_small_domain_filled_completely(self):
        """A domain exactly the requested size is filled."""
        assert ensure_valid_numbers([], 1, 5, 5, rng=random.Random(1)) == [1, 2, 3, 4, 5]


class TestCalendarHelpers:
    """Test suite for the calendar and astronomy helpers."""

    def test_lunar_phase_reference(self):
        """The reference new moon is phase 0, half a cycle later is phase 4."""
        assert lunar_phase(datetime(2024, 1, 11)) == 0
        assert lunar_phase(datetime(2024, 1, 26, 8)) == 4

    def test_lunar_phase_range(self):
        """Phases stay within 0-7, also before the reference date."""
        for moment in _moments():
            assert 0 <= lunar_phase(moment) <= 7

    def test_chinese_zodiac(self):
        """1924 and 2020 are both Rat years."""
        assert chinese_zodiac_index(1924) == 0
        assert chinese_zodiac_index(2020) == 0
        assert chinese_zodiac_index(2025) == 5

    def test_mayan_tzolkin(self):
        """The base date starts the 260-day count."""
        assert mayan_tzolkin(datetime(2012, 12, 21)) == 0
        assert mayan_tzolkin(datetime(2012, 12, 20)) == 259

    def test_gematria(self):
        """Letter values are summed, other characters ignored."""
        assert calculate_gematria("ab c!") == 6


class TestGenerators:
    """Test suite for the registered methods."""

    def test_registry(self):
        """Twenty-five uniquely named methods."""
        names = [method.name for method in CALCULATION_METHODS]
        assert len(names) == 25
        assert len(set(names)) == 25

    @pytest.mark.parametrize("method", CALCULATION_METHODS, ids=lambda method: method.name)
    def test_every_method_always_valid(self, method):
        """Five distinct ascending whites in 1-69 and a red in 1-26 for every moment."""
        for moment in _moments():
            result = method.func(moment)
            assert isinstance(result, NumerologyResult)
            assert result.name == method.name
            assert len(result.whites) == 5
            assert len(set(result.whites)) == 5
            assert result.whites == sorted(result.whites)
            assert all(1 <= n <= 69 for n in result.whites)
            assert 1 <= result.red <= 26

    def test_deterministic_for_same_moment(self):
        """Methods without padding depend only on the moment."""
        moment = datetime(2025, 6, 1, 10, 30)
        first = numerology.calculate_kabbalah_numbers(moment)
        second = numerology.calculate_kabbalah_numbers(moment)
        assert first == second

    def test_generate_all_methods(self):
        """One valid result per method in registry order."""
        results = generate_all_methods(datetime(2025, 6, 1, 10, 30), _dataset())

        assert [result.name for result in results] == [method.name for method in CALCULATION_METHODS]
        assert not any(result.has_error for result in results)
        assert all(is_valid_play(result.whites, result.red) for result in results)

    def test_failing_method_replaced_by_placeholder(self, monkeypatch):
        """A method that raises becomes an error placeholder and the rest still run."""
        def broken(now):
            raise ZeroDivisionError("boom")

        methods = list(CALCULATION_METHODS)
        methods[0] = methods[0]._replace(func=broken)
        monkeypatch.setattr(numerology, "CALCULATION_METHODS", methods)

        results = generate_all_methods(datetime(2025, 6, 1, 10, 30))

        assert len(results) == 25
        assert results[0].has_error
        assert results[0].whites == [1, 2, 3, 4, 5]
        assert results[0].red == 1
        assert not results[1].has_error

    def test_invalid_output_replaced_by_placeholder(self, monkeypatch):
        """A method returning an illegal play is replaced too."""
        def invalid(now):
            return NumerologyResult("Lunar Calculations", "mathematical", [1, 1, 2, 3, 4], 30)

        methods = list(CALCULATION_METHODS)
        methods[0] = methods[0]._replace(func=invalid)
        monkeypatch.setattr(numerology, "CALCULATION_METHODS", methods)

        results = generate_all_methods(datetime(2025, 6, 1, 10, 30))

        assert results[0].has_error
        assert results[0].note.startswith("Error - ")


class TestFrequencyAnalysis:
    """Test suite for the statistical method."""

    def test_no_data(self):
        """Without history the fixed no-data play is returned."""
        result = calculate_frequency_analysis(datetime(2025, 6, 2), None)

        assert result.whites == [6, 8, 20, 26, 32]
        assert result.red == 13
        assert result.note.startswith("Error - ")
        assert not result.has_error

    def test_empty_frequency(self):
        """History with an all-zero tally gives the fixed empty-frequency play."""
        dataset = Dataset(results=[DrawRecord("2025-05-31", (1, 2, 3, 4, 5), 6)])
        result = calculate_frequency_analysis(datetime(2025, 6, 2), dataset)

        assert result.whites == [1, 15, 30, 45, 60]
        assert result.red == 1

    def test_hot_numbers_on_even_days(self):
        """Even days pick the most drawn numbers, ties by lower number."""
        result = calculate_frequency_analysis(datetime(2025, 6, 2), _dataset())

        assert result.whites == [1, 2, 3, 4, 5]
        assert result.red == 6
        assert "Hot" in result.note
        assert "01-Jun-2025" in result.note

    def test_cold_numbers_on_odd_days(self):
        """Odd days pick the least drawn numbers."""
        result = calculate_frequency_analysis(datetime(2025, 6, 3), _dataset())

        assert result.whites == [65, 66, 67, 68, 69]
        assert result.red == 26
        assert "Cold" in result.note


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Tests for Result Parsers - Powerball Oracle
===========================================

Record validation, jackpot normalization and the source adapters.
"""

import pytest
from loguru import logger
from pboracle.models import DrawRecord
from pboracle.parser import (
    build_draw_record,
    parse_jackpot_amount,
    parse_lottery_dot_com,
    parse_nc_lottery_csv,
    parse_number_tokens,
    parse_ny_open_data,
    parse_powerball_official,
    parse_stored_record,
    parse_usamega,
)


def _ny_row(draw_date, numbers, multiplier="2"):
    return ["row-1", "00000000-0000", 0, 1700000000, None, 1700000000, None, "{ }", draw_date, numbers, multiplier]


class TestBuildDrawRecord:
    """Test suite for the single validation point of drawings."""

    def test_valid_record_is_sorted(self):
        """White balls are stored ascending and the date is canonical."""
        record = build_draw_record("05/31/2025", "68 01 37 29 56 13", jackpot="$20 Million", multiplier="3")

        assert record == DrawRecord(
            date="2025-05-31", white=(1, 29, 37, 56, 68), red=13, jackpot="20000000", multiplier="3"
        )

    def test_separate_bonus_ball(self):
        """The Powerball can be passed as a separate field."""
        record = build_draw_record("2025-05-31", [5, 10, 15, 20, 25], bonus="26")
        assert record.white == (5, 10, 15, 20, 25)
        assert record.red == 26

    @pytest.mark.parametrize("numbers", [
        "1 2 3 4 5",            # too few
        "1 2 3 4 5 6 7",        # too many
        "0 2 3 4 5 6",          # white below range
        "1 2 3 4 70 6",         # white above range
        "1 2 3 4 5 27",         # Powerball above range
        "1 2 3 4 5 0",          # Powerball below range
        "1 1 3 4 5 6",          # duplicate white
        "1 2 three 4 5 6",      # unreadable token
        None,
    ])
    def test_invalid_numbers_rejected(self, numbers):
        """Any rule violation drops the record."""
        assert build_draw_record("2025-05-31", numbers) is None

    def test_invalid_date_rejected(self):
        """An unreadable date drops the record instead of guessing one."""
        assert build_draw_record("not a date", "1 2 3 4 5 6") is None
        assert build_draw_record(None, "1 2 3 4 5 6") is None

    def test_duplicate_powerball_of_white_is_allowed(self):
        """The Powerball is drawn from a separate drum and may repeat a white ball."""
        record = build_draw_record("2025-05-31", "1 2 3 4 5 5")
        assert record is not None
        assert record.red == 5

    def test_off_schedule_date_kept_with_warning(self):
        """A Sunday drawing is accepted but flagged."""
        messages = []
        sink_id = logger.add(messages.append, level="WARNING", format="{message}")
        try:
            record = build_draw_record("2025-06-01", "1 2 3 4 5 6")
        finally:
            logger.remove(sink_id)

        assert record is not None
        assert record.date == "2025-06-01"
        assert any("not on a regular drawing day" in message for message in messages)

    def test_stored_record_round_trip(self):
        """Persisted dicts rebuild the same record."""
        record = build_draw_record("2025-05-31", "1 2 3 4 5 6", jackpot="1000", multiplier="2")
        assert parse_stored_record(record.to_dict()) == record
        assert parse_stored_record("not a dict") is None

    @pytest.mark.parametrize("stored_date", ["05/31/2025", "2025-5-31", "2025-02-30", None])
    def test_stored_record_requires_canonical_date(self, stored_date):
        """Stored drawings must carry a strict YYYY-MM-DD date."""
        assert parse_stored_record({"date": stored_date, "white": [1, 2, 3, 4, 5], "red": 6}) is None


class TestTokensAndJackpot:
    """Test suite for number tokens and jackpot text."""

    def test_number_token_separators(self):
        """Spaces, commas and dashes all separate tokens."""
        assert parse_number_tokens("01 29 37 56 68 13") == [1, 29, 37, 56, 68, 13]
        assert parse_number_tokens("1,29, 37-56|68 13") == [1, 29, 37, 56, 68, 13]
        assert parse_number_tokens(["1", 2, 3.0]) == [1, 2, 3]
        assert parse_number_tokens("1 2 x") is None

    @pytest.mark.parametrize("text,expected", [
        ("$1,234,567", "1234567"),
        ("$20 Million", "20000000"),
        ("$1.5 Billion", "1500000000"),
        ("Estimated Jackpot: $167 million", "167000000"),
        ("$50K", "50000"),
        ("Jackpot 05/31/2025: $20 Million", "20000000"),
        ("Draw 2 of 3: $1.5B", "1500000000"),
        ("1000", "1000"),
        ("Jackpot TBD", None),
        (None, None),
    ])
    def test_parse_jackpot_amount(self, text, expected):
        """Jackpot text becomes a digit string."""
        assert parse_jackpot_amount(text) == expected


class TestNyOpenData:
    """Test suite for the data.ny.gov adapter."""

    def test_rows_newest_first_with_limit(self):
        """The last `limit` rows are returned newest first."""
        payload = {
            "meta": {"view": {"columns": []}},
            "data": [
                _ny_row("2025-05-24T00:00:00", "01 02 03 04 05 06"),
                _ny_row("2025-05-26T00:00:00", "07 08 09 10 11 12"),
                _ny_row("2025-05-28T00:00:00", "13 14 15 16 17 18"),
            ],
        }
        records = parse_ny_open_data(payload, limit=2)

        assert [record.date for record in records] == ["2025-05-28", "2025-05-26"]
        assert records[0].white == (13, 14, 15, 16, 17)
        assert records[0].red == 18
        assert records[0].multiplier == "2"

    def test_columns_located_by_name(self):
        """Column positions from the metadata override the default indexes."""
        payload = {
            "meta": {"view": {"columns": [
                {"name": "Winning Numbers"}, {"name": "Draw Date"}, {"name": "Multiplier"},
            ]}},
            "data": [["10 20 30 40 50 26", "2025-05-31T00:00:00", "4"]],
        }
        records = parse_ny_open_data(payload)

        assert len(records) == 1
        assert records[0].date == "2025-05-31"
        assert records[0].multiplier == "4"

    def test_bad_rows_skipped(self):
        """A malformed row is dropped and its siblings survive."""
        payload = {
            "data": [
                _ny_row("2025-05-24T00:00:00", "01 02 03 04 05 06"),
                _ny_row("2025-05-26T00:00:00", "01 01 03 04 05 06"),
                "garbage",
                _ny_row(None, "01 02 03 04 05 06"),
            ],
        }
        records = parse_ny_open_data(payload)
        assert [record.date for record in records] == ["2025-05-24"]

    def test_never_raises(self):
        """Unexpected payloads yield an empty list."""
        assert parse_ny_open_data(None) == []
        assert parse_ny_open_data({"data": None}) == []
        assert parse_ny_open_data({"meta": "broken", "data": []}) == []


class TestNcLotteryCsv:
    """Test suite for the NC Lottery CSV adapter."""

    CSV = (
        "Date,Number 1,Number 2,Number 3,Number 4,Number 5,Powerball,Power Play\n"
        "05/28/2025,1,2,3,4,5,6,2\n"
        "05/31/2025,10,20,30,40,50,26,3\n"
        "05/31/2025,10,20,30,40,50,26,3\n"
        "This file is provided for informational purposes only,,,,,,,\n"
    )

    def test_parse_csv_newest_first(self):
        """Disclaimer rows and duplicate dates are dropped."""
        records = parse_nc_lottery_csv(self.CSV.encode("utf-8"))

        assert [record.date for record in records] == ["2025-05-31", "2025-05-28"]
        assert records[0].white == (10, 20, 30, 40, 50)
        assert records[0].red == 26
        assert records[0].multiplier == "3"

    def test_limit(self):
        """Only the newest `limit` drawings are kept."""
        records = parse_nc_lottery_csv(self.CSV, limit=1)
        assert [record.date for record in records] == ["2025-05-31"]

    def test_missing_columns(self):
        """A CSV without the expected columns yields nothing."""
        assert parse_nc_lottery_csv("a,b\n1,2\n") == []


class TestHtmlAdapters:
    """Test suite for the HTML page adapters."""

    def test_powerball_official(self):
        """powerball.com result card."""
        html = """
        <h5 class="card-title draw-date">Sat, May 31, 2025</h5>
        <div class="game-ball-group">
          <div class="white-balls">
            <div class="item-powerball">5</div><div class="item-powerball">11</div>
            <div class="item-powerball">34</div><div class="item-powerball">51</div>
            <div class="item-powerball">62</div>
          </div>
          <div class="red-balls"><div class="item-powerball">20</div></div>
        </div>
        <div class="current-jackpot"><span class="jackpot-amount">$167 Million</span></div>
        """
        records = parse_powerball_official(html)

        assert records == [DrawRecord("2025-05-31", (5, 11, 34, 51, 62), 20, jackpot="167000000")]

    def test_usamega(self):
        """usamega.com results table."""
        html = """
        <table class="t_standard"><tbody>
          <tr>
            <td>Sat, May 31, 2025</td>
            <td><span class="ball">5</span><span class="ball">11</span><span class="ball">34</span>
                <span class="ball">51</span><span class="ball">62</span><span class="ball">20</span></td>
            <td>$167 Million</td>
          </tr>
        </tbody></table>
        """
        records = parse_usamega(html)

        assert len(records) == 1
        assert records[0].date == "2025-05-31"
        assert records[0].red == 20
        assert records[0].jackpot == "167000000"

    def test_lottery_dot_com_excludes_powerball_from_whites(self):
        """The Powerball element is not counted as a white ball."""
        html = """
        <div class="result-date">May 31, 2025</div>
        <ul>
          <li class="results-ball">62</li><li class="results-ball">5</li><li class="results-ball">11</li>
          <li class="results-ball">34</li><li class="results-ball">51</li>
          <li class="results-ball powerball">20</li>
        </ul>
        """
        records = parse_lottery_dot_com(html)

        assert records == [DrawRecord("2025-05-31", (5, 11, 34, 51, 62), 20)]

    @pytest.mark.parametrize("adapter", [parse_powerball_official, parse_usamega, parse_lottery_dot_com])
    def test_unexpected_pages_yield_nothing(self, adapter):
        """Pages without results never raise."""
        assert adapter("<html><body>Maintenance</body></html>") == []
        assert adapter(None) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

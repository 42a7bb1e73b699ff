"""
Tests for the Pipeline Orchestrator - Powerball Oracle
======================================================
"""

from unittest.mock import patch

import pytest
from pboracle.data_merger import compute_frequency
from pboracle.fetcher import FetchResult
from pboracle.models import Dataset, DrawRecord
from pboracle.orchestrator import PipelineOrchestrator
from pboracle.persistence_manager import PersistenceManager

NEW = DrawRecord("2025-05-31", (5, 11, 34, 51, 62), 20)
OLD = DrawRecord("2025-05-28", (1, 2, 3, 4, 5), 6)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(
        "[paths]\n"
        f"dataset_file = {tmp_path / 'data' / 'lottery-data.json'}\n"
        f"log_file = {tmp_path / 'logs' / 'pboracle.log'}\n"
        "\n[fetch]\n"
        "timeout_seconds = 1\n"
        "allow_fallback = true\n"
        "sources = ny_open_data, usamega\n"
        "\n[dataset]\n"
        "max_results = 200\n"
        "\n[cli_defaults]\n"
        "top = 3\n",
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def orchestrator(config_path):
    return PipelineOrchestrator(config_path=config_path)


def _seed(orchestrator, records):
    orchestrator.persistence.save_dataset(Dataset(results=list(records), frequency=compute_frequency(records)))


class TestPipelineOrchestrator:
    """Test suite for the batch pipeline."""

    def test_configuration(self, orchestrator, tmp_path):
        """Paths and sources come from the configuration file."""
        assert orchestrator.persistence.dataset_file == str(tmp_path / "data" / "lottery-data.json")
        assert [source.name for source in orchestrator.sources] == ["NY Open Data", "USA Mega"]

    @patch("pboracle.loader.fetch_from_sources")
    def test_full_pipeline_success(self, mock_fetch, orchestrator):
        """All three steps run after a successful update."""
        _seed(orchestrator, [OLD])
        mock_fetch.return_value = FetchResult(source="NY Open Data", records=[NEW])

        result = orchestrator.run_full_pipeline()

        assert result["status"] == "success"
        assert result["summary"]["successful_steps"] == 3
        update = result["results"]["data_update"]["result"]
        assert update["update_status"] == "updated"
        assert update["new_drawings"] == 1
        predictions = result["results"]["predictions"]["result"]
        assert predictions["winning_draw"] == "2025-05-31"
        assert len(predictions["methods"]) == 25
        report = result["results"]["report"]["result"]
        assert report["total_draws"] == 2
        assert len(report["white"]["hot"]) == 3
        # Stored drawings are from 2025, so every recent scheduled date is absent
        assert len(report["missing_recent_drawings"]) == 10

    @patch("pboracle.loader.fetch_from_sources", return_value=None)
    def test_fallback_counts_as_success(self, mock_fetch, orchestrator):
        """A fallback drawing keeps the pipeline going and is flagged."""
        result = orchestrator.run_full_pipeline()

        assert result["status"] == "success"
        update = result["results"]["data_update"]["result"]
        assert update["is_fallback"] is True
        assert update["update_status"] == "fallback"
        assert not orchestrator.persistence.exists()
        assert result["results"]["predictions"]["result"]["winning_draw"] == update["latest_draw_date"]

    @patch("pboracle.loader.fetch_from_sources", return_value=None)
    def test_failure_without_fallback(self, mock_fetch, orchestrator):
        """Total source failure with fallback disabled fails the run."""
        orchestrator.config.set("fetch", "allow_fallback", "false")

        result = orchestrator.run_full_pipeline()

        assert result["status"] == "failed"
        assert "predictions" not in result["results"]
        assert result["summary"]["pipeline_health"] == "failed"

    @patch("pboracle.loader.fetch_from_sources")
    def test_corrupt_dataset_fails(self, mock_fetch, orchestrator):
        """An unreadable dataset fails the update step."""
        dataset_file = orchestrator.persistence.dataset_file
        PersistenceManager(dataset_file).save_dataset(Dataset())
        with open(dataset_file, "w", encoding="utf-8") as handle:
            handle.write("{broken")

        result = orchestrator.run_single_step("data")

        assert result["status"] == "failed"
        assert "traceback" in result

    def test_unknown_step(self, orchestrator):
        with pytest.raises(ValueError):
            orchestrator.run_single_step("train")

    @patch("pboracle.fetcher.requests.head")
    def test_status(self, mock_head, orchestrator):
        """Status reports the dataset and pings every configured source."""
        mock_head.return_value.ok = True
        _seed(orchestrator, [NEW, OLD])

        status = orchestrator.get_pipeline_status()

        assert status["dataset_exists"] is True
        assert status["dataset_records"] == 2
        assert status["latest_draw_date"] == "2025-05-31"
        assert "next_drawing_date" in status
        assert list(status["source_health"]) == ["NY Open Data", "USA Mega"]
        assert all(health["status"] == "healthy" for health in status["source_health"].values())
        assert mock_head.call_count == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

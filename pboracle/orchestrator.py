"""
Powerball Oracle Pipeline Orchestrator
======================================

Coordinates the batch pipeline steps:
1. Data Update
2. Predictions (numerology methods checked against the latest drawing)
3. Report (hot/cold numbers and the drawing calendar)
"""
import configparser
import os
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger

from pboracle.analysis import draws_per_weekday, hot_and_cold_numbers, missing_drawing_dates
from pboracle.checker import (
    calculate_win_statistics,
    check_methods_against_winning,
    find_notable_wins,
)
from pboracle.config import (
    ALLOW_FALLBACK,
    DEFAULT_CONFIG_PATH,
    FETCH_TIMEOUT_SECONDS,
    HEALTH_CHECK_TIMEOUT_SECONDS,
    LOG_FILE_PATH,
    MAX_STORED_RESULTS,
    NY_OPEN_DATA_LIMIT,
    get_source_names,
    load_config,
)
from pboracle.date_utils import DateManager
from pboracle.fetcher import DataSource, build_sources, check_source_health
from pboracle.loader import UpdateResult, get_latest_winning_numbers, update_dataset_from_sources
from pboracle.models import Dataset
from pboracle.numerology import generate_all_methods
from pboracle.persistence_manager import get_persistence_manager

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


class PipelineOrchestrator:
    """
    Main pipeline orchestrator that coordinates the update, prediction and
    report steps. Handles execution, error recovery, logging, and status
    tracking.
    """

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH, verbose: bool = False):
        """
        Initialize the pipeline orchestrator.

        Args:
            config_path: Path to configuration file
            verbose: Log DEBUG messages to the console
        """
        self.config_path = config_path
        self.verbose = verbose
        self.config = self._load_configuration()
        self.pipeline_status: Dict[str, Dict[str, Any]] = {}
        self.execution_start_time: Optional[datetime] = None
        self.dataset: Optional[Dataset] = None
        self.update_result: Optional[UpdateResult] = None

        self._setup_logging()

        self.persistence = get_persistence_manager(self.config)
        logger.info("Powerball Oracle Pipeline Orchestrator initialized")

    def _load_configuration(self) -> configparser.ConfigParser:
        """Load configuration from config.ini file."""
        return load_config(self.config_path)

    def _setup_logging(self):
        """Setup logging configuration."""
        try:
            # Remove default logger
            logger.remove()

            log_file = self.config.get("paths", "log_file", fallback=LOG_FILE_PATH)
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            logger.add(sys.stdout, format=CONSOLE_FORMAT, level="DEBUG" if self.verbose else "INFO")
            logger.add(
                log_file,
                format=FILE_FORMAT,
                level="DEBUG",
                rotation="10 MB",
                retention="30 days",
            )

            logger.info("Logging system initialized")

        except Exception as e:
            print(f"ERROR: Failed to setup logging: {e}")
            sys.exit(1)

    @property
    def sources(self) -> List[DataSource]:
        ny_limit = self.config.getint("fetch", "ny_limit", fallback=NY_OPEN_DATA_LIMIT)
        return build_sources(get_source_names(self.config), ny_limit=ny_limit)

    def _load_dataset(self) -> Dataset:
        if self.dataset is None:
            self.dataset = self.persistence.load_dataset()
        return self.dataset

    def run_full_pipeline(self) -> Dict[str, Any]:
        """
        Execute the complete pipeline.

        The data update must succeed (a fallback drawing counts as success);
        otherwise the remaining steps are skipped and the run fails.

        Returns:
            Dict with pipeline execution results and status
        """
        logger.info("=" * 60)
        logger.info("STARTING POWERBALL ORACLE PIPELINE EXECUTION")
        logger.info("=" * 60)

        self.execution_start_time = datetime.now()
        pipeline_results: Dict[str, Any] = {}

        logger.info("STEP 1/3: Data Update")
        pipeline_results["data_update"] = self._execute_step("data_update", self.step_data_update)

        if pipeline_results["data_update"]["status"] != "success":
            execution_time = datetime.now() - self.execution_start_time
            error_msg = f"Pipeline execution failed: {pipeline_results['data_update'].get('error')}"
            logger.error(error_msg)
            return {
                "status": "failed",
                "error": error_msg,
                "execution_time": str(execution_time),
                "results": pipeline_results,
                "summary": self._generate_pipeline_summary(pipeline_results, execution_time),
            }

        logger.info("STEP 2/3: Predictions")
        pipeline_results["predictions"] = self._execute_step("predictions", self.step_predictions)

        logger.info("STEP 3/3: Report")
        pipeline_results["report"] = self._execute_step("report", self.step_report)

        execution_time = datetime.now() - self.execution_start_time
        pipeline_summary = self._generate_pipeline_summary(pipeline_results, execution_time)

        logger.info("=" * 60)
        logger.info("POWERBALL ORACLE PIPELINE EXECUTION COMPLETED")
        logger.info(f"Total execution time: {execution_time}")
        logger.info("=" * 60)

        return {
            "status": "success",
            "execution_time": str(execution_time),
            "results": pipeline_results,
            "summary": pipeline_summary,
        }

    def _execute_step(self, step_name: str, step_function) -> Dict[str, Any]:
        """
        Execute a single pipeline step with error handling.

        Args:
            step_name: Name of the step being executed
            step_function: Function to execute

        Returns:
            Dict with step execution results
        """
        step_start_time = datetime.now()

        try:
            logger.info(f"Executing step: {step_name}")
            result = step_function()
            execution_time = datetime.now() - step_start_time

            self.pipeline_status[step_name] = {
                "status": "success",
                "execution_time": str(execution_time),
                "timestamp": datetime.now().isoformat(),
            }

            logger.info(f"✓ {step_name} completed successfully in {execution_time}")

            return {
                "status": "success",
                "execution_time": str(execution_time),
                "result": result,
                "timestamp": datetime.now().isoformat(),
            }

        except Exception as e:
            execution_time = datetime.now() - step_start_time
            error_msg = f"Step {step_name} failed: {str(e)}"

            self.pipeline_status[step_name] = {
                "status": "failed",
                "error": error_msg,
                "execution_time": str(execution_time),
                "timestamp": datetime.now().isoformat(),
            }

            logger.error(f"✗ {error_msg}")
            logger.error(f"Step traceback: {traceback.format_exc()}")

            return {
                "status": "failed",
                "error": error_msg,
                "execution_time": str(execution_time),
                "timestamp": datetime.now().isoformat(),
                "traceback": traceback.format_exc(),
            }

    def step_data_update(self) -> Dict[str, Any]:
        """
        Step 1: Data Update - fetch, merge and persist the latest drawings.

        Returns:
            Dict with data update results

        Raises:
            PersistenceError: if the dataset cannot be read or written.
            RuntimeError: if no source produced data and fallback is disabled.
        """
        result = update_dataset_from_sources(
            self.persistence,
            self.sources,
            max_results=self.config.getint("dataset", "max_results", fallback=MAX_STORED_RESULTS),
            timeout=self.config.getfloat("fetch", "timeout_seconds", fallback=FETCH_TIMEOUT_SECONDS),
            allow_fallback=self.config.getboolean("fetch", "allow_fallback", fallback=ALLOW_FALLBACK),
        )
        self.update_result = result
        self.dataset = result.dataset

        if not result.succeeded:
            raise RuntimeError("All data sources failed and fallback is disabled")

        summary = {
            "update_status": result.status,
            "source": result.source,
            "new_drawings": result.added,
            "trimmed_drawings": result.trimmed,
            "total_drawings": result.total,
            "latest_draw_date": result.latest.date if result.latest else None,
            "latest_numbers": result.latest.numbers_display() if result.latest else None,
            "is_fallback": result.is_fallback,
            "next_drawing_date": DateManager.calculate_next_drawing_date(),
        }
        logger.info(f"Data update completed: {result.status}, {result.added} new, {result.total} total")
        return summary

    def step_predictions(self) -> Dict[str, Any]:
        """
        Step 2: Predictions - run every numerology method and check it
        against the latest winning drawing.
        """
        dataset = self._load_dataset()
        method_results = generate_all_methods(dataset=dataset)
        winning = get_latest_winning_numbers(dataset, self.update_result)

        checked = check_methods_against_winning(method_results, winning)
        stats = calculate_win_statistics(checked)
        notable = find_notable_wins(checked)

        logger.info(
            f"Checked {stats['total_methods']} methods against "
            f"{winning.date if winning else 'no drawing'}: {stats['winning_methods']} winners"
        )
        return {
            "winning_draw": winning.date if winning else None,
            "methods": [
                {
                    "name": item.result.name,
                    "category": item.result.category,
                    "numbers": item.result.numbers_display(),
                    "tier": item.check.tier.value if item.check else None,
                    "status": item.status,
                    "has_error": item.result.has_error,
                }
                for item in checked
            ],
            "statistics": stats,
            "notable_wins": notable,
        }

    def step_report(self) -> Dict[str, Any]:
        """Step 3: Report - frequency summary and drawing calendar."""
        dataset = self._load_dataset()
        top = self.config.getint("cli_defaults", "top", fallback=5)
        report = hot_and_cold_numbers(dataset, top)
        report["draws_per_weekday"] = draws_per_weekday(dataset)
        report["missing_recent_drawings"] = missing_drawing_dates(dataset)
        report["next_drawing_date"] = DateManager.calculate_next_drawing_date()
        report["days_until_next_drawing"] = DateManager.days_until_next_drawing()
        logger.info(f"Report generated over {report['total_draws']} drawings")
        return report

    def _generate_pipeline_summary(self, pipeline_results: Dict[str, Any], execution_time) -> Dict[str, Any]:
        """Generate pipeline execution summary."""
        successful_steps = sum(1 for result in pipeline_results.values() if result.get("status") == "success")
        total_steps = len(pipeline_results)

        return {
            "total_steps": total_steps,
            "successful_steps": successful_steps,
            "failed_steps": total_steps - successful_steps,
            "success_rate": f"{(successful_steps / total_steps * 100):.1f}%" if total_steps > 0 else "0%",
            "total_execution_time": str(execution_time),
            "pipeline_health": "healthy" if successful_steps == total_steps else "degraded" if successful_steps > 0 else "failed",
        }

    def run_single_step(self, step_name: str) -> Dict[str, Any]:
        """
        Run a single pipeline step.

        Args:
            step_name: Name of the step to run

        Returns:
            Dict with step execution results
        """
        step_mapping = {
            "data": self.step_data_update,
            "data_update": self.step_data_update,
            "prediction": self.step_predictions,
            "predictions": self.step_predictions,
            "report": self.step_report,
            "reports": self.step_report,
        }

        if step_name not in step_mapping:
            available_steps = list(step_mapping.keys())
            raise ValueError(f"Unknown step '{step_name}'. Available steps: {available_steps}")

        logger.info(f"Running single step: {step_name}")
        self.execution_start_time = datetime.now()

        return self._execute_step(step_name, step_mapping[step_name])

    def get_pipeline_status(self) -> Dict[str, Any]:
        """
        Get current pipeline status, dataset information and source reachability.

        Returns:
            Dict with pipeline status information
        """
        status: Dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "configuration_file": self.config_path,
            "dataset_file": self.persistence.dataset_file,
            "dataset_exists": self.persistence.exists(),
            "next_drawing_date": DateManager.calculate_next_drawing_date(),
            "days_until_next_drawing": DateManager.days_until_next_drawing(),
            "recent_execution_status": self.pipeline_status,
        }
        status["source_health"] = check_source_health(
            self.sources,
            timeout=self.config.getfloat("fetch", "health_timeout_seconds", fallback=HEALTH_CHECK_TIMEOUT_SECONDS),
        )

        try:
            dataset = self._load_dataset()
            status.update({
                "dataset_records": len(dataset.results),
                "latest_draw_date": dataset.latest.date if dataset.latest else None,
                "last_updated": dataset.last_updated,
                "last_source": dataset.source,
            })
        except Exception as e:
            logger.warning(f"Could not read dataset statistics: {e}")
            status["dataset_error"] = str(e)

        return status

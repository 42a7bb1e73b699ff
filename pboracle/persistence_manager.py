import configparser
import json
import os
import tempfile
from typing import Optional

from loguru import logger

from pboracle.config import DATASET_FILE_PATH
from pboracle.data_merger import compute_frequency
from pboracle.models import Dataset
from pboracle.parser import parse_stored_record


class PersistenceError(Exception):
    """The dataset file could not be read or written."""


class PersistenceManager:
    """
    Loads and saves the dataset JSON document.

    Saves go to a temporary file in the same directory which then replaces
    the target, so a failed write never leaves a truncated dataset behind.
    """

    def __init__(self, dataset_file: str = DATASET_FILE_PATH):
        self.dataset_file = dataset_file
        logger.info(f"PersistenceManager initialized for dataset file: {dataset_file}")

    def exists(self) -> bool:
        return os.path.exists(self.dataset_file)

    def load_dataset(self) -> Dataset:
        """
        Loads the dataset from disk.

        A missing file yields an empty dataset. An unreadable or corrupt file
        raises PersistenceError rather than being silently replaced.
        Frequencies are recomputed from the loaded results.
        """
        if not self.exists():
            logger.info(f"No dataset at {self.dataset_file}, creating new lottery data structure")
            return Dataset()

        try:
            with open(self.dataset_file, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read dataset file '{self.dataset_file}': {e}")
            raise PersistenceError(f"Cannot read dataset file {self.dataset_file}: {e}") from e

        if not isinstance(document, dict):
            raise PersistenceError(f"Dataset file {self.dataset_file} does not contain a JSON object")

        results = []
        seen_dates = set()
        for raw in document.get("results") or []:
            record = parse_stored_record(raw)
            if record is None or record.date in seen_dates:
                continue
            seen_dates.add(record.date)
            results.append(record)

        # Keep the newest-first invariant even if the file was edited by hand
        results.sort(key=lambda record: record.date, reverse=True)

        dataset = Dataset(
            last_updated=document.get("last_updated"),
            results=results,
            frequency=compute_frequency(results),
            source=document.get("source"),
        )
        logger.info(f"Loaded existing data with {len(results)} results from {self.dataset_file}")
        return dataset

    def save_dataset(self, dataset: Dataset) -> None:
        """
        Writes the dataset atomically.

        Raises:
            PersistenceError: if the file cannot be written.
        """
        directory = os.path.dirname(os.path.abspath(self.dataset_file))
        temp_path: Optional[str] = None
        replaced = False
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=directory, prefix=".lottery-data-", suffix=".tmp", delete=False
            ) as f:
                temp_path = f.name
                json.dump(dataset.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.dataset_file)
            replaced = True
            logger.info(f"Successfully saved {len(dataset.results)} results to {self.dataset_file}")
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save dataset to '{self.dataset_file}': {e}")
            raise PersistenceError(f"Cannot write dataset file {self.dataset_file}: {e}") from e
        finally:
            if not replaced and temp_path and os.path.exists(temp_path):
                os.remove(temp_path)


def get_persistence_manager(config: Optional[configparser.ConfigParser] = None) -> PersistenceManager:
    """
    Factory function to get an instance of PersistenceManager.
    """
    if config is None:
        config = configparser.ConfigParser()
    dataset_file = config.get("paths", "dataset_file", fallback=DATASET_FILE_PATH)
    return PersistenceManager(dataset_file)

"""
Log Repository - manages loading and caching of LeafSpy logs.

Logs are read from CSV files in a folder and kept in memory once decoded.
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from leafspy.services.log_reader import LeafSpyLog, LeafSpyLogReader, LogReadError
from leafspy.utils.files import get_files


logger = logging.getLogger(__name__)


@dataclass
class LogSummary:
    """Lightweight summary of a log for listing."""

    id: str
    name: str
    source_file: str
    recorded_at: Optional[str]
    duration_s: float
    sample_count: int
    skipped_count: int
    vin: Optional[str]

    @classmethod
    def from_log(cls, log_id: str, log: LeafSpyLog) -> "LogSummary":
        return cls(
            id=log_id,
            name=log.name,
            source_file=str(log.source_file),
            recorded_at=log.recorded_at.isoformat() if log.recorded_at else None,
            duration_s=log.duration_s,
            sample_count=log.sample_count,
            skipped_count=len(log.skipped),
            vin=log.records[0].vin if log.records else None,
        )


class LogRepository:
    """
    Repository for LeafSpy logs.

    Indexes the CSV files of a folder and decodes them on first access.
    """

    def __init__(
        self,
        data_folder: Optional[Path] = None,
        reader: Optional[LeafSpyLogReader] = None,
    ):
        """
        Initialize the repository.

        Args:
            data_folder: Folder containing CSV files. If None, must be set later.
            reader: Log reader to use (defaults to environment settings)
        """
        self._data_folder: Optional[Path] = data_folder
        self._reader = reader or LeafSpyLogReader()
        self._cache: dict[str, LeafSpyLog] = {}
        self._index: dict[str, Path] = {}  # id -> filepath mapping

        if data_folder is not None:
            self.scan_folder(data_folder)

    @property
    def data_folder(self) -> Optional[Path]:
        return self._data_folder

    @property
    def log_count(self) -> int:
        return len(self._index)

    def has_log(self, log_id: str) -> bool:
        return log_id in self._index

    def set_data_folder(self, folder: Path) -> int:
        """
        Set the data folder and scan for CSV files.

        Returns:
            Number of CSV files found
        """
        self._data_folder = folder
        self._cache.clear()
        self._index.clear()
        return self.scan_folder(folder)

    def scan_folder(self, folder: Path) -> int:
        """
        Scan a folder for CSV files and add them to the index.

        Returns:
            Number of CSV files found
        """
        if not folder.exists():
            logger.warning(f"Data folder does not exist: {folder}")
            return 0

        count = 0
        for path in get_files(folder):
            if path.suffix.lower() == ".csv" and path.is_file():
                log_id = self._filepath_to_id(path)
                self._index[log_id] = path
                count += 1
                logger.debug(f"Indexed log: {log_id} -> {path.name}")

        logger.info(f"Scanned {count} CSV files in {folder}")
        return count

    def list_logs(self) -> list[LogSummary]:
        """
        List all readable logs, newest first.
        """
        summaries = []

        for log_id in self._index:
            log = self.get_log(log_id)
            if log is not None:
                summaries.append(LogSummary.from_log(log_id, log))

        summaries.sort(
            key=lambda s: (s.recorded_at or "", s.name),
            reverse=True,
        )
        return summaries

    def get_log(self, log_id: str) -> Optional[LeafSpyLog]:
        """
        Get a decoded log by ID.

        Returns:
            LeafSpyLog if found and readable, None otherwise
        """
        if log_id not in self._index:
            return None

        try:
            return self.require_log(log_id)
        except (LogReadError, OSError) as e:
            logger.error(f"Failed to load log {log_id}: {e}")
            return None

    def require_log(self, log_id: str) -> LeafSpyLog:
        """
        Get a decoded log by ID, reading and caching it on first access.

        Raises:
            KeyError: If the ID is not indexed
            LogReadError: If the reader aborts on an invalid row
        """
        if log_id in self._cache:
            return self._cache[log_id]

        filepath = self._index[log_id]
        log = self._reader.read(filepath)
        self._cache[log_id] = log
        logger.debug(f"Loaded and cached log: {log_id}")
        return log

    def clear_cache(self) -> None:
        """Clear the in-memory cache."""
        self._cache.clear()
        logger.info("Log cache cleared")

    def _filepath_to_id(self, filepath: Path) -> str:
        """Generate a consistent ID from filepath."""
        stat = filepath.stat()
        id_string = f"{filepath.name}_{stat.st_size}_{stat.st_mtime}"
        return hashlib.sha256(id_string.encode()).hexdigest()[:16]


# Global repository instance (set up by app initialization)
_repository: Optional[LogRepository] = None


def get_repository() -> LogRepository:
    """Get the global repository instance."""
    global _repository
    if _repository is None:
        _repository = LogRepository()
    return _repository


def init_repository(data_folder: Path) -> LogRepository:
    """Initialize the global repository with a data folder."""
    global _repository
    _repository = LogRepository(data_folder)
    return _repository

"""
LeafSpy CSV log reader.

Reads a LeafSpy log file row by row and decodes each row into a DataLine.
Rows that fail to decode are either skipped (and reported) or abort the
whole file, depending on the skip_invalid_rows setting.
"""

import csv
import dataclasses
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from leafspy.models.dataline import CELL_PAIR_COUNT, DataLine
from leafspy.services.decoder import HEADER, DecodeError, RowDecoder
from leafspy.utils.location import LocationParseError


logger = logging.getLogger(__name__)


SKIP_INVALID_ROWS = os.getenv("LEAFSPY_SKIP_INVALID_ROWS", "1") not in ("0", "false", "False")
DEFAULT_ENCODING = "utf-8-sig"


class LogReadError(Exception):
    """Raised when a row aborts reading of a log file."""

    def __init__(self, source_file: Path, line_number: int, reason: str):
        self.source_file = source_file
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"{source_file}:{line_number}: {reason}")


@dataclass
class SkippedRow:
    """A row that could not be decoded."""

    line_number: int  # 1-based line in the source file
    reason: str


@dataclass
class LeafSpyLog:
    """Decoded contents of one LeafSpy log file."""

    source_file: Path
    name: str
    records: list[DataLine] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)

    @property
    def sample_count(self) -> int:
        return len(self.records)

    @property
    def recorded_at(self) -> Optional[datetime]:
        if not self.records:
            return None
        return self.records[0].date_time

    @property
    def duration_s(self) -> float:
        if len(self.records) < 2:
            return 0.0
        return (self.records[-1].date_time - self.records[0].date_time).total_seconds()

    def to_frame(self) -> pd.DataFrame:
        """
        Tabulate the records, one row per sample.

        The location is split into latitude/longitude/elevation columns and
        the cell pair table into cp1..cp96 columns.
        """
        rows = [_flatten(record) for record in self.records]
        if not rows:
            return pd.DataFrame(columns=_frame_columns())
        return pd.DataFrame(rows, columns=_frame_columns())


def _frame_columns() -> list[str]:
    columns = []
    for f in dataclasses.fields(DataLine):
        if f.name == "location":
            columns.extend(["latitude", "longitude", "elevation"])
        elif f.name == "cell_pairs":
            columns.extend(f"cp{i}" for i in range(1, CELL_PAIR_COUNT + 1))
        else:
            columns.append(f.name)
    return columns


def _flatten(record: DataLine) -> dict:
    row = {}
    for f in dataclasses.fields(DataLine):
        value = getattr(record, f.name)
        if f.name == "location":
            row["latitude"] = value.latitude
            row["longitude"] = value.longitude
            row["elevation"] = value.elevation
        elif f.name == "cell_pairs":
            for index, mv in value.items():
                row[f"cp{index}"] = mv
        else:
            row[f.name] = value
    return row


def _is_header(fields: list[str]) -> bool:
    return bool(fields) and fields[0].strip() == HEADER[0]


class LeafSpyLogReader:
    """Reader for LeafSpy CSV log files."""

    def __init__(
        self,
        skip_invalid_rows: bool = SKIP_INVALID_ROWS,
        encoding: str = DEFAULT_ENCODING,
        decoder: Optional[RowDecoder] = None,
    ):
        self.skip_invalid_rows = skip_invalid_rows
        self.encoding = encoding
        self.decoder = decoder or RowDecoder()

    def read(self, filepath: Union[str, Path]) -> LeafSpyLog:
        """
        Read and decode a log file.

        Args:
            filepath: Path to the CSV file

        Returns:
            LeafSpyLog with the decoded records and any skipped rows

        Raises:
            LogReadError: If a row fails to decode and skipping is disabled, or
                the file is not valid UTF-8 CSV (regardless of skipping)
            OSError: If the file cannot be opened
        """
        filepath = Path(filepath)
        log = LeafSpyLog(source_file=filepath, name=filepath.stem)

        with open(filepath, "r", encoding=self.encoding, newline="") as f:
            reader = csv.reader(f)
            try:
                for fields in reader:
                    line_number = reader.line_num
                    if not fields:
                        continue
                    if _is_header(fields):
                        continue

                    try:
                        record = self.decoder.decode(fields)
                    except (DecodeError, LocationParseError) as e:
                        if not self.skip_invalid_rows:
                            raise LogReadError(filepath, line_number, str(e)) from e
                        logger.warning(f"Skipping {filepath.name} line {line_number}: {e}")
                        log.skipped.append(SkippedRow(line_number=line_number, reason=str(e)))
                        continue

                    log.records.append(record)
            except (UnicodeDecodeError, csv.Error) as e:
                # The file cannot be split into rows past this point
                raise LogReadError(filepath, reader.line_num, str(e)) from e

        logger.info(
            f"Read {log.sample_count} records from {filepath.name} "
            f"({len(log.skipped)} skipped)"
        )
        return log


def read_log_file(
    filepath: Union[str, Path],
    skip_invalid_rows: bool = SKIP_INVALID_ROWS,
) -> LeafSpyLog:
    """
    Read a LeafSpy log file with the default reader settings.
    """
    return LeafSpyLogReader(skip_invalid_rows=skip_invalid_rows).read(filepath)

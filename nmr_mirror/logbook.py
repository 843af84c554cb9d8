from __future__ import annotations

import csv
import io
from pathlib import Path

from .metadata import ExperimentRecord

LOG_SUFFIX = ".csv"


def log_path_for(records_dir: Path, instrument_id: str) -> Path:
    return records_dir / f"{instrument_id}{LOG_SUFFIX}"


def format_record(record: ExperimentRecord) -> str:
    """One log line. Plain values are comma-joined; values holding a comma or quote get CSV quoting."""
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerow(record.as_row())
    return buf.getvalue()


def append_record(record: ExperimentRecord, log_path: Path) -> None:
    line = format_record(record)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    # single write per record so concurrent runs append whole lines
    with log_path.open("a", encoding="utf-8", newline="") as f:
        f.write(line)

"""
Experiment metadata from Bruker-style experiment folders.

An experiment folder holds:
- ``acqu``          acquisition parameters (SOLVENT, NUC1, TD)
- ``pdata/1/proc``  processing parameters (FTSIZE)
- ``precom.output`` written just before acquisition starts
- ``fid``           raw data, written when acquisition finishes

A value that can't be read is left as None; the record is then incomplete and
is not written.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import astuple, dataclass, fields
from pathlib import Path
from typing import Callable, Optional, Union

from .console import get_logger

TIME_FORMAT = "%Y/%m/%d %H:%M:%S"

ACQU_FILE = "acqu"
PROC_FILE = Path("pdata", "1", "proc")
START_MARKER = "precom.output"
END_MARKER = "fid"


@dataclass(frozen=True)
class ExperimentRecord:
    folder_path: Optional[str]
    solvent: Optional[str]
    nucleus: Optional[str]
    acq_points: Optional[str]
    proc_points: Optional[str]
    instrument_id: Optional[str]
    start_time: Optional[str]
    end_time: Optional[str]

    def missing_fields(self) -> list[str]:
        return [f.name for f in fields(self) if not getattr(self, f.name)]

    @property
    def is_valid(self) -> bool:
        return not self.missing_fields()

    def as_row(self) -> list[str]:
        if not self.is_valid:
            raise ValueError(f"incomplete record, missing {', '.join(self.missing_fields())}")
        return [str(v) for v in astuple(self)]


def _read_lines(path: Path, logger: logging.Logger) -> list[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.debug("cannot read %s | %s", path, e)
        return []


def _find_line(lines: list[str], accept: Callable[[str], bool]) -> Optional[str]:
    for line in lines:
        if accept(line):
            return line
    return None


def _bracketed(line: Optional[str]) -> Optional[str]:
    if line is None:
        return None
    start = line.find("<")
    end = line.find(">", start + 1)
    if start < 0 or end < 0:
        return None
    return line[start + 1:end] or None


def _token(line: Optional[str], index: int) -> Optional[str]:
    if line is None:
        return None
    parts = line.split()
    try:
        return parts[index]
    except IndexError:
        return None


def parse_acqu(lines: list[str]) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """Return (solvent, nucleus, acquired points) from ``acqu`` lines."""
    solvent = _bracketed(_find_line(lines, lambda l: "SOLVENT=" in l))
    nucleus = _bracketed(_find_line(lines, lambda l: "NUC1=" in l))
    td = _token(_find_line(lines, lambda l: "TD=" in l and "NusTD=" not in l), -1)
    return solvent, nucleus, td


def parse_proc(lines: list[str]) -> Optional[str]:
    return _token(_find_line(lines, lambda l: "FTSIZE=" in l), 1)


def mtime_text(path: Path, logger: Optional[logging.Logger] = None) -> Optional[str]:
    try:
        return dt.datetime.fromtimestamp(path.stat().st_mtime).strftime(TIME_FORMAT)
    except (OSError, OverflowError, ValueError) as e:
        (logger or get_logger()).debug("cannot read time of %s | %s", path, e)
        return None


def extract(
    folder: Union[Path, str],
    instrument_id: str,
    logger: Optional[logging.Logger] = None,
) -> ExperimentRecord:
    logger = logger or get_logger()
    folder_path = Path(folder)

    solvent, nucleus, acq_points = parse_acqu(_read_lines(folder_path / ACQU_FILE, logger))
    proc_points = parse_proc(_read_lines(folder_path / PROC_FILE, logger))

    return ExperimentRecord(
        folder_path=str(folder) or None,
        solvent=solvent,
        nucleus=nucleus,
        acq_points=acq_points,
        proc_points=proc_points,
        instrument_id=instrument_id or None,
        start_time=mtime_text(folder_path / START_MARKER, logger),
        end_time=mtime_text(folder_path / END_MARKER, logger),
    )

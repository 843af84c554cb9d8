"""
Recency scanner.

The source share only bumps a folder's modification time when an entry is
created directly inside it. A new sample under an existing user folder leaves
the user folder looking stale, so exempt folders (configured names and
four-digit year folders) are always opened one level deeper than ordinary
ones.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Iterable, Iterator, Optional

from .console import get_logger, log_action

YEAR_PATTERN = re.compile(r"^\d{4}$")


@dataclass(frozen=True)
class DirectoryCandidate:
    relative_path: PurePath
    full_path: Path
    depth: int

    def dest_for(self, dest_root: Path) -> Path:
        return dest_root / self.relative_path


class ExemptionSet:
    def __init__(self, names: Iterable[str] = ()):
        self.names = frozenset(names)

    def is_exempt(self, name: str) -> bool:
        return name in self.names or bool(YEAR_PATTERN.match(name))

    def __repr__(self) -> str:
        return f"ExemptionSet({sorted(self.names)!r})"


def recency_threshold(days: float, now: Optional[dt.datetime] = None) -> float:
    """Return the cut-off as a POSIX timestamp. Computed once per run."""
    now = now or dt.datetime.now()
    return (now - dt.timedelta(days=days)).timestamp()


def _subdirs(path: Path, logger: logging.Logger) -> list[tuple[Path, float]]:
    """List child directories of ``path`` with their mtimes, skipping what can't be read."""
    try:
        entries = list(path.iterdir())
    except OSError as e:
        log_action(logger, "SKIP", f"unreadable {path} | {e}", level=logging.WARNING)
        return []

    found = []
    for entry in entries:
        try:
            if not entry.is_dir():
                continue
            found.append((entry, entry.stat().st_mtime))
        except OSError as e:
            log_action(logger, "SKIP", f"unreadable {entry} | {e}", level=logging.WARNING)
    return found


def _recent(children: list[tuple[Path, float]], threshold: float) -> Iterator[Path]:
    for child, mtime in children:
        if mtime >= threshold:
            yield child


def scan(
    source_root: Path,
    threshold: float,
    exemptions: ExemptionSet,
    logger: Optional[logging.Logger] = None,
) -> list[DirectoryCandidate]:
    logger = logger or get_logger()
    candidates: list[DirectoryCandidate] = []

    for top, m1 in _subdirs(source_root, logger):
        exempt = exemptions.is_exempt(top.name)
        if m1 < threshold and not exempt:
            continue

        for second in _recent(_subdirs(top, logger), threshold):
            if not exempt:
                candidates.append(
                    DirectoryCandidate(PurePath(top.name, second.name), second, depth=2)
                )
                continue

            for third in _recent(_subdirs(second, logger), threshold):
                candidates.append(
                    DirectoryCandidate(PurePath(top.name, second.name, third.name), third, depth=3)
                )

    logger.debug("SCAN | %s -> %d candidate(s)", source_root, len(candidates))
    return candidates

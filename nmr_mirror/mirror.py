"""
Copy dispatch through an external mirror tool.

The tool does the copying. This module only builds its command line, runs it
once per candidate folder and reads back which experiment folders it touched.
Each tool owns the parser for its own output format.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Sequence

from pathspec import PathSpec

from .config import DEFAULT_MARKER_PATTERNS, DEFAULT_RETRIES, DEFAULT_WAIT_SEC, UNC_PREFIX, WINDOWS_SEP
from .console import get_logger, log_action

# robocopy: anything at or above 8 means at least one copy failed
ROBOCOPY_FAILURE_CODE = 8


class MarkerFilter:
    """Matches copied paths that lie inside instrument post-processing output."""

    def __init__(self, patterns: Iterable[str] = DEFAULT_MARKER_PATTERNS, separator: str = WINDOWS_SEP):
        self.spec = PathSpec.from_lines("gitwildmatch", list(patterns))
        self.separator = separator

    def is_marked(self, path: str) -> bool:
        rel = path.replace(self.separator, "/").strip("/")
        return self.spec.match_file(rel + "/")


def parse_copied_dirs(
    lines: Iterable[str],
    prefix: str = UNC_PREFIX,
    separator: str = WINDOWS_SEP,
    markers: Optional[MarkerFilter] = None,
) -> list[str]:
    """
    Pull copied directory paths out of mirror tool output.

    A line names a copied file by its full path; the directory is the text from
    ``prefix`` up to the last ``separator``. Paths are returned once each, in
    the order first seen, without those matched by ``markers``.
    """
    seen: set[str] = set()
    copied: list[str] = []
    for line in lines:
        start = line.find(prefix)
        if start < 0:
            continue
        end = line.rfind(separator)
        if end < start + len(prefix):
            continue
        folder = line[start:end]
        if folder in seen:
            continue
        seen.add(folder)
        if markers is not None and markers.is_marked(folder):
            continue
        copied.append(folder)
    return copied


class MirrorTool(ABC):
    """Interface for an external directory mirroring program."""

    name = "mirror"

    @abstractmethod
    def build_command(self, src: Path, dst: Path) -> list[str]:
        ...

    @abstractmethod
    def parse_output(self, lines: Sequence[str]) -> list[str]:
        ...

    def failed(self, returncode: int) -> bool:
        return returncode != 0


class RobocopyTool(MirrorTool):
    name = "robocopy"

    def __init__(
        self,
        retries: int = DEFAULT_RETRIES,
        wait_sec: int = DEFAULT_WAIT_SEC,
        prefix: str = UNC_PREFIX,
        separator: str = WINDOWS_SEP,
        markers: Optional[MarkerFilter] = None,
        executable: str = "robocopy",
    ):
        self.retries = retries
        self.wait_sec = wait_sec
        self.prefix = prefix
        self.separator = separator
        self.markers = markers if markers is not None else MarkerFilter(separator=separator)
        self.executable = executable

    def build_command(self, src: Path, dst: Path) -> list[str]:
        # https://learn.microsoft.com/en-us/windows-server/administration/windows-commands/robocopy
        return [
            self.executable,
            str(src),
            str(dst),
            f"/R:{self.retries}",
            f"/W:{self.wait_sec}",
            "/TEE",
            "/E",
            "/XO",  # skip files not newer than the destination copy
            "/COPY:DAT",
            "/NP",
            "/NDL",
            "/NJH",
            "/NJS",
            "/XX",  # leave extra destination files alone
            "/FP",  # full path names, which the parser relies on
        ]

    def parse_output(self, lines: Sequence[str]) -> list[str]:
        return parse_copied_dirs(lines, prefix=self.prefix, separator=self.separator, markers=self.markers)

    def failed(self, returncode: int) -> bool:
        return returncode >= ROBOCOPY_FAILURE_CODE


def run_tool(tool: MirrorTool, src: Path, dst: Path) -> tuple[int, list[str]]:
    cmd = tool.build_command(src, dst)
    proc = subprocess.run(
        cmd,
        check=False,
        capture_output=True,
        text=True,
        errors="replace",
    )
    return proc.returncode, proc.stdout.splitlines()


def dispatch(
    tool: MirrorTool,
    src: Path,
    dst: Path,
    logger: Optional[logging.Logger] = None,
) -> list[str]:
    """Mirror ``src`` onto ``dst`` and return the experiment folders that were copied."""
    logger = logger or get_logger()
    log_action(logger, "COPY", f"{src} -> {dst}")

    try:
        returncode, lines = run_tool(tool, src, dst)
    except OSError as e:
        log_action(logger, "COPY", f"ERROR could not run {tool.name}: {src} | {e}", level=logging.ERROR)
        return []

    for line in lines:
        if line.strip():
            logger.debug("%s | %s", tool.name, line.rstrip())

    copied = tool.parse_output(lines)
    if tool.failed(returncode):
        log_action(
            logger,
            "COPY",
            f"{tool.name} exit code {returncode} for {src} ({len(copied)} folder(s) reported)",
            level=logging.WARNING,
        )

    for folder in copied:
        log_action(logger, "COPIED", folder)
    return copied

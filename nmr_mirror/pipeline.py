from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import MachineConfig, SourcePair
from .console import get_logger, log_action
from .logbook import append_record
from .metadata import extract
from .mirror import MirrorTool, dispatch
from .scanner import ExemptionSet, scan


@dataclass
class PairSummary:
    candidates: int = 0
    copied: int = 0
    written: int = 0
    dropped: int = 0
    failed: int = 0

    def add(self, other: "PairSummary") -> None:
        self.candidates += other.candidates
        self.copied += other.copied
        self.written += other.written
        self.dropped += other.dropped
        self.failed += other.failed


def process_folder(
    folder: str,
    instrument_id: str,
    log_path: Path,
    logger: logging.Logger,
) -> bool:
    """Extract and log one copied experiment folder. Returns True if a line was written."""
    record = extract(folder, instrument_id, logger)
    missing = record.missing_fields()
    if missing:
        log_action(logger, "DROP", f"{folder} (missing: {', '.join(missing)})", level=logging.WARNING)
        return False

    append_record(record, log_path)
    log_action(logger, "RECORD", f"{folder} -> {log_path.name}")
    return True


def process_pair(
    pair: SourcePair,
    threshold: float,
    exemptions: ExemptionSet,
    tool: MirrorTool,
    instrument_id: str,
    log_path: Path,
    logger: Optional[logging.Logger] = None,
) -> PairSummary:
    logger = logger or get_logger()
    summary = PairSummary()

    log_action(logger, "SCAN", str(pair.source_root))
    candidates = scan(pair.source_root, threshold, exemptions, logger)
    summary.candidates = len(candidates)

    for candidate in candidates:
        dst = candidate.dest_for(pair.dest_root)
        log_action(logger, "CANDIDATE", f"depth {candidate.depth} {candidate.relative_path}")
        try:
            copied = dispatch(tool, candidate.full_path, dst, logger)
        except Exception as e:
            log_action(logger, "COPY", f"candidate processing error: {candidate.full_path} | {e}", level=logging.ERROR)
            continue

        summary.copied += len(copied)
        for folder in copied:
            try:
                written = process_folder(folder, instrument_id, log_path, logger)
            except Exception as e:
                # copied but not logged; robocopy /XO won't report it again
                log_action(logger, "RECORD", f"ERROR not logged: {folder} | {e}", level=logging.ERROR)
                summary.failed += 1
                continue
            if written:
                summary.written += 1
            else:
                summary.dropped += 1

    logger.info(
        "PAIR | %s -> %s | candidates=%d copied=%d written=%d dropped=%d failed=%d",
        pair.source_root,
        pair.dest_root,
        summary.candidates,
        summary.copied,
        summary.written,
        summary.dropped,
        summary.failed,
    )
    return summary


def run_machine(
    machine: MachineConfig,
    threshold: float,
    exemptions: ExemptionSet,
    tool: MirrorTool,
    log_path: Path,
    logger: Optional[logging.Logger] = None,
) -> PairSummary:
    logger = logger or get_logger()
    total = PairSummary()
    for pair in machine.pairs:
        total.add(process_pair(pair, threshold, exemptions, tool, machine.instrument_id, log_path, logger))
    return total

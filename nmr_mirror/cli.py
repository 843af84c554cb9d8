from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from .config import CONFIG_PATH, ConfigError, build_config, load_config_file
from .console import log_action, setup_logger
from .logbook import log_path_for
from .mirror import MarkerFilter, RobocopyTool
from .pipeline import run_machine
from .scanner import ExemptionSet, recency_threshold


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Mirror recently changed experiment folders and log their acquisition metadata."
    )
    p.add_argument("machine", help="Machine identifier from the config file.")
    p.add_argument("--config", type=str, default=None, help=f"Config file (default {CONFIG_PATH}).")
    p.add_argument("--days", type=float, default=None, help="Folders older than this many days are skipped.")
    p.add_argument("--log-dir", type=str, default=None, help="Directory for run log files.")
    p.add_argument("-v", "--verbose", action="store_true", help="Show the mirror tool's own output (it is captured, not printed, otherwise).")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    started = time.monotonic()

    config_path = Path(args.config).expanduser() if args.config else CONFIG_PATH
    log_dir = Path(args.log_dir).expanduser() if args.log_dir else None

    try:
        cfg = build_config(load_config_file(config_path), threshold_days=args.days, log_dir=log_dir)
        logger = setup_logger(cfg.log_dir, level=logging.DEBUG if args.verbose else logging.INFO)
        machine = cfg.machine(args.machine)
    except ConfigError as e:
        logger = setup_logger(log_dir or Path("."))
        logger.error("Config error: %s", e)
        return 2

    threshold = recency_threshold(cfg.threshold_days)
    exemptions = ExemptionSet(cfg.exemptions)
    tool = RobocopyTool(
        retries=cfg.robocopy.retries,
        wait_sec=cfg.robocopy.wait_sec,
        prefix=cfg.robocopy.prefix,
        separator=cfg.robocopy.separator,
        markers=MarkerFilter(cfg.marker_patterns, separator=cfg.robocopy.separator),
    )
    records = log_path_for(cfg.records_dir, machine.instrument_id)

    logger.info("Machine: %s (%s)", machine.name, machine.instrument_id)
    logger.info("Threshold: %.1f day(s) | Exemptions: %s", cfg.threshold_days, ", ".join(sorted(exemptions.names)) or "-")
    logger.info("Records: %s", records)

    summary = run_machine(machine, threshold, exemptions, tool, records, logger)

    elapsed = time.monotonic() - started
    log_action(
        logger,
        "DONE",
        f"{summary.written} record(s) written, {summary.dropped} dropped, {summary.failed} failed, "
        f"{summary.copied} folder(s) copied from {summary.candidates} candidate(s) in {elapsed:.1f}s",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

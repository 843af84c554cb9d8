from __future__ import annotations

import logging
from typing import Optional

from nmr_mirror.console import ACTION_COLORS, RED, RESET, ActionFormatter, log_action, setup_logger


def make_record(msg: str, level: int = logging.INFO, action: Optional[str] = None) -> logging.LogRecord:
    record = logging.LogRecord("t", level, __file__, 1, msg, None, None)
    if action:
        record.action = action
    return record


def test_plain_formatter_leaves_message_alone():
    fmt = ActionFormatter(use_color=False, fmt="%(message)s")
    assert fmt.format(make_record("COPY | /a/b", action="COPY")) == "COPY | /a/b"


def test_colors_action_tag_only():
    fmt = ActionFormatter(use_color=True, fmt="%(message)s")
    out = fmt.format(make_record("RECORD | /a/RECORD", action="RECORD"))
    assert out == f"{ACTION_COLORS['RECORD']}RECORD{RESET} | /a/RECORD"


def test_unknown_action_is_uncolored():
    fmt = ActionFormatter(use_color=True, fmt="%(message)s")
    assert fmt.format(make_record("PAIR | x", action="PAIR")) == "PAIR | x"


def test_errors_are_red():
    fmt = ActionFormatter(use_color=True, fmt="%(message)s")
    assert fmt.format(make_record("boom", level=logging.ERROR)) == f"{RED}boom{RESET}"


def test_log_action_tags_record(caplog, test_logger):
    with caplog.at_level(logging.INFO, logger=test_logger.name):
        log_action(test_logger, "COPIED", "/x/y")

    rec = caplog.records[-1]
    assert rec.getMessage() == "COPIED | /x/y"
    assert rec.action == "COPIED"


def test_setup_logger_writes_dated_file(tmp_path):
    logger = setup_logger(tmp_path / "logs")
    logger.info("hello")
    for h in logger.handlers:
        h.flush()

    files = list((tmp_path / "logs").glob("nmr_mirror_*.log"))
    assert len(files) == 1
    assert "hello" in files[0].read_text(encoding="utf-8")
    assert setup_logger(tmp_path / "logs") is logger
    assert len(logger.handlers) == 2

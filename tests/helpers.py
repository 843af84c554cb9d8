from __future__ import annotations

import datetime as dt
import os
from pathlib import Path

NOW = dt.datetime(2026, 10, 18, 12, 0, 0)

ACQU_TEXT = """##TITLE= Parameter file, TopSpin 4.1.4
##$AQ_mod= 3
##$NUC1= <1H>
##$NusTD= 0
##$SOLVENT= <CDCl3>
##$TD= 65536
##$TD0= 1
"""

PROC_TEXT = """##TITLE= Parameter file, TopSpin 4.1.4
##$FT_mod= 6
##$FTSIZE= 32768
##$SI= 32768
"""


def set_age(path: Path, days: float, now: dt.datetime = NOW) -> None:
    ts = (now - dt.timedelta(days=days)).timestamp()
    os.utime(path, (ts, ts))


def make_tree(root: Path, ages: dict[str, float], now: dt.datetime = NOW) -> None:
    """Create directories and set their ages, deepest first so parents keep theirs."""
    for rel in ages:
        (root / rel).mkdir(parents=True, exist_ok=True)
    for rel in sorted(ages, key=lambda r: len(Path(r).parts), reverse=True):
        set_age(root / rel, ages[rel], now)


def make_experiment(folder: Path, acqu: str = ACQU_TEXT, proc: str = PROC_TEXT) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    (folder / "acqu").write_text(acqu, encoding="utf-8")
    if proc is not None:
        (folder / "pdata" / "1").mkdir(parents=True, exist_ok=True)
        (folder / "pdata" / "1" / "proc").write_text(proc, encoding="utf-8")
    (folder / "precom.output").write_text("", encoding="utf-8")
    (folder / "fid").write_bytes(b"\x00" * 16)
    set_age(folder / "precom.output", 0.5)
    set_age(folder / "fid", 0.25)
    return folder

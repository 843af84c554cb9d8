from __future__ import annotations

from nmr_mirror.logbook import append_record, format_record, log_path_for
from nmr_mirror.metadata import ExperimentRecord


def make_record(folder: str, solvent: str = "CDCl3") -> ExperimentRecord:
    return ExperimentRecord(
        folder_path=folder,
        solvent=solvent,
        nucleus="1H",
        acq_points="65536",
        proc_points="32768",
        instrument_id="I",
        start_time="2026/10/18 08:00:00",
        end_time="2026/10/18 08:05:12",
    )


def test_format_is_plain_comma_join():
    line = format_record(make_record("\\\\nmr\\data\\u\\s\\1"))
    assert line == "\\\\nmr\\data\\u\\s\\1,CDCl3,1H,65536,32768,I,2026/10/18 08:00:00,2026/10/18 08:05:12\n"


def test_comma_values_are_quoted():
    line = format_record(make_record("p", solvent="D2O,H2O"))
    assert line.startswith('p,"D2O,H2O",1H,')


def test_log_path_for(tmp_path):
    assert log_path_for(tmp_path, "NMR400") == tmp_path / "NMR400.csv"


def test_append_creates_file_and_keeps_order(tmp_path):
    log_path = log_path_for(tmp_path / "records", "I")

    append_record(make_record("a"), log_path)
    append_record(make_record("b"), log_path)

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("a,")
    assert lines[1].startswith("b,")
    assert all(len(line.split(",")) == 8 for line in lines)


def test_append_leaves_existing_content(tmp_path):
    log_path = tmp_path / "I.csv"
    log_path.write_text("old,line\n", encoding="utf-8")

    append_record(make_record("a"), log_path)
    append_record(make_record("a"), log_path)

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "old,line"
    assert lines[1] == lines[2]
    assert len(lines) == 3

from __future__ import annotations

import csv
from datetime import date
from pathlib import Path

from perfdash.models.records import SUMMARY_HEADERS
from perfdash.services.tables import column_totals, export_csv, export_filename, filter_records, to_frame

ATTENDANCE_HEADERS = ["SNO", "NAME", "EMP CODE", "1ST SEP LOGIN", "2ND SEP LOGIN"]
ATTENDANCE_ROWS = [
    {"SNO": "1", "NAME": "Dan", "EMP CODE": "E1", "1ST SEP LOGIN": "Present", "2ND SEP LOGIN": "Absent"},
    {"SNO": "2", "NAME": "Eve", "EMP CODE": "E2", "1ST SEP LOGIN": "P(1/2)", "2ND SEP LOGIN": "NIL"},
]


def test_filter_records_search_and_column_filters():
    records = [
        {"NAME": "alice", "FRAMECOUNT": 2},
        {"NAME": "bob", "FRAMECOUNT": 3},
        {"NAME": "Alicia", "FRAMECOUNT": 3},
    ]
    assert [r["NAME"] for r in filter_records(records, SUMMARY_HEADERS, "ALI")] == ["alice", "Alicia"]
    assert [r["NAME"] for r in filter_records(records, SUMMARY_HEADERS, filters={"FRAMECOUNT": ["3"]})] == [
        "bob",
        "Alicia",
    ]
    assert len(filter_records(records, SUMMARY_HEADERS, filters={"FRAMECOUNT": []})) == 3
    assert filter_records(records, SUMMARY_HEADERS, "ali", {"FRAMECOUNT": ["3"]}) == [records[2]]


def test_column_totals_for_summary_table():
    records = [
        {"NAME": "a", "FRAMECOUNT": 2, "OBJECTCOUNT": 8},
        {"NAME": "b", "FRAMECOUNT": 3, "OBJECTCOUNT": 2.5},
    ]
    totals = column_totals(SUMMARY_HEADERS, records)
    assert "NAME" not in totals
    assert totals["FRAMECOUNT"].render() == "5"
    assert totals["OBJECTCOUNT"].render() == "10.5"


def test_column_totals_attendance_counts():
    totals = column_totals(ATTENDANCE_HEADERS, ATTENDANCE_ROWS)
    assert totals["1ST SEP LOGIN"].kind == "attendance"
    assert totals["1ST SEP LOGIN"].render() == "P: 1 | H: 1 | L: 0"
    assert totals["2ND SEP LOGIN"].render() == "P: 0 | H: 0 | L: 1"


def test_column_totals_frame_and_video_columns():
    headers = ["Frame ID", "Video ID", "Misc"]
    records = [
        {"Frame ID": "F1", "Video ID": "7", "Misc": "x"},
        {"Frame ID": "", "Video ID": "8", "Misc": "y"},
        {"Frame ID": "F3", "Video ID": "9", "Misc": "z"},
    ]
    totals = column_totals(headers, records)
    assert totals["Frame ID"].label == "Count"
    assert totals["Frame ID"].value == 2
    assert "Video ID" not in totals
    assert "Misc" not in totals


def test_export_filename():
    assert export_filename("Annotator  Summary", date(2025, 9, 1)) == "annotator_summary_2025-09-01.csv"


def test_export_csv_maps_codes_and_appends_totals(tmp_path: Path):
    path = export_csv(tmp_path / "out" / "attendance.csv", ATTENDANCE_HEADERS, ATTENDANCE_ROWS)
    assert path is not None and path.exists()

    text = path.read_text(encoding="utf-8")
    assert text.splitlines()[0] == '"SNO","NAME","EMP CODE","1ST SEP LOGIN","2ND SEP LOGIN"'

    with path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[1] == ["1", "Dan", "E1", "P", "L"]
    assert rows[2] == ["2", "Eve", "E2", "P(1/2)", "NIL"]
    assert rows[3] == ["", "", "", "", ""]
    assert rows[4][0] == "GRAND TOTALS"
    assert rows[4][3] == "P: 1 | H: 1 | L: 0"


def test_export_csv_empty_view(tmp_path: Path):
    assert export_csv(tmp_path / "empty.csv", SUMMARY_HEADERS, []) is None
    assert not (tmp_path / "empty.csv").exists()


def test_to_frame_keeps_header_order():
    frame = to_frame(["B", "A"], [{"A": 1, "B": 2, "C": 3}])
    assert list(frame.columns) == ["B", "A"]
    assert frame.iloc[0]["B"] == 2

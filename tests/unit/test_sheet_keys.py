from __future__ import annotations

import pytest

from perfdash.sheets.keys import find_key, normalize_key, observed_keys


def test_normalize_key_drops_separators_and_case():
    assert normalize_key("Annotator_Name ") == "annotatorname"
    assert normalize_key("Frame - ID") == "frameid"
    assert normalize_key(None) == ""


def test_find_key_exact_match_wins_over_alias():
    # "Worker" is an alias of Annotator Name, but the literal column comes later
    keys = ["Worker", "Annotator Name"]
    assert find_key(keys, "Annotator Name") == "Annotator Name"


def test_find_key_alias_in_observed_order():
    assert find_key(["name", "worker"], "Annotator Name") == "name"
    assert find_key(["Total Objects"], "Number of Object Annotated") == "Total Objects"
    assert find_key(["Entry Date"], "Date") == "Entry Date"


@pytest.mark.parametrize("header", ["QC", "Reviewer", "QC Name"])
def test_qc_name_has_no_loose_aliases(header):
    assert find_key([header, "Annotator Name"], "Internal QC Name") is None
    assert find_key(["Internal_QC_Name"], "Internal QC Name") == "Internal_QC_Name"


def test_find_key_spelling_variants_match_exactly():
    assert find_key(["user_name"], "UserName") == "user_name"
    assert find_key(["frame-id"], "Frame ID") == "frame-id"


def test_find_key_absent_column_returns_none():
    assert find_key(["foo", "bar"], "Frame ID") is None
    assert find_key([], "Date") is None


def test_observed_keys_is_ordered_union():
    rows = [{"a": 1, "b": 2}, {"b": 3, "c": 4}, {}]
    assert observed_keys(rows) == ["a", "b", "c"]

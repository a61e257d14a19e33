"""Tests for CSV export encoding and pasted-CSV parsing"""

import re

from csvio import encode_rows, export_filename, parse_cell, parse_records


def test_header_only_for_empty_rows():
    assert encode_rows(["text", "count"], []) == "text,count"


def test_every_cell_is_quoted():
    out = encode_rows(["a", "b", "c"], [{"a": 'say "hi"', "b": 5, "c": None}])
    assert out == 'a,b,c\n"say ""hi""","5",""'


def test_composites_and_booleans_are_json():
    out = encode_rows(["tags", "ok"], [{"tags": {"k": [1, 2]}, "ok": True}])
    assert out.splitlines()[1] == '"{""k"":[1,2]}","true"'


def test_rows_keep_order_and_ignore_extra_keys():
    rows = [{"id": 1, "n": "x"}, {"id": 2, "n": "y"}]
    assert encode_rows(["n"], rows) == 'n\n"x"\n"y"'


def test_export_filename():
    assert re.fullmatch(r"college_\d{13}\.csv", export_filename("college"))


def test_parse_example():
    assert parse_records('text,count\nhello,"5"\n') == [{"text": "hello", "count": 5}]


def test_parse_needs_a_data_line():
    assert parse_records("text,count\n") == []
    assert parse_records("") == []
    assert parse_records("\n\n") == []


def test_parse_quoted_commas_and_newlines():
    text = 'title,message\r\n"Exams, phase 1","line one\nline two"\r\n\r\n'
    assert parse_records(text) == [{"title": "Exams, phase 1", "message": "line one\nline two"}]


def test_parse_pads_short_rows_and_trims_headers():
    records = parse_records(" name , district ,lat\nIIT\n")
    assert records == [{"name": "IIT", "district": "", "lat": ""}]


def test_parse_cell_json_values():
    assert parse_cell("true") is True
    assert parse_cell("null") is None
    assert parse_cell("[1,2]") == [1, 2]
    assert parse_cell('{"a":1}') == {"a": 1}
    assert parse_cell("1.5") == 1.5
    assert parse_cell("hello") == "hello"
    assert parse_cell("NaN") == "NaN"
    assert parse_cell("") == ""


def test_round_trip_scalars():
    headers = ["name", "lat", "verified"]
    rows = [{"name": "Govt College", "lat": 34.08, "verified": False}, {"name": 'The "Best"', "lat": 12, "verified": True}]
    assert parse_records(encode_rows(headers, rows)) == rows

"""Tests for field kinds, schema construction and form coercion"""

import pytest

from errors import CoercionError
from schemas import ADMIN_SCHEMAS, FieldDefinition, FieldKind, RecordSchema, coerce


def _fields(*specs):
    return [FieldDefinition(k, k.title(), kind) for k, kind in specs]


def test_boolean_unset_is_false():
    fields = _fields(("active", FieldKind.BOOLEAN))
    assert coerce({}, fields) == {"active": False}
    assert coerce({"active": None}, fields) == {"active": False}
    assert coerce({"active": "on"}, fields) == {"active": True}


def test_json_coercion():
    fields = _fields(("tags", FieldKind.JSON))
    assert coerce({"tags": ""}, fields) == {"tags": None}
    assert coerce({}, fields) == {"tags": None}
    assert coerce({"tags": '{"a":1}'}, fields) == {"tags": {"a": 1}}
    assert coerce({"tags": ["x", "y"]}, fields) == {"tags": ["x", "y"]}


def test_invalid_json_names_the_field():
    fields = [FieldDefinition("tags", "Tags (JSON)", FieldKind.JSON)]
    with pytest.raises(CoercionError) as info:
        coerce({"tags": "{bad"}, fields)
    assert info.value.label == "Tags (JSON)"
    assert info.value.detail.startswith("Tags (JSON): ")


def test_number_coercion():
    fields = _fields(("lat", FieldKind.NUMBER))
    assert coerce({"lat": ""}, fields) == {"lat": None}
    assert coerce({}, fields) == {"lat": None}
    assert coerce({"lat": "12"}, fields) == {"lat": 12}
    assert coerce({"lat": " 12.5 "}, fields) == {"lat": 12.5}
    assert coerce({"lat": 3}, fields) == {"lat": 3}


@pytest.mark.parametrize("raw", ["abc", "nan", "inf", True])
def test_number_rejects_non_numeric(raw):
    fields = _fields(("lat", FieldKind.NUMBER))
    with pytest.raises(CoercionError):
        coerce({"lat": raw}, fields)


def test_text_passes_through():
    fields = _fields(("name", FieldKind.TEXT), ("message", FieldKind.TEXTAREA))
    assert coerce({"name": "  IIT  ", "message": "a\nb"}, fields) == {"name": "  IIT  ", "message": "a\nb"}
    assert coerce({}, fields) == {"name": None, "message": None}


def test_record_only_has_schema_keys():
    fields = _fields(("name", FieldKind.TEXT))
    assert coerce({"name": "x", "extra": 1}, fields) == {"name": "x"}


def test_kind_selects_control():
    assert FieldKind.BOOLEAN.control == "checkbox"
    assert FieldKind.TEXTAREA.control == "textarea"
    assert FieldKind.NUMBER.control == "number"
    assert FieldKind.TEXT.control == "input"


def test_schema_rejects_duplicate_keys():
    with pytest.raises(ValueError):
        RecordSchema("Dupes", "dupes", tuple(_fields(("a", FieldKind.TEXT), ("a", FieldKind.NUMBER))))
    with pytest.raises(ValueError):
        RecordSchema("Empty", "empty", ())


def test_admin_schemas_registry():
    assert set(ADMIN_SCHEMAS) == {"quiz_questions", "college", "resources", "timelines", "career_nodes", "admin_users"}
    college = ADMIN_SCHEMAS["college"]
    assert college.keys == ["name", "district", "contact", "website", "lat", "lng", "verified"]
    assert college.to_dict()["fields"][4] == {"key": "lat", "label": "Lat", "kind": "number", "control": "number"}


@pytest.mark.parametrize("raw", ["1_000", "١٢", "0x10", "1e999", "1.2.3", "- 4"])
def test_number_rejects_loose_numeric_text(raw):
    fields = _fields(("lat", FieldKind.NUMBER))
    with pytest.raises(CoercionError):
        coerce({"lat": raw}, fields)


@pytest.mark.parametrize("raw,expected", [(".5", 0.5), ("1e3", 1000.0), ("-7", -7), ("+2.", 2.0)])
def test_number_accepts_decimal_and_exponent(raw, expected):
    fields = _fields(("lat", FieldKind.NUMBER))
    value = coerce({"lat": raw}, fields)["lat"]
    assert value == expected
    assert type(value) is type(expected)

import json
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from errors import CoercionError


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    TEXTAREA = "textarea"
    JSON = "json"
    BOOLEAN = "boolean"

    @property
    def control(self) -> str:
        return _CONTROLS[self]


_CONTROLS = {
    FieldKind.TEXT: "input",
    FieldKind.NUMBER: "number",
    FieldKind.TEXTAREA: "textarea",
    FieldKind.JSON: "json",
    FieldKind.BOOLEAN: "checkbox",
}


@dataclass(frozen=True)
class FieldDefinition:
    key: str
    label: str
    kind: FieldKind = FieldKind.TEXT

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "label": self.label, "kind": self.kind.value, "control": self.kind.control}


@dataclass(frozen=True)
class RecordSchema:
    title: str
    table_name: str
    fields: Tuple[FieldDefinition, ...]
    primary_key_field: str = "id"

    def __post_init__(self):
        if not self.fields:
            raise ValueError(f"{self.title}: schema needs at least one field")
        keys = [f.key for f in self.fields]
        dupes = sorted({k for k in keys if keys.count(k) > 1})
        if dupes:
            raise ValueError(f"{self.title}: duplicate field keys {dupes}")

    @property
    def keys(self) -> List[str]:
        return [f.key for f in self.fields]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "table": self.table_name,
            "primary_key": self.primary_key_field,
            "fields": [f.to_dict() for f in self.fields],
        }


# --- Coercion ---------------------------------------------------------------
# Each kind turns a raw form value (string, bool or an already decoded JSON
# value) into what the store expects for the column.

# plain ASCII decimal or exponent notation only
_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+(?P<frac>\.[0-9]*)?|(?P<frac2>\.[0-9]+))(?P<exp>[eE][+-]?[0-9]+)?")


def _coerce_text(f: FieldDefinition, raw):
    return raw


def _coerce_number(f: FieldDefinition, raw):
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise CoercionError(f"{f.label}: expected a number", label=f.label)
    if isinstance(raw, (int, float)):
        value = raw
    else:
        s = str(raw).strip()
        if s == "":
            return None
        match = _NUMBER_RE.fullmatch(s)
        if not match:
            raise CoercionError(f"{f.label}: {s!r} is not a number", label=f.label)
        is_float = match.group("frac") or match.group("frac2") or match.group("exp")
        value = float(s) if is_float else int(s)
    if isinstance(value, float) and not math.isfinite(value):
        raise CoercionError(f"{f.label}: {raw!r} is not a finite number", label=f.label)
    return value


def _coerce_json(f: FieldDefinition, raw):
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except ValueError as e:
        raise CoercionError(f"{f.label}: {e}", label=f.label)


def _coerce_boolean(f: FieldDefinition, raw):
    return bool(raw)


_COERCERS = {
    FieldKind.TEXT: _coerce_text,
    FieldKind.TEXTAREA: _coerce_text,
    FieldKind.NUMBER: _coerce_number,
    FieldKind.JSON: _coerce_json,
    FieldKind.BOOLEAN: _coerce_boolean,
}


def coerce(form: Dict[str, Any], fields) -> Dict[str, Any]:
    """Build a record from raw form values, one entry per field.

    Raises CoercionError for the first field whose value cannot be converted.
    """
    record = {}
    for f in fields:
        record[f.key] = _COERCERS[f.kind](f, form.get(f.key))
    return record


# --- Admin tables -----------------------------------------------------------

def _schema(title: str, table: str, *fields: FieldDefinition, primary_key: str = "id") -> RecordSchema:
    return RecordSchema(title=title, table_name=table, fields=tuple(fields), primary_key_field=primary_key)


F = FieldDefinition
K = FieldKind

ADMIN_SCHEMAS: Dict[str, RecordSchema] = {s.table_name: s for s in [
    _schema(
        "Quiz Questions", "quiz_questions",
        F("text", "Question", K.TEXT),
        F("choices", "Choices (JSON)", K.JSON),
        F("weight_map", "Weight map (JSON)", K.JSON),
        F("active", "Active", K.BOOLEAN),
    ),
    _schema(
        "Colleges", "college",
        F("name", "Name"),
        F("district", "District"),
        F("contact", "Contact"),
        F("website", "Website"),
        F("lat", "Lat", K.NUMBER),
        F("lng", "Lng", K.NUMBER),
        F("verified", "Verified", K.BOOLEAN),
    ),
    _schema(
        "Resources", "resources",
        F("title", "Title"),
        F("source", "Source"),
        F("link", "Link"),
        F("type", "Type"),
        F("tags", "Tags (JSON)", K.JSON),
    ),
    _schema(
        "Timelines", "timelines",
        F("title", "Title"),
        F("start_date", "Start Date"),
        F("end_date", "End Date"),
        F("target_streams", "Target streams (JSON)", K.JSON),
        F("target_colleges", "Target colleges (JSON)", K.JSON),
        F("message", "Message", K.TEXTAREA),
    ),
    _schema(
        "Career Nodes", "career_nodes",
        F("title", "Title"),
        F("description", "Description", K.TEXTAREA),
        F("skills", "Skills (JSON)", K.JSON),
        F("salary_range", "Salary range"),
        F("related_courses", "Related courses (JSON)", K.JSON),
        F("related_exams", "Related exams (JSON)", K.JSON),
    ),
    _schema(
        "Admin Users", "admin_users",
        F("email", "Email"),
        F("role", "Role (superadmin/content-editor/analytics-viewer)"),
    ),
]}


def get_schema(table: str) -> Optional[RecordSchema]:
    return ADMIN_SCHEMAS.get(table)

import csv
import io
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

CSV_MIMETYPE = "text/csv;charset=utf-8"


@dataclass
class CsvExport:
    filename: str
    content: str
    mimetype: str = CSV_MIMETYPE


def export_filename(table: str) -> str:
    return f"{table}_{int(time.time() * 1000)}.csv"


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list, bool)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def encode_rows(headers: Sequence[str], rows: List[Dict[str, Any]]) -> str:
    """Header line as plain keys, then every cell quoted with "" escaping."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow([_cell_text(row.get(h)) for h in headers])
    body = buf.getvalue()
    if body.endswith("\n"):
        body = body[:-1]
    header = ",".join(headers)
    return f"{header}\n{body}" if body else header


def _reject_constant(name):
    raise ValueError(name)


def parse_cell(cell: str) -> Any:
    # Numbers, booleans, null and JSON literals come back typed; anything else stays text.
    try:
        return json.loads(cell, parse_constant=_reject_constant)
    except ValueError:
        return cell


def parse_records(text: str) -> List[Dict[str, Any]]:
    """Parse pasted CSV into records keyed by the trimmed header row.

    Returns an empty list when there is no data row. Short rows are padded
    with empty strings and cells past the last header are ignored.
    """
    rows = [r for r in csv.reader(io.StringIO(text)) if r]
    if len(rows) < 2:
        return []
    headers = [h.strip() for h in rows[0]]
    records = []
    for row in rows[1:]:
        padded = list(row) + [""] * (len(headers) - len(row))
        records.append({h: parse_cell(padded[i]) for i, h in enumerate(headers)})
    return records

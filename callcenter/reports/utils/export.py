"""CSV serialization helpers for report exports."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping
from typing import Any


def flatten_record(record: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten a nested record into a single-level dict for CSV export.

    Nested objects become ``parent_child`` columns. A list of objects
    contributes its first element (flattened under the list's key) plus a
    ``<key>_count`` column. Scalar lists are joined with ``"; "`` and nulls
    become empty strings.
    """
    flat: dict[str, Any] = {}
    for key, value in record.items():
        name = f"{prefix}_{key}" if prefix else str(key)
        if value is None:
            flat[name] = ""
        elif isinstance(value, list):
            if not value:
                flat[name] = ""
            elif isinstance(value[0], Mapping):
                flat.update(flatten_record(value[0], name))
                flat[f"{name}_count"] = len(value)
            else:
                flat[name] = "; ".join(str(v) for v in value)
        elif isinstance(value, Mapping):
            flat.update(flatten_record(value, name))
        else:
            flat[name] = value
    return flat


def to_csv(records: Iterable[Mapping[str, Any]], delimiter: str = ",") -> str:
    """Serialize records to CSV text (RFC 4180 quoting).

    The header comes from the first record's keys; fields missing from later
    records are left empty and extra fields are ignored.
    """
    rows = list(records)
    if not rows:
        return ""

    fieldnames = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=fieldnames,
        delimiter=delimiter,
        extrasaction="ignore",
        lineterminator="\n",
    )
    writer.writeheader()
    for row in rows:
        writer.writerow({k: "" if row.get(k) is None else row.get(k) for k in fieldnames})
    return buffer.getvalue().rstrip("\n")

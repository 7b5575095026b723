"""Payload normalization.

The reporting API answers in several shapes depending on report kind and
record count: a bare array, an object wrapping a ``data`` or ``rows`` array,
an array serialized as an object keyed "0".."n-1" (a pseudo-array), or an
object of objects keyed by some natural key. This module turns any of them
into a flat list of record mappings.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.exceptions import UpstreamShapeError
from .records import DEFAULT_PROFILE, Record, RecordProfile

logger = logging.getLogger(__name__)

_WRAPPER_FIELDS = ("data", "rows")

# Upstream continuation key, allowed alongside any payload shape
CURSOR_FIELD = "next_start_key"


def is_pseudo_array(value: Any) -> bool:
    """Whether value is a mapping keyed exactly "0", "1", ..., "n-1"."""
    if not isinstance(value, Mapping) or not value:
        return False
    expected = {str(i) for i in range(len(value))}
    return set(value.keys()) == expected


def unwrap_pseudo_array(value: Mapping[str, Any]) -> list[Any]:
    """Values of a pseudo-array in ascending numeric key order."""
    return [value[k] for k in sorted(value, key=int)]


def extract_items(body: Any, *, key_field: str = "key") -> list[Any]:
    """Locate the record sequence inside a raw decoded body.

    Shapes are tried in order, first match wins:
        1. array
        2. object with a ``data`` or ``rows`` array (or pseudo-array)
        3. pseudo-array object, ignoring the cursor key
        4. object of objects, one record per entry with the key injected

    Raises:
        UpstreamShapeError: If no shape applies
    """
    if isinstance(body, list):
        return body

    if not isinstance(body, Mapping):
        raise UpstreamShapeError(
            f"Unrecognised payload of type {type(body).__name__}",
            payload_type=type(body).__name__,
        )

    for field in _WRAPPER_FIELDS:
        wrapped = body.get(field)
        if isinstance(wrapped, list):
            return wrapped
        if is_pseudo_array(wrapped):
            return unwrap_pseudo_array(wrapped)

    content = {key: value for key, value in body.items() if key != CURSOR_FIELD}
    if is_pseudo_array(content):
        logger.debug("Converted pseudo-array payload", extra={"records": len(content)})
        return unwrap_pseudo_array(content)

    # Scalar entries (cursor, status, counts) are envelope metadata
    items = [{key_field: key, **value} for key, value in body.items() if isinstance(value, Mapping)]
    if not items:
        raise UpstreamShapeError(
            f"Object payload with keys {sorted(body)[:10]} holds no records",
            payload_type="object",
        )
    logger.warning(
        "Unexpected payload shape; treating object entries as records",
        extra={"records": len(items)},
    )
    return items


def _is_bare_envelope(body: Any, profile: RecordProfile) -> bool:
    """Whether body is itself an envelope carrying the nested field."""
    if profile.nested_field is None or not isinstance(body, Mapping):
        return False
    if any(field in body for field in _WRAPPER_FIELDS):
        return False
    nested = body.get(profile.nested_field)
    return isinstance(nested, list) or is_pseudo_array(nested)


def _expand(item: Any, profile: RecordProfile) -> list[Record]:
    if not isinstance(item, Mapping):
        logger.debug("Dropping non-object element", extra={"element_type": type(item).__name__})
        return []

    if is_pseudo_array(item):
        return [
            profile.flatten(child) for child in unwrap_pseudo_array(item) if isinstance(child, Mapping)
        ]

    if profile.nested_field:
        nested = item.get(profile.nested_field)
        if is_pseudo_array(nested):
            nested = unwrap_pseudo_array(nested)
        if isinstance(nested, list):
            return [profile.flatten(child) for child in nested if isinstance(child, Mapping)]

    return [profile.flatten(item)]


def normalize_payload(body: Any, profile: RecordProfile = DEFAULT_PROFILE) -> list[Record]:
    """Produce an ordered list of records from a raw page body.

    An unrecognised body is logged and yields an empty list: absence of data
    is not an error.
    """
    try:
        if _is_bare_envelope(body, profile):
            items = [body]
        else:
            items = extract_items(body, key_field=profile.fallback_key_field)
    except UpstreamShapeError as e:
        logger.warning(
            "Upstream payload not recognised; treating as zero records",
            extra={"payload_type": e.payload_type, "error_message": str(e)},
        )
        return []

    records: list[Record] = []
    for item in items:
        records.extend(_expand(item, profile))
    return records

"""Record profiles, identity keys and the deduplicating accumulator.

Architecture:
    Records stay open mappings. What varies per report kind (which field is
    a stable identifier, which fields make up the fallback composite key,
    where nested children live, which vendor annotations get lifted onto top
    level fields) is captured as data in a RecordProfile instead of being
    looked up ad hoc inside the aggregator.

Design Decisions:
    - Identity prefers the first truthy identifier field. Without one, the
      origin number, destination number and timestamp fields are joined into
      a composite key. Two genuinely distinct records lacking an identifier
      can collide on that composite; the upstream offers nothing stronger.
    - Records with neither an identifier nor any composite field are keyed
      by their canonical JSON, so only byte-identical rows collapse.
    - Flatten rules are table-driven (FlattenRule) and applied on a copy.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

Record = dict[str, Any]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


@dataclass(frozen=True)
class FlattenRule:
    """Lift a nested value onto a top-level record field.

    Attributes:
        target: Top-level field to write
        source: Path of keys leading to the nested value
        label_key: When the nested value is an object, read this key from it
        chain_key: Follow this key into deeper objects, joining their labels
        separator: Separator for chained labels
        override: Replace an existing non-blank target value

    Example:
        # {"fonoUC": {"subdisposition": {"name": "A", "subdisposition": {"name": "B"}}}}
        # -> record["subdisposition"] == "A - B"
        FlattenRule(
            target="subdisposition",
            source=("fonoUC", "subdisposition"),
            label_key="name",
            chain_key="subdisposition",
        )
    """

    target: str
    source: tuple[str, ...]
    label_key: str | None = None
    chain_key: str | None = None
    separator: str = " - "
    override: bool = True

    def resolve(self, record: Mapping[str, Any]) -> Any:
        """Read the value this rule points at, or None."""
        value: Any = record
        for part in self.source:
            if not isinstance(value, Mapping):
                return None
            value = value.get(part)

        if isinstance(value, Mapping) and self.label_key:
            labels: list[str] = []
            node: Any = value
            while isinstance(node, Mapping) and not _is_blank(node.get(self.label_key)):
                labels.append(str(node[self.label_key]))
                if not self.chain_key:
                    break
                node = node.get(self.chain_key)
            return self.separator.join(labels) if labels else None
        return value

    def apply(self, record: Record) -> None:
        """Write the resolved value into record (in place)."""
        if not self.override and not _is_blank(record.get(self.target)):
            return
        value = self.resolve(record)
        if _is_blank(value):
            return
        record[self.target] = value


@dataclass(frozen=True)
class RecordProfile:
    """Per-report-kind description of record shape and identity.

    Attributes:
        id_fields: Stable identifier fields, in preference order
        number_fields: Origin and destination number fields for the composite key
        timestamp_fields: Timestamp fields, the first present is primary
        nested_field: Field holding embedded child records to expand
        flatten_rules: Rules applied to every produced record
        fallback_key_field: Field receiving the key when a payload is an
            object of objects
    """

    id_fields: tuple[str, ...] = ("call_id",)
    number_fields: tuple[str, ...] = ("caller_id_number", "callee_id_number")
    timestamp_fields: tuple[str, ...] = ("timestamp", "called_time")
    nested_field: str | None = None
    flatten_rules: tuple[FlattenRule, ...] = ()
    fallback_key_field: str = "key"

    def identifier(self, record: Mapping[str, Any]) -> Any:
        """First truthy identifier field value, or None."""
        for field in self.id_fields:
            value = record.get(field)
            if value:
                return value
        return None

    def primary_timestamp(self, record: Mapping[str, Any]) -> Any:
        """First non-blank timestamp field value, or None."""
        for field in self.timestamp_fields:
            value = record.get(field)
            if not _is_blank(value):
                return value
        return None

    def record_key(self, record: Mapping[str, Any]) -> str:
        """Derived identity key used for deduplication."""
        ident = self.identifier(record)
        if ident:
            return str(ident)

        composite = self.number_fields + self.timestamp_fields
        if any(not _is_blank(record.get(f)) for f in composite):
            return "_".join("" if record.get(f) is None else str(record.get(f)) for f in composite)

        return json.dumps(record, sort_keys=True, default=str)

    def flatten(self, record: Mapping[str, Any]) -> Record:
        """Copy of record with the flatten rules applied."""
        out = dict(record)
        for rule in self.flatten_rules:
            rule.apply(out)
        return out


DEFAULT_PROFILE = RecordProfile()


class MergeResult(NamedTuple):
    """Outcome of merging one batch into an accumulator."""

    added: int
    duplicates: int
    overflow: int  # new records left out because the limit was reached


class RecordAccumulator:
    """Insertion-ordered unique records bounded by an optional limit.

    Invariants:
        - len(records) never exceeds limit
        - no two records share a derived identity key
    """

    def __init__(self, profile: RecordProfile = DEFAULT_PROFILE, limit: int | None = None) -> None:
        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0")
        self._profile = profile
        self.limit = limit
        self.records: list[Record] = []
        self._seen: set[str] = set()

    def __len__(self) -> int:
        return len(self.records)

    @property
    def full(self) -> bool:
        """Whether the limit has been reached."""
        return self.limit is not None and len(self.records) >= self.limit

    @property
    def remaining(self) -> int | None:
        """Records still wanted, or None when unbounded."""
        if self.limit is None:
            return None
        return max(self.limit - len(self.records), 0)

    def merge(self, records: Iterable[Mapping[str, Any]]) -> MergeResult:
        """Add unseen records in order until the limit is reached."""
        added = duplicates = overflow = 0
        overflow_keys: set[str] = set()
        for record in records:
            key = self._profile.record_key(record)
            if key in self._seen:
                duplicates += 1
                continue
            if self.full:
                if key not in overflow_keys:
                    overflow_keys.add(key)
                    overflow += 1
                continue
            self._seen.add(key)
            self.records.append(dict(record))
            added += 1
        return MergeResult(added=added, duplicates=duplicates, overflow=overflow)

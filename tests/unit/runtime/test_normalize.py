"""Unit tests for payload normalization."""

import logging

import pytest

from callcenter.reports.core import UpstreamShapeError
from callcenter.reports.runtime import (
    FlattenRule,
    RecordProfile,
    extract_items,
    is_pseudo_array,
    normalize_payload,
    unwrap_pseudo_array,
)

ROWS = [{"call_id": "a", "n": 1}, {"call_id": "b", "n": 2}, {"call_id": "c", "n": 3}]


class TestPseudoArray:
    """Test pseudo-array detection."""

    def test_detects_dense_numeric_keys(self):
        """Test keys "0".."n-1" are a pseudo-array."""
        assert is_pseudo_array({"0": 1, "1": 2})
        assert is_pseudo_array({"1": 2, "0": 1})

    def test_rejects_other_mappings(self):
        """Test gaps, names and empties are not pseudo-arrays."""
        assert not is_pseudo_array({"0": 1, "2": 3})
        assert not is_pseudo_array({"a": 1})
        assert not is_pseudo_array({})
        assert not is_pseudo_array([1, 2])

    def test_unwrap_orders_numerically(self):
        """Test "10" sorts after "9"."""
        value = {str(i): i for i in range(11)}
        assert unwrap_pseudo_array(value) == list(range(11))


class TestNormalizeShapes:
    """Every accepted shape yields the same records as a plain array."""

    @pytest.mark.parametrize(
        "body",
        [
            ROWS,
            {"data": ROWS, "next_start_key": "k"},
            {"rows": ROWS},
            {"0": ROWS[0], "1": ROWS[1], "2": ROWS[2]},
            {"0": ROWS[0], "1": ROWS[1], "2": ROWS[2], "next_start_key": "k"},
            {"data": {"0": ROWS[0], "1": ROWS[1], "2": ROWS[2]}},
            [{"0": ROWS[0], "1": ROWS[1]}, ROWS[2]],
        ],
        ids=["array", "data", "rows", "pseudo", "pseudo-with-cursor", "data-pseudo", "nested-pseudo"],
    )
    def test_equivalent_to_array(self, body):
        """Test each shape normalizes to the plain rows."""
        assert normalize_payload(body) == ROWS

    def test_pseudo_array_with_cursor_is_expected_shape(self, caplog):
        """Test a cursor beside a pseudo-array logs no shape warning."""
        body = {"0": ROWS[0], "1": ROWS[1], "next_start_key": "k"}
        with caplog.at_level(logging.WARNING):
            records = normalize_payload(body)
        assert records == ROWS[:2]
        assert all("key" not in r for r in records)
        assert not caplog.records

    def test_object_of_objects_injects_key(self):
        """Test the fallback shape keeps each key and skips scalars."""
        body = {"101": {"name": "Ann"}, "102": {"name": "Bob"}, "next_start_key": "k"}
        profile = RecordProfile(fallback_key_field="extension")
        assert normalize_payload(body, profile) == [
            {"extension": "101", "name": "Ann"},
            {"extension": "102", "name": "Bob"},
        ]

    @pytest.mark.parametrize("body", [None, 42, "text", {}, {"next_start_key": "k", "count": 0}])
    def test_unrecognised_body_is_empty(self, body):
        """Test unusable bodies yield no records instead of raising."""
        assert normalize_payload(body) == []

    def test_extract_items_raises_for_scalars(self):
        """Test the internal error is raised before being absorbed."""
        with pytest.raises(UpstreamShapeError) as exc_info:
            extract_items(7)
        assert exc_info.value.payload_type == "int"

    def test_non_object_elements_dropped(self):
        """Test scalar array elements are dropped."""
        assert normalize_payload([ROWS[0], "junk", None, 5]) == [ROWS[0]]


class TestNestedRecords:
    """Test nested-field expansion and flatten rules."""

    PROFILE = RecordProfile(
        nested_field="cdrs",
        flatten_rules=(
            FlattenRule(target="disposition", source=("fonoUC", "disposition")),
            FlattenRule(
                target="subdisposition",
                source=("fonoUC", "subdisposition"),
                label_key="name",
                chain_key="subdisposition",
            ),
        ),
    )

    def test_expands_nested_list(self):
        """Test envelope records expand into their children."""
        body = {"data": [{"cdrs": [{"call_id": "a"}, {"call_id": "b"}]}, {"cdrs": [{"call_id": "c"}]}]}
        assert [r["call_id"] for r in normalize_payload(body, self.PROFILE)] == ["a", "b", "c"]

    def test_expands_nested_pseudo_array(self):
        """Test nested pseudo-arrays expand in order."""
        body = [{"cdrs": {"0": {"call_id": "a"}, "1": {"call_id": "b"}}}]
        assert [r["call_id"] for r in normalize_payload(body, self.PROFILE)] == ["a", "b"]

    def test_bare_envelope(self):
        """Test a top-level envelope carrying the nested field."""
        body = {"cdrs": [{"call_id": "a"}], "next_start_key": "k"}
        assert normalize_payload(body, self.PROFILE) == [{"call_id": "a"}]

    def test_flatten_rules_applied(self):
        """Test vendor annotations are lifted to the top level."""
        body = [
            {
                "call_id": "a",
                "disposition": "NORMAL_CLEARING",
                "fonoUC": {
                    "disposition": "Sale",
                    "subdisposition": {"name": "Callback", "subdisposition": {"name": "Tomorrow"}},
                },
            }
        ]
        record = normalize_payload(body, self.PROFILE)[0]
        assert record["disposition"] == "Sale"
        assert record["subdisposition"] == "Callback - Tomorrow"
        # Input is not mutated
        assert body[0]["disposition"] == "NORMAL_CLEARING"

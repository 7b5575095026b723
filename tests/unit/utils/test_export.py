"""Unit tests for CSV export helpers."""

from callcenter.reports.utils import flatten_record, to_csv


class TestFlattenRecord:
    """Test flatten_record."""

    def test_nested_objects(self):
        """Test nested objects become parent_child columns."""
        record = {"call_id": "a", "fonoUC": {"disposition": "Sale", "meta": {"by": "ann"}}}
        assert flatten_record(record) == {
            "call_id": "a",
            "fonoUC_disposition": "Sale",
            "fonoUC_meta_by": "ann",
        }

    def test_list_of_objects_keeps_first_and_count(self):
        """Test object lists keep their first element plus a count."""
        record = {"agent_history": [{"name": "ann"}, {"name": "bob"}]}
        assert flatten_record(record) == {"agent_history_name": "ann", "agent_history_count": 2}

    def test_scalar_lists_and_nulls(self):
        """Test scalar lists are joined and nulls emptied."""
        record = {"tags": ["a", "b"], "notes": None, "empty": []}
        assert flatten_record(record) == {"tags": "a; b", "notes": "", "empty": ""}


class TestToCsv:
    """Test to_csv."""

    def test_empty(self):
        """Test no records yields an empty string."""
        assert to_csv([]) == ""

    def test_header_from_first_record_and_quoting(self):
        """Test header order and RFC 4180 quoting."""
        records = [
            {"call_id": "a", "notes": 'said "hi", left'},
            {"call_id": "b", "notes": None, "extra": "ignored"},
        ]
        assert to_csv(records) == 'call_id,notes\na,"said ""hi"", left"\nb,'

    def test_custom_delimiter(self):
        """Test a custom delimiter."""
        assert to_csv([{"a": 1, "b": 2}], delimiter=";") == "a;b\n1;2"

"""
Record Loader Tests
"""

import pytest

from relgraph.core.config_manager import RecordSchemaConfig
from relgraph.core.exceptions import RecordLoadError
from relgraph.graph_visualization import RelationRecord, load_records_from_csv, records_from_rows

MEDALS_CSV = """ country , discipline,medal_type ,name,event
USA,Swimming,Gold Medal,Alice,100m
USA,Swimming,Gold Medal,Bob,200m

,Swimming,Silver Medal,Carl,400m
CAN,Rowing,Bronze Medal,,
"""


@pytest.fixture
def medals_csv(tmp_path):
    path = tmp_path / "medals.csv"
    path.write_text(MEDALS_CSV)
    return path


class TestLoadRecordsFromCsv:

    def test_headers_are_stripped(self, medals_csv, config):
        records = load_records_from_csv(medals_csv, config.records)
        assert records[0] == RelationRecord("USA", "Swimming", "Gold Medal", ("Alice", "100m"))

    def test_incomplete_rows_are_dropped(self, medals_csv, config):
        records = load_records_from_csv(medals_csv, config.records)
        assert len(records) == 3
        assert all(r.source_id for r in records)

    def test_missing_details_are_omitted(self, medals_csv, config):
        records = load_records_from_csv(medals_csv, config.records)
        assert records[-1] == RelationRecord("CAN", "Rowing", "Bronze Medal", ())

    def test_missing_file(self, tmp_path, config):
        with pytest.raises(RecordLoadError):
            load_records_from_csv(tmp_path / "absent.csv", config.records)

    def test_missing_required_column(self, tmp_path, config):
        path = tmp_path / "bad.csv"
        path.write_text("country,discipline\nUSA,Swimming\n")
        with pytest.raises(RecordLoadError, match="medal_type"):
            load_records_from_csv(path, config.records)

    def test_empty_file(self, tmp_path, config):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(RecordLoadError):
            load_records_from_csv(path, config.records)


class TestRecordsFromRows:

    def test_custom_schema(self):
        schema = RecordSchemaConfig(source_column="from", target_column="to",
                                    label_column="kind", detail_columns=["note"])
        rows = [
            {"from": "a", "to": "b", "kind": "follows", "note": " first "},
            {"from": "b", "to": "c", "kind": "follows"},
            {"from": "c", "to": None, "kind": "follows"},
        ]
        records = records_from_rows(rows, schema)
        assert records == [
            RelationRecord("a", "b", "follows", ("first",)),
            RelationRecord("b", "c", "follows", ()),
        ]

    def test_whitespace_only_values_count_as_missing(self, config):
        rows = [{"country": "  ", "discipline": "Rowing", "medal_type": "Gold Medal"}]
        assert records_from_rows(rows, config.records) == []

import json

import pytest

from gaimport.core.aggregation import (
    IMPORTED_FROM_EXTERNAL_SOURCE_METADATA_NAME,
    NOT_SET_LABEL,
    DedupGuard,
    LabelingError,
    add_row_to_subtable,
    add_row_to_table,
    clean_label,
    insert_numeric_records,
    insert_record,
)
from gaimport.core.datatable import Record, Row
from gaimport.core.metric_registry import Metric


def _query_row(visits=2, actions=3):
    return Row(
        columns={"nb_visits": visits, "nb_actions": actions},
        metadata={"ga:customVarName1": "plan"},
    )


def test_merging_same_row_twice_doubles_values():
    record = Record()
    row = _query_row()

    add_row_to_table(record, row, "plan")
    merged = add_row_to_table(record, row, "plan")

    assert len(record) == 1
    assert merged.columns == {"nb_visits": 4, "nb_actions": 6}


def test_inserted_row_carries_no_query_metadata():
    record = Record()
    row = _query_row()

    inserted = add_row_to_table(record, row, "plan")

    assert inserted.label == "plan"
    assert inserted.metadata == {}
    assert inserted is not row


def test_merge_adds_columns_missing_from_existing_row():
    record = Record()
    add_row_to_table(record, Row(columns={"nb_visits": 1}), "a")
    merged = add_row_to_table(record, Row(columns={"nb_conversions": 2}), "a")
    assert merged.columns == {"nb_visits": 1, "nb_conversions": 2}


@pytest.mark.parametrize("label", [None, ""])
def test_missing_label_is_a_labeling_error(label):
    record = Record()
    with pytest.raises(LabelingError):
        add_row_to_table(record, _query_row(), label)
    assert len(record) == 0


def test_labels_stay_unique_over_many_merges():
    record = Record()
    for label in ["a", "b", "a", "c", "b", "a"]:
        add_row_to_table(record, _query_row(visits=1), label)

    labels = [row.label for row in record]
    assert sorted(labels) == ["a", "b", "c"]
    assert record.get_row("a").get_column(Metric.NB_VISITS) == 3


def test_subtable_is_created_once():
    parent = Row("parent")
    add_row_to_subtable(parent, _query_row(), "x")
    subtable = parent.subtable
    add_row_to_subtable(parent, _query_row(), "y")

    assert parent.subtable is subtable
    assert len(subtable) == 2


@pytest.mark.parametrize("value", [None, "", "   ", "(not set)"])
def test_clean_label_replaces_empty_values(value):
    assert clean_label(value) == NOT_SET_LABEL
    assert clean_label(value, "Value not defined") == "Value not defined"


def test_clean_label_keeps_real_values():
    assert clean_label("premium") == "premium"


def test_dedup_guard_reports_first_sighting_only():
    guard = DedupGuard()
    assert guard.first_seen("plan", "visit", 1)
    assert not guard.first_seen("plan", "visit", 1)
    assert guard.first_seen("plan", "page", 1)
    assert len(guard) == 2


def test_insert_record_tags_and_writes(sink):
    record = Record()
    add_row_to_table(record, _query_row(visits=1), "a")
    add_row_to_table(record, _query_row(visits=9), "b")

    blob = insert_record(sink, "Test_record", record, max_rows=1, sort_column=Metric.NB_VISITS)

    assert sink.blobs["Test_record"] == blob
    data = json.loads(blob)
    assert data["metadata"][IMPORTED_FROM_EXTERNAL_SOURCE_METADATA_NAME] is True
    assert [r["label"] for r in data["rows"]] == ["b"]


def test_insert_numeric_records_uses_column_names(sink):
    insert_numeric_records(sink, {Metric.NB_VISITS: 12, "bounce_count": 3})
    assert sink.numerics == {"nb_visits": 12, "bounce_count": 3}

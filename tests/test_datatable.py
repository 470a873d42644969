import json

import pytest

from gaimport.core.datatable import Record, Row
from gaimport.core.metric_registry import Metric


def _record(*rows):
    record = Record()
    for label, visits in rows:
        record.add_row(Row(label, {Metric.NB_VISITS: visits}))
    return record


def test_add_row_rejects_duplicate_label():
    record = _record(("a", 1))
    with pytest.raises(ValueError, match="already has a row"):
        record.add_row(Row("a", {"nb_visits": 2}))


def test_enum_column_keys_are_stored_as_plain_names():
    row = Row("a", {Metric.NB_VISITS: 3})
    assert row.columns == {"nb_visits": 3}
    assert row.get_column(Metric.NB_VISITS) == 3


def test_serialize_sorts_descending_and_truncates():
    record = _record(("low", 1), ("high", 10), ("mid", 5))
    data = json.loads(record.serialize(max_rows=2, sort_column=Metric.NB_VISITS))
    assert [r["label"] for r in data["rows"]] == ["high", "mid"]


def test_serialize_keeps_insertion_order_for_ties():
    record = _record(("b", 5), ("a", 5), ("c", 7), ("d", 5))
    data = json.loads(record.serialize(max_rows=3, sort_column="nb_visits"))
    assert [r["label"] for r in data["rows"]] == ["c", "b", "a"]


def test_serialize_is_byte_identical_on_repeat():
    record = _record(("b", 5), ("a", 5), ("c", 7))
    record.get_row("c").subtable = _record(("x", 2), ("y", 2))
    first = record.serialize(2, 1, Metric.NB_VISITS)
    assert record.serialize(2, 1, Metric.NB_VISITS) == first


def test_subtables_truncate_independently():
    record = _record(("top", 10))
    record.get_row("top").subtable = _record(("s1", 1), ("s2", 3), ("s3", 2))
    data = json.loads(record.serialize(max_rows=None, max_subtable_rows=2, sort_column="nb_visits"))
    sub_labels = [r["label"] for r in data["rows"][0]["subtable"]["rows"]]
    assert sub_labels == ["s2", "s3"]


def test_no_limit_keeps_every_row():
    record = _record(*[(str(i), i) for i in range(20)])
    data = json.loads(record.serialize())
    assert len(data["rows"]) == 20
    # no sort column: insertion order
    assert data["rows"][0]["label"] == "0"


def test_unserialize_restores_nested_structure():
    record = _record(("top", 4))
    record.metadata["imported_from_external_source"] = True
    record.get_row("top").subtable = _record(("child", 4))

    restored = Record.unserialize(record.serialize())

    assert restored.metadata == {"imported_from_external_source": True}
    assert restored.get_row("top").subtable.get_row("child").get_column("nb_visits") == 4

"""GAIMPORT — Aggregation Primitives.

Helpers every record importer uses to fold query rows into a ``Record`` and
hand the result to the archive sink.
"""

from typing import Any, Dict, Hashable, Optional, Set, Tuple

from gaimport.core.contracts import ArchiveSink
from gaimport.core.datatable import Record, Row, column_name

IMPORTED_FROM_EXTERNAL_SOURCE_METADATA_NAME = "imported_from_external_source"
NOT_SET_LABEL = "__not_set_in_google_analytics__"

# Value GA reports for a dimension it has no data for
GA_NOT_SET_VALUE = "(not set)"


class LabelingError(Exception):
    """Raised when an importer tries to add a row without a label.

    This is a bug in the importer, not bad data from the API.
    """


def add_row_to_table(record: Record, row: Row, new_label: Optional[str]) -> Row:
    """Insert ``row`` under ``new_label`` or sum it into the existing row."""
    if new_label is None or new_label == "":
        raise LabelingError(
            f"Unexpected error: adding row to table with empty label: {new_label!r}"
        )

    found = record.get_row(new_label)
    if found is None:
        found = row.copy_columns()
        found.label = new_label
        record.add_row(found)
    else:
        found.sum_row(row)
    return found


def add_row_to_subtable(parent: Row, row: Row, new_label: Optional[str]) -> Row:
    """Same as ``add_row_to_table`` against ``parent``'s subtable, created on demand."""
    if parent.subtable is None:
        parent.subtable = Record()
    return add_row_to_table(parent.subtable, row, new_label)


def clean_label(value: Optional[str], default: str = NOT_SET_LABEL) -> str:
    """Replace an empty dimension value with ``default``."""
    if value is None or not str(value).strip() or value == GA_NOT_SET_VALUE:
        return default
    return value


class DedupGuard:
    """Remembers composite keys seen during one importer run."""

    def __init__(self):
        self._seen: Set[Tuple[Hashable, ...]] = set()

    def first_seen(self, *key: Hashable) -> bool:
        """Return True the first time ``key`` is offered, False afterwards."""
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def __len__(self) -> int:
        return len(self._seen)


def insert_record(
    sink: ArchiveSink,
    name: str,
    record: Record,
    max_rows: Optional[int] = None,
    max_subtable_rows: Optional[int] = None,
    sort_column: Any = None,
) -> bytes:
    """Tag ``record`` as imported, serialize it with truncation and write it."""
    record.metadata[IMPORTED_FROM_EXTERNAL_SOURCE_METADATA_NAME] = True
    blob = record.serialize(max_rows, max_subtable_rows, sort_column)
    sink.insert_blob_record(name, blob)
    return blob


def insert_numeric_records(sink: ArchiveSink, values: Dict[Any, float]) -> None:
    for name, value in values.items():
        sink.insert_numeric_record(column_name(name), value)

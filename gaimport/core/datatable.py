"""GAIMPORT — Hierarchical Record Model.

A ``Record`` maps unique labels to ``Row``s. A row holds numeric columns,
free-form metadata and, optionally, a nested ``Record`` (its subtable) that
breaks the row's totals down further.
"""

import json
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


def column_name(key: Any) -> str:
    """Return the plain string used to store a column key."""
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


class Row:
    """One labeled row of a record."""

    def __init__(
        self,
        label: Optional[str] = None,
        columns: Optional[Dict[Any, float]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.label = label
        self.columns: Dict[str, float] = {
            column_name(k): v for k, v in (columns or {}).items()
        }
        self.metadata: Dict[str, Any] = dict(metadata or {})
        self.subtable: Optional["Record"] = None

    def get_column(self, name: Any, default: float = 0) -> float:
        return self.columns.get(column_name(name), default)

    def sum_row(self, other: "Row") -> None:
        """Add ``other``'s columns into this row. Metadata is not copied."""
        for name, value in other.columns.items():
            self.columns[name] = self.columns.get(name, 0) + value

    def copy_columns(self) -> "Row":
        """Return a new unlabeled row with a copy of the columns only."""
        return Row(columns=dict(self.columns))

    def __repr__(self) -> str:
        return f"<Row {self.label!r} {self.columns}>"


class Record:
    """Label-keyed table of rows."""

    def __init__(self):
        self._rows: Dict[str, Row] = {}
        self.metadata: Dict[str, Any] = {}

    def get_row(self, label: str) -> Optional[Row]:
        return self._rows.get(label)

    def add_row(self, row: Row) -> Row:
        if row.label is None:
            raise ValueError("Cannot add an unlabeled row to a record")
        if row.label in self._rows:
            raise ValueError(f"Record already has a row labeled {row.label!r}")
        self._rows[row.label] = row
        return row

    @property
    def rows(self) -> List[Row]:
        return list(self._rows.values())

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(list(self._rows.values()))

    def __contains__(self, label: str) -> bool:
        return label in self._rows

    # ── Serialization ──

    def to_dict(
        self,
        max_rows: Optional[int] = None,
        max_subtable_rows: Optional[int] = None,
        sort_column: Any = None,
    ) -> Dict[str, Any]:
        """Return a plain structure with rows sorted and truncated.

        Rows are ordered by ``sort_column`` descending (stable, so ties keep
        insertion order) and everything past ``max_rows`` is dropped. Every
        subtable is handled the same way using ``max_subtable_rows``. A limit
        of ``None`` keeps all rows.
        """
        rows = list(self._rows.values())
        if sort_column is not None:
            key = column_name(sort_column)
            rows = sorted(rows, key=lambda r: r.columns.get(key, 0), reverse=True)
        if max_rows is not None:
            rows = rows[:max_rows]

        serialized_rows = []
        for row in rows:
            entry: Dict[str, Any] = {"label": row.label, "columns": dict(row.columns)}
            if row.metadata:
                entry["metadata"] = row.metadata
            if row.subtable is not None:
                entry["subtable"] = row.subtable.to_dict(
                    max_subtable_rows, max_subtable_rows, sort_column
                )
            serialized_rows.append(entry)

        return {"metadata": dict(self.metadata), "rows": serialized_rows}

    def serialize(
        self,
        max_rows: Optional[int] = None,
        max_subtable_rows: Optional[int] = None,
        sort_column: Any = None,
    ) -> bytes:
        """Serialize to compact JSON bytes (see ``to_dict`` for truncation)."""
        payload = self.to_dict(max_rows, max_subtable_rows, sort_column)
        return json.dumps(payload, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        record = cls()
        record.metadata = dict(data.get("metadata") or {})
        for entry in data.get("rows", []):
            row = Row(entry["label"], entry.get("columns"), entry.get("metadata"))
            if "subtable" in entry:
                row.subtable = cls.from_dict(entry["subtable"])
            record.add_row(row)
        return record

    @classmethod
    def unserialize(cls, blob: bytes) -> "Record":
        return cls.from_dict(json.loads(blob))

"""GAIMPORT — Events Importer.

Event category, action and name are each reported against the other two,
giving six two-level records (``Events_category_action`` etc.). One query per
dimension pair feeds both orientations of that pair.
"""

from datetime import date
from typing import Dict, Tuple

from gaimport.core.aggregation import (
    NOT_SET_LABEL,
    add_row_to_subtable,
    add_row_to_table,
    clean_label,
    insert_record,
)
from gaimport.core.datatable import Record
from gaimport.core.metric_registry import EVENT_METRICS, Metric
from gaimport.importers.base import ImportState, RecordImporter

EVENT_DIMENSIONS: Dict[str, str] = {
    "category": "ga:eventCategory",
    "action": "ga:eventAction",
    "name": "ga:eventLabel",
}

DIMENSION_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("category", "action"),
    ("category", "name"),
    ("action", "name"),
)


def record_name(top: str, sub: str) -> str:
    return f"Events_{top}_{sub}"


class EventsImporter(RecordImporter):
    name = "Events"

    def import_records(self, day: date) -> None:
        records: Dict[str, Record] = {}

        for first, second in DIMENSION_PAIRS:
            dimensions = [EVENT_DIMENSIONS[first], EVENT_DIMENSIONS[second]]
            rows = self.query(day, dimensions, EVENT_METRICS)

            forward = records.setdefault(record_name(first, second), Record())
            reverse = records.setdefault(record_name(second, first), Record())
            for row in rows:
                first_label = clean_label(row.metadata.get(dimensions[0]), NOT_SET_LABEL)
                second_label = clean_label(row.metadata.get(dimensions[1]), NOT_SET_LABEL)

                top_level_row = add_row_to_table(forward, row, first_label)
                add_row_to_subtable(top_level_row, row, second_label)

                top_level_row = add_row_to_table(reverse, row, second_label)
                add_row_to_subtable(top_level_row, row, first_label)

        self.state = ImportState.FINALIZING
        for name, record in records.items():
            insert_record(
                self.sink,
                name,
                record,
                self.settings.datatable_archiving_maximum_rows_events,
                self.settings.datatable_archiving_maximum_rows_subtable_events,
                Metric.NB_EVENTS,
            )
        self.state = ImportState.DONE

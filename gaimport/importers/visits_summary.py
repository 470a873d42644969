"""GAIMPORT — Visits Summary Importer.

Writes the day's visit totals as flat numeric records. Runs before every
other importer since later reports assume these totals exist.
"""

from datetime import date

from gaimport.core.aggregation import insert_numeric_records
from gaimport.core.datatable import Row
from gaimport.core.metric_registry import VISIT_METRICS
from gaimport.importers.base import ImportState, RecordImporter


class VisitsSummaryImporter(RecordImporter):
    name = "VisitsSummary"

    def import_records(self, day: date) -> None:
        rows = self.query(day, [], VISIT_METRICS)

        totals = Row(columns={metric: 0 for metric in VISIT_METRICS})
        for row in rows:
            totals.sum_row(row)

        self.state = ImportState.FINALIZING
        insert_numeric_records(self.sink, totals.columns)
        self.state = ImportState.DONE

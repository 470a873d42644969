"""GAIMPORT — Custom Variables Importer.

Builds the ``CustomVariables_valueByName`` record: one top-level row per
custom variable name with a subtable of its values. Every slot is queried
three times (visit, page and conversion scope metrics) against the same
name/value dimensions, and the rows of all three queries are summed into the
same labels. Site search categories and, for ecommerce sites, product
SKU/name/category are folded in under reserved names.
"""

from datetime import date

from gaimport.core.aggregation import (
    DedupGuard,
    add_row_to_subtable,
    add_row_to_table,
    clean_label,
    insert_record,
)
from gaimport.core.datatable import Record, Row
from gaimport.core.metric_registry import (
    ACTION_METRICS,
    CONVERSION_ONLY_METRICS,
    ECOMMERCE_METRICS,
    VISIT_METRICS,
    Metric,
)
from gaimport.importers.base import ImportState, RecordImporter

RECORD_NAME = "CustomVariables_valueByName"
LABEL_CUSTOM_VALUE_NOT_DEFINED = "Value not defined"

SCOPE_VISIT = "visit"
SCOPE_PAGE = "page"
SCOPE_CONVERSION = "conversion"

SEARCH_CATEGORY_KEY = "_pk_scat"
SEARCH_CATEGORY_DIMENSION = "ga:searchCategory"

ECOMMERCE_DIMENSIONS = {
    "ga:productSku": "_pks",
    "ga:productName": "_pkn",
    "ga:productCategory": "_pkc",
}


def key_dimension(index: int) -> str:
    return f"ga:customVarName{index}"


def value_dimension(index: int) -> str:
    return f"ga:customVarValue{index}"


class CustomVariablesImporter(RecordImporter):
    name = "CustomVariables"

    @property
    def maximum_rows(self) -> int:
        if self.is_ecommerce_enabled():
            return self.settings.max_rows_when_ecommerce
        return self.settings.datatable_archiving_maximum_rows_custom_variables

    @property
    def maximum_subtable_rows(self) -> int:
        if self.is_ecommerce_enabled():
            return self.settings.max_rows_when_ecommerce
        return self.settings.datatable_archiving_maximum_rows_subtable_custom_variables

    def import_records(self, day: date) -> None:
        record = Record()
        slots_seen = DedupGuard()

        for index in range(1, self.settings.num_custom_variables + 1):
            self._query_custom_variable_slot(index, day, record, slots_seen)

        self._query_site_search_categories(day, record)
        self._query_ecommerce(day, record)

        self.state = ImportState.FINALIZING
        insert_record(
            self.sink,
            RECORD_NAME,
            record,
            self.maximum_rows,
            self.maximum_subtable_rows,
            Metric.NB_VISITS,
        )
        self.state = ImportState.DONE

    def _query_custom_variable_slot(
        self, index: int, day: date, record: Record, slots_seen: DedupGuard
    ) -> None:
        dimensions = [key_dimension(index), value_dimension(index)]
        scoped_metrics = (
            (SCOPE_VISIT, VISIT_METRICS),
            (SCOPE_PAGE, ACTION_METRICS),
            (SCOPE_CONVERSION, CONVERSION_ONLY_METRICS),
        )
        for scope, metrics in scoped_metrics:
            rows = self.query(day, dimensions, metrics)
            for row in rows:
                self._merge_custom_variable_row(record, row, scope, index, slots_seen)

    def _merge_custom_variable_row(
        self, record: Record, row: Row, scope: str, index: int, slots_seen: DedupGuard
    ) -> None:
        key = clean_label(row.metadata.get(key_dimension(index)), LABEL_CUSTOM_VALUE_NOT_DEFINED)
        value = clean_label(
            row.metadata.get(value_dimension(index)), LABEL_CUSTOM_VALUE_NOT_DEFINED
        )

        top_level_row = add_row_to_table(record, row, key)
        add_row_to_subtable(top_level_row, row, value)

        if slots_seen.first_seen(key, scope, index):
            top_level_row.metadata.setdefault("slots", []).append(
                {"scope": scope, "index": index}
            )

    def _query_site_search_categories(self, day: date, record: Record) -> None:
        rows = self.query(day, [SEARCH_CATEGORY_DIMENSION], ACTION_METRICS)
        for row in rows:
            category = clean_label(
                row.metadata.get(SEARCH_CATEGORY_DIMENSION), LABEL_CUSTOM_VALUE_NOT_DEFINED
            )
            top_level_row = add_row_to_table(record, row, SEARCH_CATEGORY_KEY)
            add_row_to_subtable(top_level_row, row, category)

    def _query_ecommerce(self, day: date, record: Record) -> None:
        if not self.is_ecommerce_enabled():
            self.logger.debug(
                "Ecommerce disabled, skipping product custom variables",
                extra={"site_id": self.site_id, "day": day.isoformat()},
            )
            return

        for dimension, cvar_name in ECOMMERCE_DIMENSIONS.items():
            rows = self.query(day, [dimension], ECOMMERCE_METRICS)
            for row in rows:
                cvar_value = clean_label(
                    row.metadata.get(dimension), LABEL_CUSTOM_VALUE_NOT_DEFINED
                )
                top_level_row = add_row_to_table(record, row, cvar_name)
                add_row_to_subtable(top_level_row, row, cvar_value)

"""GAIMPORT — Google Analytics Query Service.

Translates metric identifiers into GA metric names, runs the report through
the API client and converts the raw response rows into ``Row``s that carry
the dimension values as metadata and the requested metrics as columns.
"""

from datetime import date
from typing import Any, Dict, List, Sequence

from gaimport.connectors.google.client import GoogleAnalyticsAPIError, GoogleAnalyticsClient
from gaimport.core.datatable import Row
from gaimport.core.logging import get_logger
from gaimport.core.metric_registry import Metric

logger = get_logger("google.query")

# Several identifiers may share one GA metric; it is requested once.
GA_METRIC_NAMES: Dict[Metric, str] = {
    Metric.NB_UNIQ_VISITORS: "ga:users",
    Metric.NB_VISITS: "ga:sessions",
    Metric.NB_ACTIONS: "ga:hits",
    Metric.SUM_VISIT_LENGTH: "ga:sessionDuration",
    Metric.BOUNCE_COUNT: "ga:bounces",
    Metric.NB_VISITS_CONVERTED: "ga:goalCompletionsAll",
    Metric.NB_CONVERSIONS: "ga:goalCompletionsAll",
    Metric.REVENUE: "ga:goalValueAll",
    Metric.PAGE_NB_HITS: "ga:pageviews",
    Metric.PAGE_SUM_TIME_SPENT: "ga:timeOnPage",
    Metric.PAGE_SUM_TIME_GENERATION: "ga:pageLoadTime",
    Metric.PAGE_NB_HITS_WITH_TIME_GENERATION: "ga:pageLoadSample",
    Metric.ECOMMERCE_ITEM_REVENUE: "ga:itemRevenue",
    Metric.ECOMMERCE_ITEM_QUANTITY: "ga:itemQuantity",
    Metric.ECOMMERCE_ITEM_PRICE: "ga:revenuePerItem",
    Metric.ECOMMERCE_ORDERS: "ga:uniquePurchases",
    Metric.GOAL_NB_CONVERSIONS: "ga:goalCompletionsAll",
    Metric.GOAL_NB_VISITS_CONVERTED: "ga:goalCompletionsAll",
    Metric.GOAL_ECOMMERCE_REVENUE_SUBTOTAL: "ga:transactionRevenue",
    Metric.GOAL_ECOMMERCE_REVENUE_TAX: "ga:transactionTax",
    Metric.GOAL_ECOMMERCE_REVENUE_SHIPPING: "ga:transactionShipping",
    Metric.GOAL_ECOMMERCE_ITEMS: "ga:itemQuantity",
    Metric.NB_EVENTS: "ga:totalEvents",
    Metric.SUM_EVENT_VALUE: "ga:eventValue",
}

# GA v3 accepts at most this many metrics per request
MAX_METRICS_PER_QUERY = 10


def _parse_number(value: Any) -> float:
    """Parse a GA metric cell, keeping integers integral."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(number) if number.is_integer() else number


def _ga_metric_names(metrics: Sequence[Metric]) -> List[str]:
    names: List[str] = []
    for metric in metrics:
        try:
            ga_name = GA_METRIC_NAMES[Metric(metric)]
        except (KeyError, ValueError):
            raise ValueError(f"No Google Analytics metric mapped for '{metric}'") from None
        if ga_name not in names:
            names.append(ga_name)
    return names


def transform_report(
    report: Dict[str, Any], dimensions: Sequence[str], metrics: Sequence[Metric]
) -> List[Row]:
    """Convert a raw report into rows keyed by metric identifier."""
    headers = [h.get("name") for h in report.get("columnHeaders", [])]
    rows: List[Row] = []

    for raw in report.get("rows", []):
        cells = dict(zip(headers, raw))
        metadata = {dim: cells.get(dim, "") for dim in dimensions}
        columns = {
            Metric(m).value: _parse_number(cells.get(GA_METRIC_NAMES[Metric(m)]))
            for m in metrics
        }
        rows.append(Row(columns=columns, metadata=metadata))

    return rows


class GoogleAnalyticsQueryService:
    """Query service backed by the Core Reporting API."""

    def __init__(self, client: GoogleAnalyticsClient):
        self.client = client

    def query(
        self, day: date, dimensions: Sequence[str], metrics: Sequence[Metric]
    ) -> List[Row]:
        ga_metrics = _ga_metric_names(metrics)
        if len(ga_metrics) > MAX_METRICS_PER_QUERY:
            raise ValueError(
                f"Too many metrics in one query ({len(ga_metrics)} > {MAX_METRICS_PER_QUERY})"
            )

        report = self.client.get_report(day, list(dimensions), ga_metrics)

        headers = {h.get("name") for h in report.get("columnHeaders", [])}
        missing = [name for name in list(dimensions) + ga_metrics if name not in headers]
        if report.get("rows") and missing:
            raise GoogleAnalyticsAPIError(
                f"Report response is missing columns: {', '.join(missing)}"
            )

        rows = transform_report(report, dimensions, metrics)
        logger.info(
            f"Query [{', '.join(dimensions) or 'totals'}] returned {len(rows)} rows",
            extra={"day": day.isoformat()},
        )
        return rows

"""GAIMPORT — Metric Registry.

Defines the metric identifiers that appear as columns in archived records and
the named, ordered metric sets importers request together in one query.
Column order in emitted records follows the order of the set.
"""

from enum import Enum
from typing import Tuple


class Metric(str, Enum):
    """Column identifiers used in archived records."""

    # Visits
    NB_UNIQ_VISITORS = "nb_uniq_visitors"
    NB_VISITS = "nb_visits"
    NB_ACTIONS = "nb_actions"
    SUM_VISIT_LENGTH = "sum_visit_length"
    BOUNCE_COUNT = "bounce_count"
    NB_VISITS_CONVERTED = "nb_visits_converted"
    NB_CONVERSIONS = "nb_conversions"
    REVENUE = "revenue"

    # Actions / pages
    PAGE_NB_HITS = "nb_hits"
    PAGE_SUM_TIME_SPENT = "sum_time_spent"
    PAGE_SUM_TIME_GENERATION = "sum_time_generation"
    PAGE_NB_HITS_WITH_TIME_GENERATION = "nb_hits_with_time_generation"

    # Ecommerce items
    ECOMMERCE_ITEM_REVENUE = "revenue_item"
    ECOMMERCE_ITEM_QUANTITY = "quantity"
    ECOMMERCE_ITEM_PRICE = "price"
    ECOMMERCE_ORDERS = "orders"

    # Conversions only
    GOAL_NB_CONVERSIONS = "goal_nb_conversions"
    GOAL_NB_VISITS_CONVERTED = "goal_nb_visits_converted"
    GOAL_ECOMMERCE_REVENUE_SUBTOTAL = "revenue_subtotal"
    GOAL_ECOMMERCE_REVENUE_TAX = "revenue_tax"
    GOAL_ECOMMERCE_REVENUE_SHIPPING = "revenue_shipping"
    GOAL_ECOMMERCE_ITEMS = "items"

    # Events
    NB_EVENTS = "nb_events"
    SUM_EVENT_VALUE = "sum_event_value"


# ─────────────────────────────────────────────
# METRIC SETS — requested together in one query
# ─────────────────────────────────────────────

MetricSet = Tuple[Metric, ...]

VISIT_METRICS: MetricSet = (
    Metric.NB_UNIQ_VISITORS,
    Metric.NB_VISITS,
    Metric.NB_ACTIONS,
    Metric.SUM_VISIT_LENGTH,
    Metric.BOUNCE_COUNT,
    Metric.NB_VISITS_CONVERTED,
)

CONVERSION_AWARE_VISIT_METRICS: MetricSet = VISIT_METRICS + (
    Metric.NB_CONVERSIONS,
    Metric.REVENUE,
)

ACTION_METRICS: MetricSet = (
    Metric.NB_VISITS,
    Metric.NB_UNIQ_VISITORS,
    Metric.PAGE_NB_HITS,
)

PAGE_METRICS: MetricSet = ACTION_METRICS + (
    Metric.PAGE_SUM_TIME_SPENT,
    Metric.PAGE_SUM_TIME_GENERATION,
    Metric.PAGE_NB_HITS_WITH_TIME_GENERATION,
)

ECOMMERCE_METRICS: MetricSet = (
    Metric.ECOMMERCE_ITEM_REVENUE,
    Metric.ECOMMERCE_ITEM_QUANTITY,
    Metric.ECOMMERCE_ITEM_PRICE,
    Metric.ECOMMERCE_ORDERS,
    Metric.NB_VISITS,
    Metric.NB_ACTIONS,
)

CONVERSION_ONLY_METRICS: MetricSet = (
    Metric.GOAL_NB_CONVERSIONS,
    Metric.GOAL_NB_VISITS_CONVERTED,
    Metric.GOAL_ECOMMERCE_REVENUE_SUBTOTAL,
    Metric.GOAL_ECOMMERCE_REVENUE_TAX,
    Metric.GOAL_ECOMMERCE_REVENUE_SHIPPING,
    Metric.GOAL_ECOMMERCE_ITEMS,
)

EVENT_METRICS: MetricSet = (
    Metric.NB_VISITS,
    Metric.NB_UNIQ_VISITORS,
    Metric.NB_EVENTS,
    Metric.SUM_EVENT_VALUE,
)

"""GAIMPORT — Google Analytics → Target Goal Mapper.

Translates one GA goal into a target goal definition, or raises
``CannotImportGoal`` naming why the goal has no faithful equivalent.
"""

import re
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from gaimport.core.contracts import CapabilityLookup, SiteLookup
from gaimport.core.logging import get_logger
from gaimport.models.goal_models import (
    EventDetails,
    FunnelStep,
    GoalSource,
    GoalTarget,
    UrlDestinationDetails,
    VisitTimeOnSiteDetails,
)

logger = get_logger("goals.mapper")

DESCRIPTION_TEMPLATE = "(imported from Google Analytics, original id = {goal_id})"
GOAL_ID_PATTERN = re.compile(r"id = ([^)]+)\)")

MANUALLY = "manually"

EVENT_CONDITION_ATTRIBUTES = {
    "category": "event_category",
    "action": "event_action",
    "label": "event_name",
}


class GoalImportFailure(str, Enum):
    """Why a goal cannot be imported."""

    MULTIPLE_EVENT_CONDITIONS = "multiple event conditions unsupported"
    EVENT_VALUE_UNSUPPORTED = "event value goals unsupported"
    UNKNOWN_MATCH_TYPE = "unknown match type"
    UNSUPPORTED_COMPARISON_TYPE = "unsupported comparison type"
    FUNNEL_CAPABILITY_MISSING = "funnel steps require funnel capability"
    UNSUPPORTED_GOAL_TYPE = "unsupported goal type"


class CannotImportGoal(Exception):
    """Raised when a GA goal has no faithful target representation."""

    def __init__(self, goal_id: str, reason: GoalImportFailure, detail: str = ""):
        self.goal_id = goal_id
        self.reason = reason
        self.detail = detail
        message = f"Cannot import goal {goal_id}: {reason.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


def _url_has_site_url_prefix(pattern: str, site_urls: Sequence[str]) -> bool:
    return any(pattern.startswith(url) for url in site_urls)


def map_match_type(
    goal_id: str,
    match_type: str,
    pattern: str,
    site_urls: Sequence[str] = (),
) -> Tuple[str, str]:
    """Return ``(pattern_type, pattern)`` for a GA match type.

    Exact matches are turned into absolute URLs using the first site URL
    unless the pattern already starts with one of ``site_urls``.
    """
    normalized = (match_type or "").lower()
    if normalized == "regexp":
        return "regex", pattern
    if normalized in ("head", "begins_with"):
        return "regex", "^" + re.escape(pattern)
    if normalized == "exact":
        if site_urls and not _url_has_site_url_prefix(pattern, site_urls):
            base_url = site_urls[0]
            if not base_url.endswith("/") and not pattern.startswith("/"):
                base_url += "/"
            pattern = base_url + pattern
        return "exact", pattern
    raise CannotImportGoal(
        goal_id, GoalImportFailure.UNKNOWN_MATCH_TYPE, f"'{match_type}'"
    )


class GoalMapper:
    """Maps GA goal definitions onto target goals."""

    def __init__(self, site_lookup: SiteLookup, capabilities: CapabilityLookup):
        self.site_lookup = site_lookup
        self.capabilities = capabilities

    def map(self, goal: GoalSource, site_id: int) -> GoalTarget:
        """Translate ``goal`` or raise ``CannotImportGoal``."""
        result = self._map_basic_goal_properties(goal)

        details = goal.details
        if isinstance(details, EventDetails):
            self._map_event_goal(result, goal, details)
        elif isinstance(details, UrlDestinationDetails):
            self._map_url_destination_goal(result, goal, details, site_id)
        elif isinstance(details, VisitTimeOnSiteDetails):
            self._map_visit_duration_goal(result, goal, details)
        else:
            raise CannotImportGoal(
                goal.id, GoalImportFailure.UNSUPPORTED_GOAL_TYPE, goal.type
            )
        return result

    def map_manual_goal(self, goal: GoalSource) -> GoalTarget:
        """Map a goal that is only ever triggered manually."""
        result = self._map_basic_goal_properties(goal)
        result.match_attribute = MANUALLY
        result.pattern = MANUALLY
        result.pattern_type = MANUALLY
        return result

    def get_goal_id_from_description(self, goal: GoalTarget) -> Optional[str]:
        """Recover the GA goal id embedded in a target goal's description."""
        match = GOAL_ID_PATTERN.search(goal.description or "")
        if not match:
            return None

        goal_id = match.group(1).strip()
        if not goal_id:
            return None

        logger.debug(
            f'Found goal "{goal.name}" to be mapped to GA goal with ID = {goal_id}.',
            extra={"goal_id": goal_id},
        )
        return goal_id

    # ── Per-type mapping ──

    def _map_basic_goal_properties(self, goal: GoalSource) -> GoalTarget:
        return GoalTarget(
            name=goal.name,
            description=DESCRIPTION_TEMPLATE.format(goal_id=goal.id),
            revenue=goal.value or 0.0,
        )

    def _map_event_goal(
        self, result: GoalTarget, goal: GoalSource, details: EventDetails
    ) -> None:
        if len(details.conditions) > 1:
            raise CannotImportGoal(goal.id, GoalImportFailure.MULTIPLE_EVENT_CONDITIONS)
        if not details.conditions:
            raise CannotImportGoal(
                goal.id, GoalImportFailure.UNSUPPORTED_GOAL_TYPE, "event goal without conditions"
            )

        condition = details.conditions[0]
        condition_type = condition.type.lower()
        if condition_type == "value":
            raise CannotImportGoal(goal.id, GoalImportFailure.EVENT_VALUE_UNSUPPORTED)
        if condition_type not in EVENT_CONDITION_ATTRIBUTES:
            raise CannotImportGoal(
                goal.id,
                GoalImportFailure.UNSUPPORTED_GOAL_TYPE,
                f"event condition type '{condition.type}'",
            )
        result.match_attribute = EVENT_CONDITION_ATTRIBUTES[condition_type]

        pattern_type, pattern = map_match_type(
            goal.id, condition.match_type, condition.expression
        )
        # event values never include the hostname, so exact URL matching cannot apply
        if pattern_type == "exact":
            pattern_type = "contains"
        result.pattern_type = pattern_type
        result.pattern = pattern

        if details.use_event_value:
            result.use_event_value_as_revenue = True

    def _map_url_destination_goal(
        self,
        result: GoalTarget,
        goal: GoalSource,
        details: UrlDestinationDetails,
        site_id: int,
    ) -> None:
        result.match_attribute = "url"
        result.pattern_type, result.pattern = map_match_type(
            goal.id, details.match_type, details.url, self.site_lookup.get_site_urls(site_id)
        )
        result.case_sensitive = bool(details.case_sensitive)

        if not details.steps:
            return

        if not self.capabilities.is_funnel_capability_available():
            raise CannotImportGoal(
                goal.id,
                GoalImportFailure.FUNNEL_CAPABILITY_MISSING,
                f"{len(details.steps)} steps",
            )
        result.funnel = self._map_funnel_steps(details)

    def _map_visit_duration_goal(
        self, result: GoalTarget, goal: GoalSource, details: VisitTimeOnSiteDetails
    ) -> None:
        result.match_attribute = "visit_duration"
        if details.comparison_type.lower() != "greater_than":
            raise CannotImportGoal(
                goal.id,
                GoalImportFailure.UNSUPPORTED_COMPARISON_TYPE,
                f"'{details.comparison_type}'",
            )
        result.pattern_type = "greater_than"
        result.pattern = details.comparison_value

    def _map_funnel_steps(self, details: UrlDestinationDetails) -> List[FunnelStep]:
        steps = [
            FunnelStep(name=step.name, pattern=step.url, pattern_type="path_equals")
            for step in details.steps
        ]
        if details.first_step_required:
            steps[0].required = True
        return steps

"""GAIMPORT — Goal Definition Schemas.

``GoalSource`` is a goal as configured in Google Analytics. Its trigger is a
tagged union: event conditions, a URL destination, or a visit duration. A
goal without any of them (e.g. pages-per-visit goals) has ``details=None``.

``GoalTarget`` is the goal definition written to the target platform.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


# ─────────────────────────────────────────────
# SOURCE — Google Analytics goals
# ─────────────────────────────────────────────


class EventCondition(BaseModel):
    type: str  # CATEGORY | ACTION | LABEL | VALUE
    match_type: str = ""  # EXACT | BEGINS_WITH | REGEXP
    expression: str = ""
    comparison_type: str = ""  # only for VALUE conditions
    comparison_value: Optional[str] = None


class EventDetails(BaseModel):
    kind: Literal["event"] = "event"
    conditions: List[EventCondition] = []
    use_event_value: bool = False


class UrlDestinationStep(BaseModel):
    number: int = 0
    name: str = ""
    url: str


class UrlDestinationDetails(BaseModel):
    kind: Literal["url_destination"] = "url_destination"
    url: str
    match_type: str  # HEAD | EXACT | REGEX
    case_sensitive: bool = False
    first_step_required: bool = False
    steps: List[UrlDestinationStep] = []


class VisitTimeOnSiteDetails(BaseModel):
    kind: Literal["visit_time_on_site"] = "visit_time_on_site"
    comparison_type: str  # GREATER_THAN | LESS_THAN
    comparison_value: str


GoalDetails = Annotated[
    Union[EventDetails, UrlDestinationDetails, VisitTimeOnSiteDetails],
    Field(discriminator="kind"),
]


class GoalSource(BaseModel):
    """A goal as returned by the Management API."""

    id: str
    name: str = ""
    value: float = 0.0
    active: bool = True
    type: str = ""
    details: Optional[GoalDetails] = None

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "GoalSource":
        """Build from a Management API goal resource."""
        details: Optional[BaseModel] = None

        if item.get("eventDetails"):
            raw = item["eventDetails"]
            details = EventDetails(
                use_event_value=bool(raw.get("useEventValue", False)),
                conditions=[
                    EventCondition(
                        type=c.get("type", ""),
                        match_type=c.get("matchType", ""),
                        expression=c.get("expression", ""),
                        comparison_type=c.get("comparisonType", ""),
                        comparison_value=(
                            str(c["comparisonValue"])
                            if c.get("comparisonValue") is not None
                            else None
                        ),
                    )
                    for c in raw.get("eventConditions", [])
                ],
            )
        elif item.get("urlDestinationDetails"):
            raw = item["urlDestinationDetails"]
            details = UrlDestinationDetails(
                url=raw.get("url", ""),
                match_type=raw.get("matchType", ""),
                case_sensitive=bool(raw.get("caseSensitive", False)),
                first_step_required=bool(raw.get("firstStepRequired", False)),
                steps=[
                    UrlDestinationStep(
                        number=s.get("number", 0), name=s.get("name", ""), url=s.get("url", "")
                    )
                    for s in raw.get("steps", [])
                ],
            )
        elif item.get("visitTimeOnSiteDetails"):
            raw = item["visitTimeOnSiteDetails"]
            details = VisitTimeOnSiteDetails(
                comparison_type=raw.get("comparisonType", ""),
                comparison_value=str(raw.get("comparisonValue", "")),
            )

        return cls(
            id=str(item["id"]),
            name=item.get("name", ""),
            value=float(item.get("value") or 0.0),
            active=bool(item.get("active", True)),
            type=item.get("type", ""),
            details=details,
        )


# ─────────────────────────────────────────────
# TARGET — goals in the target platform
# ─────────────────────────────────────────────


class FunnelStep(BaseModel):
    name: str
    pattern: str
    pattern_type: str = "path_equals"
    required: bool = False


class GoalTarget(BaseModel):
    name: str
    description: str
    match_attribute: str = ""
    pattern: str = ""
    pattern_type: str = ""
    case_sensitive: bool = False
    revenue: float = 0.0
    allow_multiple_conversions: bool = False
    use_event_value_as_revenue: bool = False
    funnel: Optional[List[FunnelStep]] = None

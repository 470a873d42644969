"""GAIMPORT — Goal Configuration Import.

Creates target goals for every GA goal of a site. Goals imported by an
earlier run are recognised by the source id in their description and are
skipped. A goal that cannot be mapped is reported and the run continues.
"""

from typing import Iterable, List, Protocol

from sqlmodel import Session

from gaimport.config import settings
from gaimport.connectors.google.client import GoogleAnalyticsClient
from gaimport.core.logging import get_logger
from gaimport.goals.mapper import CannotImportGoal, GoalMapper
from gaimport.models.goal_models import GoalSource, GoalTarget
from gaimport.models.import_models import GoalImportFailureReport, GoalImportResult
from gaimport.sites import SettingsCapabilityLookup, StaticSiteLookup
from gaimport.storage.archive_writer import SQLGoalStore

logger = get_logger("goals.importer")


class GoalStore(Protocol):
    def list_goals(self) -> List[GoalTarget]: ...

    def add_goal(self, goal: GoalTarget): ...


def import_goals(
    site_id: int,
    goals: Iterable[GoalSource],
    mapper: GoalMapper,
    store: GoalStore,
    create_manual_goals_for_unsupported: bool | None = None,
) -> GoalImportResult:
    """Import ``goals`` into ``store``."""
    if create_manual_goals_for_unsupported is None:
        create_manual_goals_for_unsupported = settings.create_manual_goals_for_unsupported

    existing_ids = set()
    for target in store.list_goals():
        goal_id = mapper.get_goal_id_from_description(target)
        if goal_id is not None:
            existing_ids.add(goal_id)

    result = GoalImportResult(site_id=site_id)

    for goal in goals:
        if goal.id in existing_ids:
            result.skipped_existing.append(goal.id)
            continue

        try:
            target = mapper.map(goal, site_id)
        except CannotImportGoal as e:
            logger.warning(
                f"Goal '{goal.name}' cannot be imported: {e}",
                extra={"site_id": site_id, "goal_id": goal.id},
            )
            report = GoalImportFailureReport(
                goal_id=goal.id,
                goal_name=goal.name,
                reason=e.reason.value,
                detail=e.detail,
            )
            if create_manual_goals_for_unsupported:
                store.add_goal(mapper.map_manual_goal(goal))
                report.imported_as_manual = True
                existing_ids.add(goal.id)
            result.failures.append(report)
            continue

        store.add_goal(target)
        existing_ids.add(goal.id)
        result.created.append(goal.id)

    logger.info(
        f"Goal import finished: {len(result.created)} created, "
        f"{len(result.skipped_existing)} already present, {len(result.failures)} failed",
        extra={"site_id": site_id},
    )
    return result


def import_goals_from_google(
    session: Session, site_id: int, client: GoogleAnalyticsClient | None = None
) -> GoalImportResult:
    """Fetch the view's goals from Google Analytics and import them."""
    with client or GoogleAnalyticsClient() as client:
        items = client.list_goals()
    goals = [GoalSource.from_api(item) for item in items]
    mapper = GoalMapper(StaticSiteLookup(), SettingsCapabilityLookup())
    return import_goals(site_id, goals, mapper, SQLGoalStore(session, site_id))

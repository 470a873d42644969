from datetime import date

import httpx
from sqlmodel import select

from gaimport.connectors.google.client import GoogleAnalyticsClient
from gaimport.goals.importer import import_goals_from_google
from gaimport.importers.pipeline import import_day_from_google
from gaimport.models.archive_models import ArchiveBlob, ArchiveNumeric, ImportedGoal

DAY = date(2019, 3, 14)


def _client(handler):
    return GoogleAnalyticsClient(
        access_token="token",
        view_id="1234",
        transport=httpx.MockTransport(handler),
        sleep=lambda seconds: None,
    )


def _report_handler(rows_by_dimensions, forbidden=()):
    """Answer report requests with canned rows keyed by the dimensions parameter."""

    def handler(request):
        dimensions = request.url.params.get("dimensions", "")
        if dimensions in forbidden:
            return httpx.Response(
                403, json={"error": {"message": "User does not have permission", "code": 403}}
            )
        names = [d for d in dimensions.split(",") if d] + request.url.params["metrics"].split(",")
        rows = [[row.get(name, "0") for name in names] for row in rows_by_dimensions.get(dimensions, [])]
        return httpx.Response(
            200, json={"columnHeaders": [{"name": name} for name in names], "rows": rows}
        )

    return handler


REPORTS = {
    "": [{"ga:sessions": "10", "ga:users": "8"}],
    "ga:eventCategory,ga:eventAction": [
        {"ga:eventCategory": "video", "ga:eventAction": "play", "ga:totalEvents": "3"}
    ],
}


def test_day_import_from_google_writes_records(session, test_settings):
    result = import_day_from_google(
        session, 1, DAY, settings=test_settings, client=_client(_report_handler(REPORTS))
    )

    assert result.complete
    visits = session.exec(select(ArchiveNumeric).where(ArchiveNumeric.name == "nb_visits")).one()
    assert visits.value == 10

    blob = session.exec(
        select(ArchiveBlob).where(ArchiveBlob.name == "Events_category_action")
    ).one()
    assert b"video" in blob.value
    assert b"play" in blob.value


def test_day_import_from_google_reports_api_failures(session, test_settings):
    handler = _report_handler(REPORTS, forbidden={"ga:eventCategory,ga:eventAction"})

    result = import_day_from_google(session, 1, DAY, settings=test_settings, client=_client(handler))

    assert not result.complete
    assert list(result.failed) == ["Events"]
    assert "permission" in result.failed["Events"]
    assert result.succeeded == ["VisitsSummary", "CustomVariables"]


GOAL_ITEMS = [
    {
        "id": "1",
        "name": "Engaged",
        "type": "VISIT_TIME_ON_SITE",
        "visitTimeOnSiteDetails": {"comparisonType": "GREATER_THAN", "comparisonValue": 300},
    },
    {
        "id": "2",
        "name": "Big spender",
        "type": "EVENT",
        "eventDetails": {"eventConditions": [{"type": "VALUE", "comparisonType": "GREATER_THAN"}]},
    },
    {
        "id": "3",
        "name": "Played video",
        "type": "EVENT",
        "eventDetails": {
            "eventConditions": [{"type": "CATEGORY", "matchType": "REGEXP", "expression": "vid.*"}]
        },
    },
]


def _goals_handler(request):
    assert request.url.path.endswith("/profiles/1234/goals")
    return httpx.Response(200, json={"items": GOAL_ITEMS})


def test_goal_import_from_google_creates_goals_once(session):
    first = import_goals_from_google(session, 1, client=_client(_goals_handler))
    second = import_goals_from_google(session, 1, client=_client(_goals_handler))

    assert first.created == ["1", "3"]
    assert [f.goal_id for f in first.failures] == ["2"]
    assert second.created == []
    assert second.skipped_existing == ["1", "3"]

    stored = session.exec(select(ImportedGoal).where(ImportedGoal.site_id == 1)).all()
    assert sorted(goal.match_attribute for goal in stored) == ["event_category", "visit_duration"]

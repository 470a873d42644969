"""GAIMPORT — Day Import Pipeline.

Runs every configured record importer for one site and day, in order:
  query → merge → write → commit (per importer)

A failing importer is rolled back and reported; its siblings still run and
the day is reported as incomplete so it can be retried later.
"""

import time
from datetime import date
from typing import List, Sequence, Type

from sqlmodel import Session

from gaimport.config import Settings, settings as default_settings
from gaimport.connectors.google.client import GoogleAnalyticsClient
from gaimport.connectors.google.query_service import GoogleAnalyticsQueryService
from gaimport.core.aggregation import LabelingError
from gaimport.core.contracts import QueryService, SiteLookup
from gaimport.core.logging import get_logger
from gaimport.importers.base import ImportState, RecordImporter
from gaimport.importers.custom_variables import CustomVariablesImporter
from gaimport.importers.events import EventsImporter
from gaimport.importers.visits_summary import VisitsSummaryImporter
from gaimport.models.import_models import DayImportResult
from gaimport.sites import StaticSiteLookup
from gaimport.storage.archive_writer import ArchiveWriter

logger = get_logger("importers.pipeline")

# Visits summary must be first
RECORD_IMPORTERS: List[Type[RecordImporter]] = [
    VisitsSummaryImporter,
    CustomVariablesImporter,
    EventsImporter,
]


def run_day_import(
    session: Session,
    site_id: int,
    day: date,
    query_service: QueryService,
    site_lookup: SiteLookup,
    importers: Sequence[Type[RecordImporter]] = RECORD_IMPORTERS,
    settings: Settings | None = None,
) -> DayImportResult:
    """Run ``importers`` sequentially for ``day`` and report the outcome."""
    settings = settings or default_settings
    writer = ArchiveWriter(session, site_id, day)
    result = DayImportResult(site_id=site_id, day=day.isoformat())

    for importer_class in importers:
        importer = importer_class(query_service, site_id, writer, site_lookup, settings)
        context = {"site_id": site_id, "day": day.isoformat(), "importer": importer.name}
        started = time.monotonic()

        try:
            importer.import_records(day)
            writer.commit()
        except LabelingError:
            writer.rollback()
            raise
        except Exception as e:
            writer.rollback()
            importer.state = ImportState.FAILED
            result.failed[importer.name] = str(e)
            logger.error(
                f"Importer {importer.name} failed for site {site_id} on {day}: {e}",
                extra=context,
                exc_info=True,
            )
            continue

        duration_ms = int((time.monotonic() - started) * 1000)
        result.succeeded.append(importer.name)
        logger.info(
            f"Imported {importer.name} records",
            extra={**context, "duration_ms": duration_ms},
        )

    if result.complete:
        logger.info(f"Day {day} fully imported for site {site_id}", extra={"site_id": site_id})
    else:
        logger.warning(
            f"Day {day} incomplete for site {site_id}; failed: {', '.join(result.failed)}",
            extra={"site_id": site_id, "day": day.isoformat()},
        )
    return result


def import_day_from_google(
    session: Session,
    site_id: int,
    day: date,
    settings: Settings | None = None,
    client: GoogleAnalyticsClient | None = None,
) -> DayImportResult:
    """Import ``day`` using the configured Google Analytics credentials."""
    with client or GoogleAnalyticsClient() as client:
        return run_day_import(
            session,
            site_id,
            day,
            GoogleAnalyticsQueryService(client),
            StaticSiteLookup(),
            settings=settings,
        )

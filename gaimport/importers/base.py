"""GAIMPORT — Abstract Record Importer."""

from abc import ABC, abstractmethod
from datetime import date
from enum import Enum
from typing import List, Sequence

from gaimport.config import Settings, settings as default_settings
from gaimport.core.contracts import ArchiveSink, QueryService, SiteLookup
from gaimport.core.datatable import Row
from gaimport.core.logging import get_logger
from gaimport.core.metric_registry import Metric


class ImportState(str, Enum):
    NOT_STARTED = "not_started"
    QUERYING = "querying"
    MERGING = "merging"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


class RecordImporter(ABC):
    """Imports the records of one report category for one day.

    Implementations decide which queries to run and how their rows fold into
    records; the helpers in ``gaimport.core.aggregation`` and the metric sets
    in ``gaimport.core.metric_registry`` are shared by all of them. Everything
    scoped to one run (records, dedup guards) is created inside
    ``import_records`` so calling it twice for the same day gives the same
    result.
    """

    name: str = ""

    def __init__(
        self,
        query_service: QueryService,
        site_id: int,
        sink: ArchiveSink,
        site_lookup: SiteLookup,
        settings: Settings | None = None,
    ):
        self.query_service = query_service
        self.site_id = site_id
        self.sink = sink
        self.site_lookup = site_lookup
        self.settings = settings or default_settings
        self.state = ImportState.NOT_STARTED
        self.logger = get_logger(f"importers.{self.name or type(self).__name__}")

    @abstractmethod
    def import_records(self, day: date) -> None:
        """Query, merge and write every record of this category for ``day``."""
        ...

    def is_ecommerce_enabled(self) -> bool:
        return self.site_lookup.is_ecommerce_enabled(self.site_id)

    def query(
        self, day: date, dimensions: Sequence[str], metrics: Sequence[Metric]
    ) -> List[Row]:
        self.state = ImportState.QUERYING
        rows = self.query_service.query(day, dimensions, metrics)
        self.state = ImportState.MERGING
        return rows

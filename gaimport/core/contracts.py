"""GAIMPORT — Collaborator Contracts.

Interfaces the import engine depends on but does not implement itself:
the query service, the archive sink and the site / capability lookups.
"""

from datetime import date
from typing import List, Protocol, Sequence

from gaimport.core.datatable import Row
from gaimport.core.metric_registry import Metric


class QueryService(Protocol):
    """Runs one report query for a day.

    Returns every matching row (pagination is resolved internally). Each row
    carries the requested dimension values in ``metadata`` and the requested
    metrics as columns. Failures raise; an empty list means zero rows.
    """

    def query(
        self, day: date, dimensions: Sequence[str], metrics: Sequence[Metric]
    ) -> List[Row]: ...


class ArchiveSink(Protocol):
    """Persists finished records for one (site, day)."""

    def insert_blob_record(self, name: str, blob: bytes) -> None: ...

    def insert_numeric_record(self, name: str, value: float) -> None: ...


class SiteLookup(Protocol):
    def get_site_urls(self, site_id: int) -> List[str]: ...

    def is_ecommerce_enabled(self, site_id: int) -> bool: ...


class CapabilityLookup(Protocol):
    def is_funnel_capability_available(self) -> bool: ...

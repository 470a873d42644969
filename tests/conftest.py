from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import pytest
from sqlmodel import Session

from gaimport.config import Settings
from gaimport.connectors.google.client import GoogleAnalyticsAPIError
from gaimport.core.datatable import Row
from gaimport.core.metric_registry import Metric
from gaimport.database import build_engine, init_db


class FakeQueryService:
    """Serves canned rows keyed by the requested dimensions.

    Each canned entry is a flat dict of dimension values and metric values;
    only the requested metrics are returned as columns (missing ones as 0).
    """

    def __init__(self, responses: Dict[Tuple[str, ...], List[dict]] | None = None, fail_on=()):
        self.responses = responses or {}
        self.fail_on = {tuple(dims) for dims in fail_on}
        self.calls: List[Tuple[Tuple[str, ...], Tuple[str, ...]]] = []

    def query(self, day, dimensions: Sequence[str], metrics: Sequence[Metric]) -> List[Row]:
        dims = tuple(dimensions)
        self.calls.append((dims, tuple(Metric(m).value for m in metrics)))
        if dims in self.fail_on:
            raise GoogleAnalyticsAPIError(f"quota exceeded for {dims}", 403)

        rows = []
        for entry in self.responses.get(dims, []):
            rows.append(
                Row(
                    columns={Metric(m).value: entry.get(Metric(m).value, 0) for m in metrics},
                    metadata={d: entry.get(d, "") for d in dims},
                )
            )
        return rows


class FakeSink:
    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.numerics: Dict[str, float] = {}

    def insert_blob_record(self, name: str, blob: bytes) -> None:
        self.blobs[name] = blob

    def insert_numeric_record(self, name: str, value: float) -> None:
        self.numerics[name] = value


class FakeSiteLookup:
    def __init__(self, urls=("http://example.com",), ecommerce=False):
        self.urls = list(urls)
        self.ecommerce = ecommerce

    def get_site_urls(self, site_id: int) -> List[str]:
        return list(self.urls)

    def is_ecommerce_enabled(self, site_id: int) -> bool:
        return self.ecommerce


class FakeCapabilities:
    def __init__(self, funnels: bool = False):
        self.funnels = funnels

    def is_funnel_capability_available(self) -> bool:
        return self.funnels


@pytest.fixture
def test_settings():
    return Settings(num_custom_variables=2, log_level="WARNING")


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def session():
    engine = build_engine("sqlite://")
    init_db(engine)
    with Session(engine) as s:
        yield s

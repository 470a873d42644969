"""GAIMPORT — Google Analytics API Client.

Handles authentication, retry logic, rate limiting, and pagination for the
Core Reporting API (v3) and the Management API goal listing.
"""

import time
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx

from gaimport.config import settings
from gaimport.core.logging import get_logger

logger = get_logger("google.client")


class GoogleAnalyticsAPIError(Exception):
    """Raised when the Google Analytics API returns an error."""

    def __init__(self, message: str, status_code: int = 0, error_code: int = 0):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class GoogleAnalyticsClient:
    """Synchronous HTTP client for the Google Analytics v3 APIs."""

    def __init__(
        self,
        access_token: str | None = None,
        view_id: str | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep=time.sleep,
    ):
        self.access_token = access_token or settings.ga_access_token
        self.view_id = view_id or settings.ga_view_id
        self.base_url = settings.ga_base_url.rstrip("/")
        self.max_retries = settings.ga_max_retries
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.Client] = None

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(timeout=60.0, transport=self._transport)
        return self._client

    def close(self) -> None:
        if self._client and not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> "GoogleAnalyticsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Core Request Method ──

    def _request(
        self,
        method: str,
        url: str,
        params: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Make a request with retry + rate-limit handling."""
        headers = {"Authorization": f"Bearer {self.access_token}"}
        client = self._get_client()

        for attempt in range(1, self.max_retries + 1):
            wait = settings.ga_retry_base_delay * (2 ** (attempt - 1))
            try:
                resp = client.request(method, url, params=params, headers=headers)

                # Rate limited
                if resp.status_code == 429 and attempt < self.max_retries:
                    logger.warning(
                        f"Rate limited (429). Retrying in {wait}s (attempt {attempt}/{self.max_retries})",
                        extra={"status_code": 429},
                    )
                    self._sleep(wait)
                    continue

                resp.raise_for_status()
                return resp.json()

            except httpx.HTTPStatusError as e:
                body = (
                    e.response.json()
                    if e.response.headers.get("content-type", "").startswith(
                        "application/json"
                    )
                    else {}
                )
                error_msg = body.get("error", {}).get("message", str(e))
                error_code = body.get("error", {}).get("code", 0)

                if attempt < self.max_retries and e.response.status_code >= 500:
                    logger.warning(
                        f"Server error {e.response.status_code}. Retrying in {wait}s",
                        extra={"status_code": e.response.status_code},
                    )
                    self._sleep(wait)
                    continue

                raise GoogleAnalyticsAPIError(
                    error_msg, e.response.status_code, error_code
                ) from e

            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    logger.warning(f"Request error: {e}. Retrying in {wait}s")
                    self._sleep(wait)
                    continue
                raise GoogleAnalyticsAPIError(
                    f"Connection failed after {self.max_retries} retries: {e}"
                ) from e

        raise GoogleAnalyticsAPIError("Max retries exhausted")

    # ── Reporting ──

    def get_report(
        self,
        day: date,
        dimensions: Sequence[str],
        metrics: Sequence[str],
        max_pages: int = 100,
    ) -> Dict[str, Any]:
        """Fetch every page of a one-day report.

        Returns ``{"columnHeaders": [...], "rows": [[...], ...]}`` with the
        rows of all pages concatenated. Raises ``GoogleAnalyticsAPIError`` if
        the report is not exhausted within ``max_pages`` requests.
        """
        params: Dict[str, Any] = {
            "ids": f"ga:{self.view_id}",
            "start-date": day.isoformat(),
            "end-date": day.isoformat(),
            "metrics": ",".join(metrics),
            "max-results": settings.ga_max_results,
            "samplingLevel": "HIGHER_PRECISION",
            "start-index": 1,
        }
        if dimensions:
            params["dimensions"] = ",".join(dimensions)

        url = f"{self.base_url}/data/ga"
        column_headers: List[Dict[str, Any]] = []
        all_rows: List[List[str]] = []

        for _ in range(max_pages):
            result = self._request("GET", url, params)
            column_headers = result.get("columnHeaders", column_headers)
            rows = result.get("rows") or []
            all_rows.extend(rows)

            if result.get("containsSampledData"):
                logger.warning(
                    f"Report for {', '.join(dimensions) or 'totals'} contains sampled data",
                    extra={"day": day.isoformat()},
                )

            # Check for next page
            if not result.get("nextLink") or not rows:
                break
            params["start-index"] += len(rows)
        else:
            raise GoogleAnalyticsAPIError(
                f"Report for [{', '.join(dimensions)}] still had more rows after "
                f"{max_pages} pages ({len(all_rows)} rows fetched)"
            )

        logger.debug(
            f"Fetched {len(all_rows)} rows for [{', '.join(dimensions)}]",
            extra={"day": day.isoformat()},
        )
        return {"columnHeaders": column_headers, "rows": all_rows}

    # ── Management ──

    def list_goals(
        self, account_id: str | None = None, web_property_id: str | None = None
    ) -> List[Dict[str, Any]]:
        """Fetch the goal definitions configured for the view."""
        account_id = account_id or settings.ga_account_id
        web_property_id = web_property_id or settings.ga_web_property_id
        url = (
            f"{self.base_url}/management/accounts/{account_id}"
            f"/webproperties/{web_property_id}/profiles/{self.view_id}/goals"
        )
        result = self._request("GET", url)
        items = result.get("items", [])
        logger.info(f"Fetched {len(items)} goals from view {self.view_id}")
        return items

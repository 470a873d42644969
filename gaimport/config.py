"""GAIMPORT — Central Configuration via Pydantic Settings."""

import os
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Google Analytics API ──
    ga_access_token: str = ""
    ga_view_id: str = ""
    ga_account_id: str = ""
    ga_web_property_id: str = ""
    ga_base_url: str = "https://www.googleapis.com/analytics/v3"
    ga_max_results: int = 10000
    ga_max_retries: int = 3
    ga_retry_base_delay: float = 2.0  # seconds

    # ── Database ──
    database_url: str = ""

    # ── App ──
    log_level: str = "INFO"

    # ── Row limits for archived records ──
    datatable_archiving_maximum_rows_custom_variables: int = 1000
    datatable_archiving_maximum_rows_subtable_custom_variables: int = 1000
    datatable_archiving_maximum_rows_events: int = 500
    datatable_archiving_maximum_rows_subtable_events: int = 500
    max_rows_when_ecommerce: int = 5000
    num_custom_variables: int = 5

    # ── Imported site ──
    site_urls: List[str] = []
    site_ecommerce_enabled: bool = False

    # ── Goals ──
    funnels_enabled: bool = False
    create_manual_goals_for_unsupported: bool = False

    @property
    def effective_database_url(self) -> str:
        """Return the configured URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        if os.environ.get("GAIMPORT_DATA_DIR"):
            return f"sqlite:///{os.environ['GAIMPORT_DATA_DIR']}/gaimport.db"
        return "sqlite:///./gaimport.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

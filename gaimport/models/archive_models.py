"""GAIMPORT — Archive Storage Models.

One row per (site, day, record name). Re-importing a day overwrites the
stored value, so writes are idempotent.
"""

from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field, UniqueConstraint


class ArchiveBlob(SQLModel, table=True):
    """Serialized hierarchical record."""

    __tablename__ = "archive_blob"
    __table_args__ = (
        UniqueConstraint("site_id", "date", "name", name="uq_archive_blob"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: int = Field(index=True)
    date: str = Field(index=True, description="YYYY-MM-DD")
    name: str = Field(index=True, description="Record name, e.g. CustomVariables_valueByName")
    value: bytes = Field(description="Compact JSON produced by Record.serialize")
    ts_archived: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ArchiveNumeric(SQLModel, table=True):
    """Scalar per-day metric."""

    __tablename__ = "archive_numeric"
    __table_args__ = (
        UniqueConstraint("site_id", "date", "name", name="uq_archive_numeric"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: int = Field(index=True)
    date: str = Field(index=True, description="YYYY-MM-DD")
    name: str = Field(index=True, description="Metric column name, e.g. nb_visits")
    value: float
    ts_archived: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ImportedGoal(SQLModel, table=True):
    """Goal created in the target platform by the goal import."""

    __tablename__ = "imported_goal"

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: int = Field(index=True)
    name: str
    description: str = Field(default="", description="Embeds the source goal id")
    match_attribute: str
    pattern: str = ""
    pattern_type: str = ""
    case_sensitive: bool = False
    revenue: float = 0.0
    allow_multiple_conversions: bool = False
    use_event_value_as_revenue: bool = False
    funnel_json: str = Field(default="", description="Funnel steps as JSON, if any")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

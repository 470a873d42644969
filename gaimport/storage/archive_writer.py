"""GAIMPORT — SQL-backed Archive Sink & Goal Store."""

import json
from datetime import date, datetime, timezone
from typing import List

from sqlmodel import Session, select

from gaimport.core.logging import get_logger
from gaimport.models.archive_models import ArchiveBlob, ArchiveNumeric, ImportedGoal
from gaimport.models.goal_models import FunnelStep, GoalTarget

logger = get_logger("storage.archive")


class ArchiveWriter:
    """Writes the records of one (site, day).

    Writes are upserts keyed by record name, so importing the same day again
    replaces the earlier values. Nothing is committed until ``commit()``.
    """

    def __init__(self, session: Session, site_id: int, day: date):
        self.session = session
        self.site_id = site_id
        self.day = day.isoformat()

    def insert_blob_record(self, name: str, blob: bytes) -> None:
        existing = self.session.exec(
            select(ArchiveBlob).where(
                ArchiveBlob.site_id == self.site_id,
                ArchiveBlob.date == self.day,
                ArchiveBlob.name == name,
            )
        ).first()

        if existing:
            existing.value = blob
            existing.ts_archived = datetime.now(timezone.utc)
            self.session.add(existing)
        else:
            self.session.add(
                ArchiveBlob(site_id=self.site_id, date=self.day, name=name, value=blob)
            )
        logger.debug(
            f"Stored blob record {name} ({len(blob)} bytes)",
            extra={"site_id": self.site_id, "day": self.day, "record_name": name},
        )

    def insert_numeric_record(self, name: str, value: float) -> None:
        existing = self.session.exec(
            select(ArchiveNumeric).where(
                ArchiveNumeric.site_id == self.site_id,
                ArchiveNumeric.date == self.day,
                ArchiveNumeric.name == name,
            )
        ).first()

        if existing:
            existing.value = value
            existing.ts_archived = datetime.now(timezone.utc)
            self.session.add(existing)
        else:
            self.session.add(
                ArchiveNumeric(site_id=self.site_id, date=self.day, name=name, value=value)
            )

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLGoalStore:
    """Target goals of one site."""

    def __init__(self, session: Session, site_id: int):
        self.session = session
        self.site_id = site_id

    def list_goals(self) -> List[GoalTarget]:
        rows = self.session.exec(
            select(ImportedGoal).where(ImportedGoal.site_id == self.site_id)
        ).all()
        goals = []
        for row in rows:
            funnel = None
            if row.funnel_json:
                funnel = [FunnelStep(**step) for step in json.loads(row.funnel_json)]
            goals.append(
                GoalTarget(
                    name=row.name,
                    description=row.description,
                    match_attribute=row.match_attribute,
                    pattern=row.pattern,
                    pattern_type=row.pattern_type,
                    case_sensitive=row.case_sensitive,
                    revenue=row.revenue,
                    allow_multiple_conversions=row.allow_multiple_conversions,
                    use_event_value_as_revenue=row.use_event_value_as_revenue,
                    funnel=funnel,
                )
            )
        return goals

    def add_goal(self, goal: GoalTarget) -> ImportedGoal:
        row = ImportedGoal(
            site_id=self.site_id,
            funnel_json=(
                json.dumps([step.model_dump() for step in goal.funnel]) if goal.funnel else ""
            ),
            **goal.model_dump(exclude={"funnel"}),
        )
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row

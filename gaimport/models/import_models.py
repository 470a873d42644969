"""GAIMPORT — Import Run Results."""

from typing import Dict, List
from pydantic import BaseModel


class DayImportResult(BaseModel):
    """Outcome of running every configured importer for one day."""

    site_id: int
    day: str
    succeeded: List[str] = []
    failed: Dict[str, str] = {}  # importer name -> error message

    @property
    def complete(self) -> bool:
        """True only if no importer failed; otherwise the day must be retried."""
        return not self.failed


class GoalImportFailureReport(BaseModel):
    goal_id: str
    goal_name: str = ""
    reason: str
    detail: str = ""
    imported_as_manual: bool = False


class GoalImportResult(BaseModel):
    """Outcome of importing the goal configuration of one site."""

    site_id: int
    created: List[str] = []  # source goal ids
    skipped_existing: List[str] = []
    failures: List[GoalImportFailureReport] = []

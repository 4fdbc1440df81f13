from __future__ import annotations

import logging
from datetime import date

from ..core.exceptions import NotFoundError, ValidationError
from .model import LeaveSummary
from .repository import LeaveSummaryRepository

logger = logging.getLogger(__name__)


class LeaveLedgerService:
    """Use case: keep per-employee totals of approved Regular leave.

    Buckets are keyed by the leave's start date only; a leave that crosses a
    month boundary is counted entirely in the month it starts.
    There is no decrement path.
    """

    def __init__(self, summaries: LeaveSummaryRepository):
        self._summaries = summaries

    def record_approval(self, *, employee_id: str, start_date: date, leave_days: int) -> None:
        if int(leave_days) < 1:
            raise ValidationError("leave_days must be at least 1")

        self._summaries.increment(
            employee_id=str(employee_id),
            year=start_date.year,
            month=start_date.month,
            days=int(leave_days),
        )
        logger.info(
            "Ledger: +%d day(s) for %s in %04d-%02d", int(leave_days), employee_id, start_date.year, start_date.month
        )

    def get_summary(self, *, employee_id: str) -> LeaveSummary:
        summary = self._summaries.get(employee_id=str(employee_id))
        if summary is None:
            raise NotFoundError("No leave summary found")
        return summary

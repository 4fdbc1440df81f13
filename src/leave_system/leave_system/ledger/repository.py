from __future__ import annotations

from typing import Optional, Protocol

from .model import LeaveSummary


class LeaveSummaryRepository(Protocol):
    def increment(self, *, employee_id: str, year: int, month: int, days: int) -> None:
        """Add `days` to the (year, month) and (year) buckets, creating the summary
        and either bucket on first use.

        Each bucket must be incremented in place so concurrent approvals for the
        same employee never lose an update.
        """

        raise NotImplementedError

    def get(self, *, employee_id: str) -> Optional[LeaveSummary]:
        raise NotImplementedError

from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveSummary, MonthlyLeave, YearlyLeave
from .repository import LeaveSummaryRepository


class MySQLLeaveSummaryRepository(LeaveSummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def increment(self, *, employee_id: str, year: int, month: int, days: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_summaries(employee_id, created_at, updated_at)
                VALUES(%s, NOW(), NOW())
                ON DUPLICATE KEY UPDATE updated_at=NOW()
                """,
                (str(employee_id),),
            )
            cur.execute(
                """
                INSERT INTO leave_summary_monthly(employee_id, year, month, days)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE days = days + VALUES(days)
                """,
                (str(employee_id), int(year), int(month), int(days)),
            )
            cur.execute(
                """
                INSERT INTO leave_summary_yearly(employee_id, year, days)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE days = days + VALUES(days)
                """,
                (str(employee_id), int(year), int(days)),
            )

    def get(self, *, employee_id: str) -> Optional[LeaveSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM leave_summaries WHERE employee_id=%s", (str(employee_id),))
            if not fetchone(cur):
                return None

            cur.execute(
                """
                SELECT year, month, days
                FROM leave_summary_monthly
                WHERE employee_id=%s
                ORDER BY year, month
                """,
                (str(employee_id),),
            )
            monthly = tuple(
                MonthlyLeave(year=int(r["year"]), month=int(r["month"]), days=int(r["days"])) for r in fetchall(cur)
            )

            cur.execute(
                "SELECT year, days FROM leave_summary_yearly WHERE employee_id=%s ORDER BY year",
                (str(employee_id),),
            )
            yearly = tuple(YearlyLeave(year=int(r["year"]), days=int(r["days"])) for r in fetchall(cur))

            return LeaveSummary(employee_id=str(employee_id), monthly_leaves=monthly, yearly_leaves=yearly)

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from ..core.enums import Role, StaffType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Employee
from .repository import EmployeeDirectory

logger = logging.getLogger(__name__)


def _row_to_employee(row: dict) -> Employee:
    raw_type = row.get("staff_type") or StaffType.TEACHING.value
    try:
        staff_type = StaffType(raw_type)
    except ValueError:
        logger.warning("Unknown staff_type %r for employee %s; treating as teaching", raw_type, row["employee_id"])
        staff_type = StaffType.TEACHING

    raw_role = row.get("role")
    role = None
    if raw_role:
        try:
            role = Role(raw_role)
        except ValueError:
            logger.warning("Unknown role %r for employee %s; ignoring", raw_role, row["employee_id"])

    return Employee(
        employee_id=str(row["employee_id"]),
        first_name=row["first_name"],
        last_name=row.get("last_name"),
        department=row["department"],
        staff_type=staff_type,
        role=role,
    )


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, first_name, last_name, department, staff_type, role
                FROM employees
                WHERE employee_id=%s
                """,
                (str(employee_id),),
            )
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_many(self, employee_ids: Iterable[str]) -> Mapping[str, Employee]:
        ids = sorted({str(i) for i in employee_ids})
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT employee_id, first_name, last_name, department, staff_type, role
                FROM employees
                WHERE employee_id IN ({in_clause(ids)})
                """,
                tuple(ids),
            )
            return {str(r["employee_id"]): _row_to_employee(r) for r in fetchall(cur)}

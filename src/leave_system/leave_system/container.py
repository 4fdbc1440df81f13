from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .ledger.mysql_summary_repository import MySQLLeaveSummaryRepository
from .ledger.repository import LeaveSummaryRepository
from .ledger.service import LeaveLedgerService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveWorkflowService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeDirectory
    leaves_repo: LeaveRepository
    summaries_repo: LeaveSummaryRepository

    ledger_service: LeaveLedgerService
    leave_service: LeaveWorkflowService


def wire_services(
    *,
    employees_repo: EmployeeDirectory,
    leaves_repo: LeaveRepository,
    summaries_repo: LeaveSummaryRepository,
    clock: Optional[Callable[[], datetime]] = None,
) -> Container:
    ledger_service = LeaveLedgerService(summaries_repo)
    leave_service = LeaveWorkflowService(leaves_repo, employees_repo, ledger_service, clock=clock)

    return Container(
        employees_repo=employees_repo,
        leaves_repo=leaves_repo,
        summaries_repo=summaries_repo,
        ledger_service=ledger_service,
        leave_service=leave_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_services(
        employees_repo=MySQLEmployeeDirectory(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        summaries_repo=MySQLLeaveSummaryRepository(conn),
    )

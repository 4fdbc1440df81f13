from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol

from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only lookup into the institution's employee records.

    The leave workflow consults it at submission (to freeze department and
    routing inputs) and at decision time (to authorize the actor).
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_many(self, employee_ids: Iterable[str]) -> Mapping[str, Employee]:
        raise NotImplementedError

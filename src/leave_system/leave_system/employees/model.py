from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, StaffType


@dataclass(frozen=True)
class Employee:
    """Directory entry as the leave workflow sees it.

    Note: `staff_type` and `role` are already normalised enums; raw strings are
    converted once, by the directory implementation.
    """

    employee_id: str
    first_name: str
    last_name: Optional[str]
    department: str
    staff_type: StaffType
    role: Optional[Role] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()

    @property
    def is_hod(self) -> bool:
        return self.role == Role.HOD or self.staff_type == StaffType.HOD

    @property
    def is_principal(self) -> bool:
        return self.role == Role.PRINCIPAL or self.staff_type == StaffType.PRINCIPAL

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MonthlyLeave:
    year: int
    month: int
    days: int


@dataclass(frozen=True)
class YearlyLeave:
    year: int
    days: int


@dataclass(frozen=True)
class LeaveSummary:
    """Approved Regular leave days per employee, by (year, month) and by year."""

    employee_id: str
    monthly_leaves: tuple[MonthlyLeave, ...] = field(default_factory=tuple)
    yearly_leaves: tuple[YearlyLeave, ...] = field(default_factory=tuple)

    def days_in_month(self, year: int, month: int) -> int:
        return next((m.days for m in self.monthly_leaves if m.year == year and m.month == month), 0)

    def days_in_year(self, year: int) -> int:
        return next((y.days for y in self.yearly_leaves if y.year == year), 0)

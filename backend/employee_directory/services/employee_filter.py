from __future__ import annotations

from collections.abc import Sequence

from employee_directory.models.employee import Employee


def _matches(employee: Employee, needle: str) -> bool:
    return any(
        needle in value.casefold()
        for value in (employee.username, employee.email, employee.phone_number)
    )


def filter_employees(records: Sequence[Employee], search_term: str | None) -> list[Employee]:
    """Records whose username, email or phone number contain the term, ignoring case.

    An empty term keeps everything. Order is preserved and the input is not touched.
    """
    needle = (search_term or "").strip().casefold()
    if not needle:
        return list(records)
    return [employee for employee in records if _matches(employee, needle)]

from __future__ import annotations

import logging
from typing import Optional, Union

from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeDirectory:
    """Use case: resolve whatever identifier a device sent to a canonical employee."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def resolve(self, identifier: Union[int, str, None]) -> Optional[Employee]:
        """Accept a numeric id, a username or an email; inactive employees do not resolve."""

        if identifier is None or isinstance(identifier, bool):
            return None

        employee: Optional[Employee] = None
        if isinstance(identifier, int):
            employee = self._employees.get_by_id(identifier)
        else:
            ident = str(identifier).strip()
            if not ident:
                return None
            if ident.isdigit():
                employee = self._employees.get_by_id(int(ident))
            if employee is None and "@" in ident:
                employee = self._employees.get_by_email(ident)
            if employee is None:
                employee = self._employees.get_by_username(ident)

        if employee is None or not employee.is_active:
            logger.debug("employee identifier %r did not resolve", identifier)
            return None
        return employee

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: the slice of an employee the attendance core reads.

    Profile management lives elsewhere; this is a plain data object.
    """

    employee_id: int
    username: str
    full_name: str
    email: Optional[str] = None
    schedule_start_time: Optional[time] = None
    is_active: bool = True

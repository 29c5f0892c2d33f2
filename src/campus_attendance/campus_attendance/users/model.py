from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Actor:
    """Who is calling, as resolved by the external login.

    The engine trusts these facts; it performs no authentication itself.
    """

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_faculty(self) -> bool:
        return self.role == Role.FACULTY


@dataclass(frozen=True)
class Student:
    """Read-model of an enrolled student (owned by the directory)."""

    user_id: int
    student_number: Optional[str]
    first_name: str
    last_name: str
    email: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

from __future__ import annotations

from typing import Protocol, Sequence

from .model import Student


class DirectoryRepository(Protocol):
    """Enrollment and ownership facts from the identity collaborator.

    Note (DIP): services depend on this interface, never on the concrete store.
    """

    def is_enrolled(self, *, student_id: int, section_id: int) -> bool:
        raise NotImplementedError

    def is_instructor(self, *, user_id: int, section_id: int) -> bool:
        raise NotImplementedError

    def list_enrolled_students(self, section_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def list_sections_for_student(self, student_id: int) -> Sequence[int]:
        raise NotImplementedError

    def list_sections_for_instructor(self, user_id: int) -> Sequence[int]:
        raise NotImplementedError

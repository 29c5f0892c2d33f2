from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import ExcuseStatus
from .model import ExcuseRequest


class ExcuseRepository(Protocol):
    def create_request(
        self,
        *,
        student_id: int,
        session_id: int,
        reason: str,
        document_ref: Optional[str],
        created_at: datetime,
    ) -> Optional[int]:
        """Insert a pending request.

        Returns ``None`` when a pending or approved request already exists for
        (student, session); the storage layer enforces this atomically.
        """

        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[ExcuseRequest]:
        raise NotImplementedError

    def find_open(self, *, student_id: int, session_id: int) -> Optional[ExcuseRequest]:
        """The pending or approved request for the pair, if any."""

        raise NotImplementedError

    def list_for_sessions(
        self,
        session_ids: Iterable[int],
        *,
        status: Optional[ExcuseStatus] = None,
    ) -> Sequence[ExcuseRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[ExcuseStatus] = None,
        student_id: Optional[int] = None,
        section_ids: Optional[Iterable[int]] = None,
        limit: int = 200,
    ) -> Sequence[ExcuseRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: ExcuseStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        """Compare-and-set pending -> approved/rejected."""

        raise NotImplementedError

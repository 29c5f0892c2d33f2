from __future__ import annotations

from datetime import datetime

import pytest

from campus_attendance.checkins.model import ReportedCoordinates
from campus_attendance.common.geo import destination_point
from campus_attendance.core.enums import ExcuseStatus
from campus_attendance.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

from conftest import (
    AFTER_CLASS,
    ANCHOR,
    DURING_CLASS,
    OTHER_SECTION_ID,
    OUTSIDER_ID,
    STUDENT_A,
    STUDENT_B,
    STUDENT_C,
    student,
)

REASON = "Hospital appointment, report attached"


def check_in(container, session_id, student_id, meters):
    p = destination_point(ANCHOR, 0.0, meters)
    return container.checkin_service.submit_check_in(
        session_id=session_id,
        student_id=student_id,
        reported=ReportedCoordinates(p.latitude, p.longitude),
        now=DURING_CLASS,
    )


def test_create_request_is_pending(container, open_session):
    s = open_session()

    req = container.excuse_service.create_request(
        student_id=STUDENT_C,
        session_id=s.session_id,
        reason=f"  {REASON}  ",
        document_ref=" https://files.campus.test/report.pdf ",
        now=AFTER_CLASS,
    )

    assert req.status == ExcuseStatus.PENDING
    assert req.reason == REASON
    assert req.document_ref == "https://files.campus.test/report.pdf"
    assert req.created_at == AFTER_CLASS
    assert req.reviewed_by is None


@pytest.mark.parametrize("reason", ["sick", "   sick    ", "", None, "123456789"])
def test_short_reason_is_rejected(container, open_session, excuses_repo, reason):
    s = open_session()
    with pytest.raises(ValidationError):
        container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=reason)
    assert excuses_repo.rows == {}


def test_reason_of_exactly_ten_characters_is_accepted(container, open_session):
    s = open_session()
    req = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason="1234567890")
    assert req.reason == "1234567890"


def test_request_for_unknown_session(container):
    with pytest.raises(NotFoundError):
        container.excuse_service.create_request(student_id=STUDENT_C, session_id=404, reason=REASON)


def test_request_requires_enrollment(container, open_session):
    s = open_session()
    with pytest.raises(AuthorizationError):
        container.excuse_service.create_request(student_id=OUTSIDER_ID, session_id=s.session_id, reason=REASON)


def test_second_pending_request_conflicts(container, open_session):
    s = open_session()
    container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)

    with pytest.raises(ConflictError):
        container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)


def test_request_after_approval_conflicts(container, open_session, instructor):
    s = open_session()
    req = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)
    container.excuse_service.approve(request_id=req.request_id, actor=instructor)

    with pytest.raises(ConflictError):
        container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)


def test_new_request_allowed_after_rejection(container, open_session, instructor):
    s = open_session()
    first = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)
    container.excuse_service.reject(request_id=first.request_id, actor=instructor, notes="No document")

    second = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)

    assert second.request_id != first.request_id
    assert second.status == ExcuseStatus.PENDING


def test_accepted_check_in_blocks_request(container, open_session):
    s = open_session()
    check_in(container, s.session_id, STUDENT_A, 5)

    with pytest.raises(ConflictError):
        container.excuse_service.create_request(student_id=STUDENT_A, session_id=s.session_id, reason=REASON)


def test_flagged_check_in_can_be_contested(container, open_session):
    s = open_session()
    check_in(container, s.session_id, STUDENT_B, 40)

    req = container.excuse_service.create_request(student_id=STUDENT_B, session_id=s.session_id, reason=REASON)

    assert req.status == ExcuseStatus.PENDING


def test_approve_records_reviewer_and_notes(container, open_session, instructor):
    s = open_session()
    req = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)
    reviewed_at = datetime(2026, 3, 3, 12, 0)

    approved = container.excuse_service.approve(
        request_id=req.request_id, actor=instructor, notes="  Verified  ", now=reviewed_at
    )

    assert approved.status == ExcuseStatus.APPROVED
    assert approved.reviewed_by == instructor.user_id
    assert approved.reviewed_at == reviewed_at
    assert approved.review_notes == "Verified"


def test_approval_does_not_touch_check_ins(container, checkins_repo, open_session, instructor):
    s = open_session()
    flagged = check_in(container, s.session_id, STUDENT_B, 40)
    req = container.excuse_service.create_request(student_id=STUDENT_B, session_id=s.session_id, reason=REASON)

    container.excuse_service.approve(request_id=req.request_id, actor=instructor)

    assert checkins_repo.get_by_id(flagged.checkin_id) == flagged


def test_review_twice_conflicts(container, open_session, instructor, admin):
    s = open_session()
    req = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)
    container.excuse_service.reject(request_id=req.request_id, actor=instructor)

    with pytest.raises(ConflictError):
        container.excuse_service.approve(request_id=req.request_id, actor=admin)


def test_review_requires_section_manager(container, open_session, other_faculty):
    s = open_session()
    req = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)

    with pytest.raises(AuthorizationError):
        container.excuse_service.approve(request_id=req.request_id, actor=other_faculty)
    with pytest.raises(AuthorizationError):
        container.excuse_service.approve(request_id=req.request_id, actor=student(STUDENT_A))


def test_admin_can_review_any_request(container, open_session, admin):
    s = open_session()
    req = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)
    assert container.excuse_service.reject(request_id=req.request_id, actor=admin).status == ExcuseStatus.REJECTED


def test_review_rejects_unknown_decision(container, open_session, instructor):
    s = open_session()
    req = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)
    with pytest.raises(ValidationError):
        container.excuse_service.review(request_id=req.request_id, actor=instructor, decision="maybe")


def test_review_unknown_request(container, instructor):
    with pytest.raises(NotFoundError):
        container.excuse_service.approve(request_id=999, actor=instructor)


def test_lost_review_race_conflicts(container, excuses_repo, open_session, instructor, admin):
    s = open_session()
    req = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)
    original_decide = excuses_repo.decide

    def someone_else_first(**kwargs):
        original_decide(**{**kwargs, "reviewed_by": admin.user_id})
        return original_decide(**kwargs)

    excuses_repo.decide = someone_else_first

    with pytest.raises(ConflictError):
        container.excuse_service.approve(request_id=req.request_id, actor=instructor)
    assert excuses_repo.get_by_id(req.request_id).reviewed_by == admin.user_id


def test_my_requests(container, open_session):
    s = open_session()
    mine = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)
    container.excuse_service.create_request(student_id=STUDENT_B, session_id=s.session_id, reason=REASON)

    assert container.excuse_service.list_my_requests(student_id=STUDENT_C) == [mine]


def test_reviewer_queue_is_scoped_to_taught_sections(container, open_session, instructor, other_faculty, admin):
    s = open_session()
    other = open_session(actor=admin, section_id=OTHER_SECTION_ID)
    ours = container.excuse_service.create_request(student_id=STUDENT_C, session_id=s.session_id, reason=REASON)
    theirs = container.excuse_service.create_request(student_id=OUTSIDER_ID, session_id=other.session_id, reason=REASON)

    assert container.excuse_service.list_requests_for_reviewer(actor=instructor) == [ours]
    assert container.excuse_service.list_requests_for_reviewer(actor=other_faculty) == [theirs]
    assert {r.request_id for r in container.excuse_service.list_requests_for_reviewer(actor=admin)} == {
        ours.request_id,
        theirs.request_id,
    }
    assert container.excuse_service.list_requests_for_reviewer(actor=instructor, status=ExcuseStatus.APPROVED) == []


def test_students_have_no_reviewer_queue(container):
    with pytest.raises(AuthorizationError):
        container.excuse_service.list_requests_for_reviewer(actor=student(STUDENT_A))

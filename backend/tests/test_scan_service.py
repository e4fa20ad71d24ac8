"""Scan redemption rules and the ordering of its rejections."""
from datetime import timedelta

import pytest

from campus_attendance import db
from campus_attendance.models import AttendanceMark, AuditLog, Course, Department, UserRole
from campus_attendance.services import audit_service, scan_service
from campus_attendance.services.audit_service import AuditService
from campus_attendance.services.policy_service import PolicyService
from campus_attendance.services.scan_service import ScanProof, ScanService, tokens_match
from campus_attendance.services.session_service import SessionService
from campus_attendance.utils.errors import (
    AlreadyMarked,
    DeviceFingerprintRequired,
    InvalidToken,
    NotAStudent,
    PhotoRequired,
    SessionClosed,
    SessionExpired,
    SessionNotFound,
    Unauthorized,
)
from campus_attendance.utils.permissions import Principal

from .conftest import T0, make_lecturer, make_student, make_user

SELFIE = 'data:image/jpeg;base64,c2VsZmll'


@pytest.fixture
def live_session(campus):
    session = SessionService.create_session(campus.lecturer, campus.course_id, now=T0)
    return session.id, session.token


def redeem(principal, session_id, token, seconds=10, **proof):
    proof.setdefault('selfie', SELFIE)
    return ScanService.redeem_scan(principal, session_id, token, ScanProof(**proof),
                                   now=T0 + timedelta(seconds=seconds))


def test_lecture_walkthrough(app):
    """Course 7 taught by lecturer 3, attended by student 42."""
    department = Department(code='ICT', name='ICT').save()
    lecturer, lecturer_id = make_lecturer('l3@campus.edu', department.id, 'EMP-3',
                                          user_id=30, lecturer_id=3)
    student, student_id = make_student('s42@campus.edu', department.id, 'ICT-042',
                                       user_id=420, student_id=42)
    Course(id=7, code='ICT107', name='Networks', department_id=department.id,
           lecturer_id=lecturer_id).save()

    session = SessionService.create_session(lecturer, 7, now=T0)
    session_id, first_token = session.id, session.token
    assert len(first_token) == 32
    assert session.expires_at == T0 + timedelta(seconds=300)

    mark = ScanService.redeem_scan(student, session_id, first_token,
                                   ScanProof(selfie=SELFIE), now=T0 + timedelta(seconds=60))
    assert (mark.session_id, mark.student_id) == (session_id, 42)
    assert mark.marked_at == T0 + timedelta(seconds=60)

    with pytest.raises(AlreadyMarked):
        ScanService.redeem_scan(student, session_id, first_token, ScanProof(selfie=SELFIE),
                                now=T0 + timedelta(seconds=61))

    with pytest.raises(SessionExpired):
        ScanService.redeem_scan(student, session_id, first_token, ScanProof(selfie=SELFIE),
                                now=T0 + timedelta(seconds=301))

    refreshed = SessionService.refresh_token(lecturer, session_id, now=T0 + timedelta(seconds=400))
    second_token = refreshed.token
    assert refreshed.id == session_id
    assert second_token != first_token

    with pytest.raises(InvalidToken):
        ScanService.redeem_scan(student, session_id, first_token, ScanProof(selfie=SELFIE),
                                now=T0 + timedelta(seconds=410))
    with pytest.raises(AlreadyMarked):
        ScanService.redeem_scan(student, session_id, second_token, ScanProof(selfie=SELFIE),
                                now=T0 + timedelta(seconds=410))

    SessionService.close_session(lecturer, session_id)
    with pytest.raises(SessionClosed):
        ScanService.redeem_scan(student, session_id, second_token, ScanProof(selfie=SELFIE),
                                now=T0 + timedelta(seconds=420))

    assert AttendanceMark.query.filter_by(session_id=session_id).count() == 1


def test_valid_scan_records_proof_and_metadata(campus, live_session):
    session_id, token = live_session

    mark = redeem(campus.student, session_id, token, ip_address='10.1.2.3',
                  user_agent='pytest-agent', device_fingerprint='fp-123')

    assert mark.student_id == campus.student_id
    assert mark.is_verified is False
    assert mark.selfie_ref.startswith('sha256:')
    assert len(mark.selfie_ref) == len('sha256:') + 64
    assert mark.ip_address == '10.1.2.3'
    assert mark.user_agent == 'pytest-agent'
    assert mark.device_fingerprint == 'fp-123'


def test_valid_scan_is_audited(campus, live_session):
    session_id, token = live_session

    mark = redeem(campus.student, session_id, token, ip_address='10.1.2.3')

    entry = AuditLog.query.filter_by(entity_type='attendance_mark', entity_id=mark.id).one()
    assert entry.user_id == campus.student.user_id
    assert entry.ip_address == '10.1.2.3'


def test_each_student_marks_once(campus, live_session):
    session_id, token = live_session

    redeem(campus.student, session_id, token)
    redeem(campus.second_student, session_id, token)
    with pytest.raises(AlreadyMarked):
        redeem(campus.student, session_id, token, seconds=20)

    assert AttendanceMark.query.filter_by(session_id=session_id).count() == 2


def test_wrong_token(campus, live_session):
    session_id, token = live_session

    with pytest.raises(InvalidToken):
        redeem(campus.student, session_id, token[:-1] + ('A' if token[-1] != 'A' else 'B'))
    with pytest.raises(InvalidToken):
        redeem(campus.student, session_id, '')
    assert AttendanceMark.query.count() == 0


def test_expiry_boundary(campus, live_session):
    session_id, token = live_session

    with pytest.raises(SessionExpired):
        redeem(campus.student, session_id, token, seconds=300)
    mark = redeem(campus.student, session_id, token, seconds=299)
    assert mark.id is not None


def test_closed_session_rejected_before_token_check(campus, live_session):
    session_id, token = live_session
    SessionService.close_session(campus.lecturer, session_id)

    with pytest.raises(SessionClosed):
        redeem(campus.student, session_id, token)
    with pytest.raises(SessionClosed):
        redeem(campus.student, session_id, 'not-the-token')


def test_invalid_token_reported_before_expiry(campus, live_session):
    session_id, _ = live_session

    with pytest.raises(InvalidToken):
        redeem(campus.student, session_id, 'not-the-token', seconds=3600)


def test_unknown_session(campus):
    with pytest.raises(SessionNotFound):
        redeem(campus.student, 4242, 'whatever')


def test_non_student_roles_cannot_scan(campus, live_session):
    session_id, token = live_session

    for principal in (campus.lecturer, campus.hod, campus.admin, campus.staff):
        with pytest.raises(Unauthorized):
            redeem(principal, session_id, token)


def test_student_role_without_profile(campus, live_session):
    session_id, token = live_session
    user = make_user('applicant@campus.edu', UserRole.STUDENT)

    with pytest.raises(NotAStudent):
        redeem(Principal(user.id, UserRole.STUDENT), session_id, token)


def test_photo_required_by_default(campus, live_session):
    session_id, token = live_session

    with pytest.raises(PhotoRequired):
        redeem(campus.student, session_id, token, selfie=None)
    with pytest.raises(PhotoRequired):
        redeem(campus.student, session_id, token, selfie='')
    assert AttendanceMark.query.count() == 0


def test_photo_optional_when_department_allows(campus):
    PolicyService.upsert(campus.admin, campus.department_id, require_photo=False)
    session = SessionService.create_session(campus.lecturer, campus.course_id, now=T0)

    mark = redeem(campus.student, session.id, session.token, selfie=None)

    assert mark.selfie_ref is None


def test_device_fingerprint_required(campus):
    PolicyService.upsert(campus.hod, campus.department_id, require_device_fingerprint=True)
    session = SessionService.create_session(campus.lecturer, campus.course_id, now=T0)
    session_id, token = session.id, session.token

    with pytest.raises(DeviceFingerprintRequired):
        redeem(campus.student, session_id, token)
    mark = redeem(campus.student, session_id, token, device_fingerprint='fp-1')
    assert mark.device_fingerprint == 'fp-1'


def test_duplicate_reported_before_missing_photo(campus, live_session):
    session_id, token = live_session
    redeem(campus.student, session_id, token)

    with pytest.raises(AlreadyMarked):
        redeem(campus.student, session_id, token, selfie=None)


def test_lost_insert_race_becomes_already_marked(campus, live_session, monkeypatch):
    session_id, token = live_session
    redeem(campus.student, session_id, token)

    # Pretend the pre-check ran before the other insert committed.
    monkeypatch.setattr(ScanService, '_find_mark', staticmethod(lambda *args: None))

    with pytest.raises(AlreadyMarked):
        redeem(campus.student, session_id, token, seconds=11)

    assert AttendanceMark.query.filter_by(session_id=session_id).count() == 1
    # The session is still usable after the rollback.
    assert redeem(campus.second_student, session_id, token, seconds=12).id is not None


def test_audit_failure_does_not_undo_mark(campus, live_session, monkeypatch):
    session_id, token = live_session
    real_audit_log = audit_service.AuditLog
    monkeypatch.setattr(audit_service, 'AuditLog',
                        lambda **kwargs: real_audit_log(**dict(kwargs, action=None)))

    mark = redeem(campus.student, session_id, token)

    assert db.session.get(AttendanceMark, mark.id) is not None
    assert AuditLog.query.filter_by(entity_type='attendance_mark').count() == 0


def test_audit_record_returns_none_on_failure(app):
    assert AuditService.record(user_id=None, action=None) is None
    assert AuditService.record(user_id=None, action='Still writable').id is not None


def test_tokens_match():
    assert tokens_match('abc', 'abc')
    assert not tokens_match('abc', 'abd')
    assert not tokens_match('abc', 'abcd')
    assert not tokens_match(None, 'abc')
    assert not tokens_match(12345, '12345')
    assert not tokens_match('ß', 'ss')


def test_tokens_compared_in_constant_time(monkeypatch):
    calls = []
    real_compare = scan_service.hmac.compare_digest

    def spy(a, b):
        calls.append((a, b))
        return real_compare(a, b)

    monkeypatch.setattr(scan_service.hmac, 'compare_digest', spy)

    assert tokens_match('token', 'token')
    assert calls == [(b'token', b'token')]


def test_list_my_marks(campus):
    first = SessionService.create_session(campus.lecturer, campus.course_id, now=T0)
    second = SessionService.create_session(campus.lecturer, campus.course_id,
                                           now=T0 + timedelta(minutes=1))
    redeem(campus.student, first.id, first.token, seconds=10)
    redeem(campus.student, second.id, second.token, seconds=70)

    marks = ScanService.list_my_marks(campus.student)

    assert [m.session_id for m in marks] == [second.id, first.id]
    assert marks[0].course.code == 'ICT101'
    assert ScanService.list_my_marks(campus.second_student) == []


def test_list_my_marks_requires_student(campus):
    with pytest.raises(Unauthorized):
        ScanService.list_my_marks(campus.lecturer)

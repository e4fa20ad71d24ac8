"""Attendance session lifecycle: create, close, refresh and list."""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from flask import current_app
from sqlalchemy import func, or_

from campus_attendance import db
from campus_attendance.models.attendance_mark import AttendanceMark
from campus_attendance.models.attendance_session import AttendanceSession
from campus_attendance.models.course import Course
from campus_attendance.models.lecturer import Lecturer
from campus_attendance.models.student import Student
from campus_attendance.models.user import User, UserRole
from campus_attendance.services.audit_service import AuditService
from campus_attendance.services.policy_service import PolicyService
from campus_attendance.services.views import MarkWithStudent, SessionWithCourse
from campus_attendance.utils.errors import (
    CourseNotFound,
    SessionClosed,
    SessionNotFound,
    Unauthorized,
)
from campus_attendance.utils.helpers import utcnow
from campus_attendance.utils.permissions import Capability, Principal, require_capability

logger = logging.getLogger(__name__)


def is_live(session: AttendanceSession, now: datetime) -> bool:
    """Whether a scan against ``session`` could succeed at ``now``."""
    return session.is_live(now)


class SessionService:
    """Creates and manages attendance sessions on behalf of lecturers."""

    @staticmethod
    def create_session(principal: Principal, course_id: int,
                       now: Optional[datetime] = None) -> AttendanceSession:
        """Open a new live session for a course.

        The department's anti-cheat policy is copied into the session, so
        later policy edits never change sessions already handed out.
        """
        require_capability(principal, Capability.CREATE_SESSION)

        lecturer = Lecturer.for_user(principal.user_id)
        if lecturer is None:
            raise Unauthorized("Lecturer profile not found")

        course = db.session.get(Course, course_id)
        if course is None:
            raise CourseNotFound()

        policy = PolicyService.resolve(course.department_id)
        now = now or utcnow()

        session = AttendanceSession(
            course_id=course.id,
            lecturer_id=lecturer.id,
            session_date=now,
            token=SessionService._new_token(),
            expires_at=now + timedelta(seconds=policy.session_timeout),
            is_active=True,
            require_photo=policy.require_photo,
            require_device_fingerprint=policy.require_device_fingerprint,
            validity_seconds=policy.session_timeout,
            created_at=now,
            updated_at=now
        )
        db.session.add(session)
        db.session.commit()

        logger.info("Attendance session %s opened for course %s by lecturer %s (expires %s)",
                    session.id, course.code, lecturer.id, session.expires_at.isoformat())
        AuditService.record(
            user_id=principal.user_id,
            action=f"Created attendance session for course: {course.code}",
            entity_type='attendance_session',
            entity_id=session.id
        )
        return session

    @staticmethod
    def close_session(principal: Principal, session_id: int) -> AttendanceSession:
        """Deactivate a session for good. Closing twice is a no-op."""
        session = SessionService._load_managed(principal, session_id)
        if not session.is_active:
            return session

        session.is_active = False
        db.session.commit()

        logger.info("Attendance session %s closed by user %s", session.id, principal.user_id)
        AuditService.record(
            user_id=principal.user_id,
            action=f"Closed attendance session {session.id}",
            entity_type='attendance_session',
            entity_id=session.id
        )
        return session

    @staticmethod
    def refresh_token(principal: Principal, session_id: int,
                      now: Optional[datetime] = None) -> AttendanceSession:
        """Rotate the token and restart the validity window.

        Identity and existing marks are untouched; any previously displayed
        code stops working immediately.
        """
        session = SessionService._load_managed(principal, session_id)
        if not session.is_active:
            raise SessionClosed()

        now = now or utcnow()
        old_token = session.token
        new_token = SessionService._new_token()
        while new_token == old_token:
            new_token = SessionService._new_token()

        session.token = new_token
        session.expires_at = now + timedelta(seconds=session.validity_seconds)
        db.session.commit()

        logger.info("Attendance session %s token rotated (expires %s)",
                    session.id, session.expires_at.isoformat())
        AuditService.record(
            user_id=principal.user_id,
            action=f"Refreshed token for attendance session {session.id}",
            entity_type='attendance_session',
            entity_id=session.id
        )
        return session

    @staticmethod
    def get_session(principal: Principal, session_id: int) -> AttendanceSession:
        return SessionService._load_managed(principal, session_id)

    @staticmethod
    def list_active_sessions(principal: Principal,
                             now: Optional[datetime] = None) -> List[SessionWithCourse]:
        """Live sessions the caller may manage, newest first."""
        require_capability(principal, Capability.MANAGE_SESSION)
        lecturer = SessionService._lecturer_for(principal)
        now = now or utcnow()

        mark_counts = (
            db.session.query(
                AttendanceMark.session_id.label('session_id'),
                func.count(AttendanceMark.id).label('mark_count')
            )
            .group_by(AttendanceMark.session_id)
            .subquery()
        )

        visible = AttendanceSession.lecturer_id == lecturer.id
        if SessionService._is_head(principal, lecturer):
            visible = or_(visible, Course.department_id == lecturer.department_id)

        rows = (
            db.session.query(
                AttendanceSession,
                Course,
                func.coalesce(mark_counts.c.mark_count, 0)
            )
            .join(Course, Course.id == AttendanceSession.course_id)
            .outerjoin(mark_counts, mark_counts.c.session_id == AttendanceSession.id)
            .filter(
                AttendanceSession.is_active.is_(True),
                AttendanceSession.expires_at > now,
                visible
            )
            .order_by(AttendanceSession.created_at.desc(), AttendanceSession.id.desc())
            .all()
        )
        return [
            SessionWithCourse.from_row(session, course, int(count), now)
            for session, course, count in rows
        ]

    @staticmethod
    def list_marks(principal: Principal, session_id: int) -> List[MarkWithStudent]:
        """Marks recorded for a session, in insertion order."""
        SessionService._load_managed(principal, session_id)

        rows = (
            db.session.query(AttendanceMark, Student, User)
            .join(Student, Student.id == AttendanceMark.student_id)
            .join(User, User.id == Student.user_id)
            .filter(AttendanceMark.session_id == session_id)
            .order_by(AttendanceMark.marked_at, AttendanceMark.id)
            .all()
        )
        return [MarkWithStudent.from_row(mark, student, user) for mark, student, user in rows]

    @staticmethod
    def _new_token() -> str:
        return AttendanceSession.generate_token(current_app.config['ATTENDANCE_TOKEN_BYTES'])

    @staticmethod
    def _lecturer_for(principal: Principal) -> Lecturer:
        lecturer = Lecturer.for_user(principal.user_id)
        if lecturer is None:
            raise Unauthorized("Lecturer profile not found")
        return lecturer

    @staticmethod
    def _is_head(principal: Principal, lecturer: Lecturer) -> bool:
        return principal.role == UserRole.HOD or lecturer.is_hod

    @staticmethod
    def _load_managed(principal: Principal, session_id: int) -> AttendanceSession:
        """Load a session the caller created, or one in the department they head."""
        require_capability(principal, Capability.MANAGE_SESSION)
        lecturer = SessionService._lecturer_for(principal)

        session = db.session.get(AttendanceSession, session_id)
        if session is None:
            raise SessionNotFound()

        if session.lecturer_id == lecturer.id:
            return session
        if (SessionService._is_head(principal, lecturer)
                and session.course.department_id == lecturer.department_id):
            return session
        raise Unauthorized("Only the session creator or the head of department can manage this session")

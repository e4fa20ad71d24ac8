"""Scan redemption: turning a scanned QR token into an attendance mark."""
import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from campus_attendance import db
from campus_attendance.models.attendance_mark import AttendanceMark
from campus_attendance.models.attendance_session import AttendanceSession
from campus_attendance.models.course import Course
from campus_attendance.models.student import Student
from campus_attendance.services.audit_service import AuditService
from campus_attendance.services.views import MarkWithSession
from campus_attendance.utils.errors import (
    AlreadyMarked,
    AttendanceError,
    DeviceFingerprintRequired,
    InvalidToken,
    NotAStudent,
    PhotoRequired,
    SessionClosed,
    SessionExpired,
    SessionNotFound,
)
from campus_attendance.utils.helpers import utcnow
from campus_attendance.utils.permissions import Capability, Principal, require_capability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanProof:
    """Proof of presence and client metadata submitted with a scan."""
    selfie: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    device_fingerprint: Optional[str] = None

    def selfie_ref(self) -> Optional[str]:
        """Content reference for the selfie; the image itself is stored elsewhere."""
        if not self.selfie:
            return None
        return 'sha256:' + hashlib.sha256(self.selfie.encode('utf-8')).hexdigest()


def tokens_match(presented: str, expected: str) -> bool:
    """Constant-time token comparison."""
    if not isinstance(presented, str):
        return False
    return hmac.compare_digest(presented.encode('utf-8'), expected.encode('utf-8'))


class ScanService:
    """Redeems attendance tokens for students."""

    @staticmethod
    def redeem_scan(principal: Principal, session_id: int, token: str, proof: ScanProof,
                    now: Optional[datetime] = None) -> AttendanceMark:
        """Record the caller's presence in a session.

        Checks run in a fixed order (student, session, active, token, expiry,
        duplicate, proof) so each rejection is deterministic. Uniqueness is
        finally enforced by the (session_id, student_id) constraint.
        """
        try:
            return ScanService._redeem(principal, session_id, token, proof, now or utcnow())
        except AttendanceError as e:
            logger.info("Scan rejected for user %s on session %s: %s",
                        principal.user_id, session_id, e.code)
            raise

    @staticmethod
    def _redeem(principal: Principal, session_id: int, token: str, proof: ScanProof,
                now: datetime) -> AttendanceMark:
        require_capability(principal, Capability.REDEEM_SCAN)

        student = Student.for_user(principal.user_id)
        if student is None:
            raise NotAStudent()

        session = db.session.get(AttendanceSession, session_id)
        if session is None:
            raise SessionNotFound()

        if not session.is_active:
            raise SessionClosed()

        if not tokens_match(token, session.token):
            raise InvalidToken()

        if session.is_expired(now):
            raise SessionExpired()

        if ScanService._find_mark(session.id, student.id) is not None:
            raise AlreadyMarked()

        if session.require_photo and not proof.selfie:
            raise PhotoRequired()
        if session.require_device_fingerprint and not proof.device_fingerprint:
            raise DeviceFingerprintRequired()

        mark = AttendanceMark(
            session_id=session.id,
            student_id=student.id,
            marked_at=now,
            selfie_ref=proof.selfie_ref(),
            is_verified=False,
            ip_address=proof.ip_address,
            user_agent=proof.user_agent,
            device_fingerprint=proof.device_fingerprint,
            created_at=now,
            updated_at=now
        )
        try:
            db.session.add(mark)
            db.session.commit()
        except IntegrityError:
            # A concurrent scan by the same student won the insert.
            db.session.rollback()
            raise AlreadyMarked()

        logger.info("Student %s marked present in session %s", student.id, session.id)
        AuditService.record(
            user_id=principal.user_id,
            action=f"Marked attendance for session {session.id}",
            entity_type='attendance_mark',
            entity_id=mark.id,
            ip_address=proof.ip_address
        )
        return mark

    @staticmethod
    def _find_mark(session_id: int, student_id: int) -> Optional[AttendanceMark]:
        return AttendanceMark.query.filter_by(session_id=session_id, student_id=student_id).first()

    @staticmethod
    def list_my_marks(principal: Principal) -> List[MarkWithSession]:
        """The calling student's marks, newest first."""
        require_capability(principal, Capability.REDEEM_SCAN)
        student = Student.for_user(principal.user_id)
        if student is None:
            raise NotAStudent()

        rows = (
            db.session.query(AttendanceMark, AttendanceSession, Course)
            .join(AttendanceSession, AttendanceSession.id == AttendanceMark.session_id)
            .join(Course, Course.id == AttendanceSession.course_id)
            .filter(AttendanceMark.student_id == student.id)
            .order_by(AttendanceMark.marked_at.desc(), AttendanceMark.id.desc())
            .all()
        )
        return [MarkWithSession.from_row(mark, session, course) for mark, session, course in rows]

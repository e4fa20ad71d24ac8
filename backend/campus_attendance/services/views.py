"""Typed read models for joined attendance queries.

Each view is built by an explicit ``from_*`` mapping so callers never
handle loosely-typed joined rows.
"""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from campus_attendance.models.attendance_mark import AttendanceMark
from campus_attendance.models.attendance_session import AttendanceSession
from campus_attendance.models.course import Course
from campus_attendance.models.student import Student
from campus_attendance.models.user import User


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class CourseSummary:
    id: int
    code: str
    name: str
    department_id: int

    @classmethod
    def from_model(cls, course: Course) -> 'CourseSummary':
        return cls(id=course.id, code=course.code, name=course.name,
                   department_id=course.department_id)


@dataclass(frozen=True)
class SessionWithCourse:
    id: int
    course: CourseSummary
    lecturer_id: int
    session_date: datetime
    expires_at: datetime
    is_active: bool
    is_live: bool
    require_photo: bool
    require_device_fingerprint: bool
    mark_count: int

    @classmethod
    def from_row(cls, session: AttendanceSession, course: Course, mark_count: int,
                 now: datetime) -> 'SessionWithCourse':
        return cls(
            id=session.id,
            course=CourseSummary.from_model(course),
            lecturer_id=session.lecturer_id,
            session_date=session.session_date,
            expires_at=session.expires_at,
            is_active=session.is_active,
            is_live=session.is_live(now),
            require_photo=session.require_photo,
            require_device_fingerprint=session.require_device_fingerprint,
            mark_count=mark_count,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['session_date'] = _iso(self.session_date)
        data['expires_at'] = _iso(self.expires_at)
        return data


@dataclass(frozen=True)
class MarkWithStudent:
    id: int
    session_id: int
    student_id: int
    student_number: str
    student_name: str
    marked_at: datetime
    has_selfie: bool
    is_verified: bool
    ip_address: Optional[str]
    device_fingerprint: Optional[str]

    @classmethod
    def from_row(cls, mark: AttendanceMark, student: Student, user: User) -> 'MarkWithStudent':
        return cls(
            id=mark.id,
            session_id=mark.session_id,
            student_id=student.id,
            student_number=student.student_number,
            student_name=user.name,
            marked_at=mark.marked_at,
            has_selfie=mark.selfie_ref is not None,
            is_verified=mark.is_verified,
            ip_address=mark.ip_address,
            device_fingerprint=mark.device_fingerprint,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['marked_at'] = _iso(self.marked_at)
        return data


@dataclass(frozen=True)
class MarkWithSession:
    id: int
    session_id: int
    course: CourseSummary
    session_date: datetime
    marked_at: datetime
    is_verified: bool

    @classmethod
    def from_row(cls, mark: AttendanceMark, session: AttendanceSession,
                 course: Course) -> 'MarkWithSession':
        return cls(
            id=mark.id,
            session_id=session.id,
            course=CourseSummary.from_model(course),
            session_date=session.session_date,
            marked_at=mark.marked_at,
            is_verified=mark.is_verified,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['session_date'] = _iso(self.session_date)
        data['marked_at'] = _iso(self.marked_at)
        return data

"""Attendance session displayed to students as a rotating QR code."""
import secrets
from datetime import datetime
from typing import Optional

from campus_attendance import db
from campus_attendance.models.base import BaseModel
from campus_attendance.utils.helpers import utcnow


class AttendanceSession(BaseModel):
    """Time-boxed attendance window for one course meeting.

    ``is_active`` only ever goes from true to false. The token and expiry
    are replaced by a refresh; the row itself is kept for audit.
    """

    __tablename__ = 'attendance_sessions'

    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    lecturer_id = db.Column(db.Integer, db.ForeignKey('lecturers.id'), nullable=False, index=True)
    session_date = db.Column(db.DateTime, default=utcnow, nullable=False)
    token = db.Column(db.String(64), unique=True, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Anti-cheat flags snapshotted from the department at creation
    require_photo = db.Column(db.Boolean, default=True, nullable=False)
    require_device_fingerprint = db.Column(db.Boolean, default=False, nullable=False)
    validity_seconds = db.Column(db.Integer, nullable=False)

    # Relationships
    course = db.relationship('Course', backref=db.backref('attendance_sessions', lazy='dynamic'))
    lecturer = db.relationship('Lecturer', backref=db.backref('attendance_sessions', lazy='dynamic'))
    marks = db.relationship('AttendanceMark', backref='session', lazy='dynamic')

    @staticmethod
    def generate_token(num_bytes: int) -> str:
        """Generate an unguessable url-safe token."""
        return secrets.token_urlsafe(num_bytes)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def is_live(self, now: Optional[datetime] = None) -> bool:
        """Active and not yet expired; the single liveness rule."""
        return bool(self.is_active) and not self.is_expired(now)

    def to_dict(self, include_token: bool = True, now: Optional[datetime] = None):
        """Convert to dictionary."""
        data = super().to_dict(exclude=[] if include_token else ['token'])
        data['is_live'] = self.is_live(now)
        return data

    def __repr__(self):
        return f'<AttendanceSession {self.id} course={self.course_id}>'

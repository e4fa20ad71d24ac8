"""Attendance mark: one student's presence in one session."""
from campus_attendance import db
from campus_attendance.models.base import BaseModel
from campus_attendance.utils.helpers import utcnow


class AttendanceMark(BaseModel):
    """Append-only record of a successful scan."""

    __tablename__ = 'attendance_marks'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_mark_session_student'),
    )

    session_id = db.Column(db.Integer, db.ForeignKey('attendance_sessions.id'), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    marked_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # Proof of presence
    selfie_ref = db.Column(db.String(128), nullable=True)
    is_verified = db.Column(db.Boolean, default=False, nullable=False)

    # Client metadata
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.Text, nullable=True)
    device_fingerprint = db.Column(db.String(255), nullable=True)

    student = db.relationship('Student', backref=db.backref('attendance_marks', lazy='dynamic'))

    def __repr__(self):
        return f'<AttendanceMark {self.session_id}-{self.student_id}>'

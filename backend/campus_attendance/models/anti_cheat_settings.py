"""Per-department anti-cheat configuration."""
from campus_attendance import db
from campus_attendance.models.base import BaseModel


class AntiCheatSettings(BaseModel):
    """Template copied into each new session of the department."""

    __tablename__ = 'anti_cheat_settings'

    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=False, unique=True)
    require_photo = db.Column(db.Boolean, default=True, nullable=False)
    require_device_fingerprint = db.Column(db.Boolean, default=False, nullable=False)
    require_otp = db.Column(db.Boolean, default=False, nullable=False)
    session_timeout = db.Column(db.Integer, default=300, nullable=False)  # seconds

    department = db.relationship('Department', backref=db.backref('anti_cheat_settings', uselist=False))

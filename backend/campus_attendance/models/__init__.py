"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .department import Department
from .lecturer import Lecturer
from .student import Student
from .course import Course
from .attendance_session import AttendanceSession
from .attendance_mark import AttendanceMark
from .anti_cheat_settings import AntiCheatSettings
from .audit_log import AuditLog

__all__ = [
    'BaseModel', 'User', 'UserRole', 'Department',
    'Lecturer', 'Student', 'Course',
    'AttendanceSession', 'AttendanceMark',
    'AntiCheatSettings', 'AuditLog'
]

"""Typed failures raised by the attendance services.

Every error carries the HTTP status and a stable ``code`` so the API layer
can render it without knowing which service raised it.
"""


class AttendanceError(Exception):
    """Base class for expected, caller-recoverable failures."""

    status_code = 400
    code = 'attendance_error'
    message = 'Attendance request failed'

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            'error': True,
            'message': self.message,
            'status_code': self.status_code,
            'code': self.code
        }


class ValidationError(AttendanceError):
    """Malformed or missing request data."""
    code = 'validation_error'
    message = 'Invalid request data'


class Unauthorized(AttendanceError):
    status_code = 403
    code = 'unauthorized'
    message = 'You are not allowed to perform this action'


class CourseNotFound(AttendanceError):
    status_code = 404
    code = 'course_not_found'
    message = 'Course not found'


class SessionNotFound(AttendanceError):
    status_code = 404
    code = 'session_not_found'
    message = 'Session not found'


class DepartmentNotFound(AttendanceError):
    status_code = 404
    code = 'department_not_found'
    message = 'Department not found'


class NotAStudent(AttendanceError):
    status_code = 403
    code = 'not_a_student'
    message = 'Student profile not found'


class SessionClosed(AttendanceError):
    code = 'session_closed'
    message = 'Session is no longer active'


class InvalidToken(AttendanceError):
    # Never say which part of the token was wrong.
    code = 'invalid_token'
    message = 'Invalid session token'


class SessionExpired(AttendanceError):
    code = 'session_expired'
    message = 'Session has expired, ask your lecturer to refresh the code'


class AlreadyMarked(AttendanceError):
    status_code = 409
    code = 'already_marked'
    message = 'Attendance already marked for this session'


class PhotoRequired(AttendanceError):
    code = 'photo_required'
    message = 'A selfie is required for this session'


class DeviceFingerprintRequired(AttendanceError):
    code = 'device_fingerprint_required'
    message = 'A device fingerprint is required for this session'


class InvalidQRPayload(AttendanceError):
    code = 'invalid_qr_payload'
    message = 'Invalid QR code format'

"""Attendance API: session lifecycle for lecturers, scan redemption for students."""
from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_limiter.util import get_remote_address
from jwt.exceptions import PyJWTError

from campus_attendance import limiter
from campus_attendance.services.qr_service import QRService
from campus_attendance.services.scan_service import ScanProof, ScanService
from campus_attendance.services.session_service import SessionService
from campus_attendance.utils.decorators import current_principal, principal_required
from campus_attendance.utils.helpers import client_ip, success_response
from campus_attendance.utils.validators import MAX_ID, Validator

attendance_bp = Blueprint('attendance', __name__)

SELFIE_MAX_LENGTH = 8 * 1024 * 1024
SESSION_URL = f'/sessions/<int(max={MAX_ID}):session_id>'


def account_rate_key() -> str:
    """Rate-limit per account; a lecture hall shares one NAT address."""
    try:
        verify_jwt_in_request(optional=True)
        identity = get_jwt_identity()
    except (JWTExtendedException, PyJWTError):
        identity = None
    if identity:
        return f"user:{identity}"
    return get_remote_address()


def scan_rate_limit() -> str:
    return current_app.config['ATTENDANCE_SCAN_RATE_LIMIT']


def session_rate_limit() -> str:
    return current_app.config['ATTENDANCE_SESSION_RATE_LIMIT']


# One per-account budget across the session routes, replacing the per-address defaults.
session_limit = limiter.shared_limit(session_rate_limit, scope='attendance_sessions',
                                     key_func=account_rate_key)


@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')


# =================== LECTURER: SESSION LIFECYCLE ===================

@attendance_bp.route('/sessions', methods=['POST'])
@session_limit
@principal_required
def create_session():
    """Open an attendance session for a course and return its live token."""
    data = Validator.require_json(request.get_json(silent=True))
    Validator.validate_required_fields(data, ['course_id'])
    course_id = Validator.positive_int(data['course_id'], 'course_id')

    session = SessionService.create_session(current_principal(), course_id)
    result = session.to_dict()
    result['qr_payload'] = QRService.build_payload(session)

    return success_response(data=result, message="Attendance session created", status_code=201)


@attendance_bp.route('/sessions/active', methods=['GET'])
@session_limit
@principal_required
def active_sessions():
    sessions = SessionService.list_active_sessions(current_principal())
    return success_response(
        data=[s.to_dict() for s in sessions],
        message=f"Found {len(sessions)} active sessions"
    )


@attendance_bp.route(SESSION_URL, methods=['GET'])
@session_limit
@principal_required
def get_session(session_id):
    session = SessionService.get_session(current_principal(), session_id)
    return success_response(data=session.to_dict())


@attendance_bp.route(SESSION_URL + '/close', methods=['POST'])
@session_limit
@principal_required
def close_session(session_id):
    session = SessionService.close_session(current_principal(), session_id)
    return success_response(data=session.to_dict(include_token=False), message="Session closed")


@attendance_bp.route(SESSION_URL + '/refresh', methods=['POST'])
@session_limit
@principal_required
def refresh_session(session_id):
    """Rotate the token shown in the QR code."""
    session = SessionService.refresh_token(current_principal(), session_id)
    result = session.to_dict()
    result['qr_payload'] = QRService.build_payload(session)
    return success_response(data=result, message="Session token refreshed")


@attendance_bp.route(SESSION_URL + '/qr', methods=['GET'])
@session_limit
@principal_required
def session_qr(session_id):
    """QR payload and PNG image for the session's current token."""
    session = SessionService.get_session(current_principal(), session_id)
    return success_response(data=QRService.session_qr(session))


@attendance_bp.route(SESSION_URL + '/marks', methods=['GET'])
@session_limit
@principal_required
def session_marks(session_id):
    marks = SessionService.list_marks(current_principal(), session_id)
    return success_response(
        data=[m.to_dict() for m in marks],
        message=f"Found {len(marks)} attendance marks"
    )


# =================== STUDENT: SCAN REDEMPTION ===================

@attendance_bp.route('/scan', methods=['POST'])
@limiter.limit(scan_rate_limit, key_func=account_rate_key)
@principal_required
def scan():
    """Redeem a scanned QR code.

    Accepts either the raw ``qr_data`` text or explicit ``session_id`` and
    ``token``, plus optional ``selfie`` and ``device_fingerprint``.
    """
    data = Validator.require_json(request.get_json(silent=True))

    if data.get('qr_data'):
        session_id, token = QRService.decode_payload(data['qr_data'])
    else:
        Validator.validate_required_fields(data, ['session_id', 'token'])
        session_id = Validator.positive_int(data['session_id'], 'session_id')
        token = Validator.optional_string(data, 'token', max_length=256) or ''

    proof = ScanProof(
        selfie=Validator.optional_string(data, 'selfie', max_length=SELFIE_MAX_LENGTH),
        ip_address=client_ip(),
        user_agent=request.headers.get('User-Agent'),
        device_fingerprint=Validator.optional_string(data, 'device_fingerprint', max_length=255)
    )

    mark = ScanService.redeem_scan(current_principal(), session_id, token, proof)
    return success_response(
        data=mark.to_dict(exclude=['updated_at']),
        message="Attendance marked successfully",
        status_code=201
    )


@attendance_bp.route('/my-marks', methods=['GET'])
@session_limit
@principal_required
def my_marks():
    marks = ScanService.list_my_marks(current_principal())
    return success_response(
        data=[m.to_dict() for m in marks],
        message=f"Found {len(marks)} attendance marks"
    )

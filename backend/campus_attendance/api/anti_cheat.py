"""Anti-cheat settings API (admins and heads of department)."""
from flask import Blueprint, request

from campus_attendance.services.policy_service import PolicyService
from campus_attendance.utils.decorators import current_principal, principal_required
from campus_attendance.utils.helpers import success_response
from campus_attendance.utils.validators import MAX_ID, Validator

anti_cheat_bp = Blueprint('anti_cheat', __name__)

DEPARTMENT_URL = f'/<int(max={MAX_ID}):department_id>'


@anti_cheat_bp.route(DEPARTMENT_URL, methods=['GET'])
@principal_required
def get_settings(department_id):
    """Effective policy for a department (defaults when never configured)."""
    policy = PolicyService.get_policy(current_principal(), department_id)
    return success_response(data=dict(policy.to_dict(), department_id=department_id))


@anti_cheat_bp.route(DEPARTMENT_URL, methods=['PUT'])
@principal_required
def update_settings(department_id):
    data = Validator.require_json(request.get_json(silent=True))

    policy = PolicyService.upsert(
        current_principal(),
        department_id,
        require_photo=Validator.optional_bool(data, 'require_photo'),
        require_device_fingerprint=Validator.optional_bool(data, 'require_device_fingerprint'),
        require_otp=Validator.optional_bool(data, 'require_otp'),
        session_timeout=data.get('session_timeout')
    )
    return success_response(
        data=dict(policy.to_dict(), department_id=department_id),
        message="Anti-cheat settings saved"
    )

"""Administrative read endpoints."""
from flask import Blueprint, current_app, request

from campus_attendance.services.audit_service import AuditService
from campus_attendance.utils.decorators import current_principal, principal_required
from campus_attendance.utils.helpers import success_response

admin_bp = Blueprint('admin', __name__)

MAX_AUDIT_LIMIT = 500


@admin_bp.route('/audit-logs', methods=['GET'])
@principal_required
def audit_logs():
    """Most recent audit records for the admin dashboard."""
    limit = request.args.get('limit', current_app.config['AUDIT_LOG_DEFAULT_LIMIT'], type=int)
    limit = max(1, min(limit, MAX_AUDIT_LIMIT))

    logs = AuditService.recent(current_principal(), limit=limit)
    return success_response(
        data=[log.to_dict() for log in logs],
        message=f"Found {len(logs)} audit records"
    )

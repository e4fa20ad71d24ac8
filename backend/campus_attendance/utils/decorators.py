"""Request decorators resolving the authenticated principal."""
from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from campus_attendance import db
from campus_attendance.models.user import User
from campus_attendance.utils.helpers import error_response
from campus_attendance.utils.permissions import Principal


def principal_required(f):
    """Require a valid access token and expose the caller as ``g.principal``.

    The role is read from the user row rather than the token claims, so a
    demoted or deactivated account loses access immediately.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        try:
            user_id = int(get_jwt_identity())
        except (TypeError, ValueError):
            return error_response("Invalid token subject", 401)

        user = db.session.get(User, user_id)
        if not user or not user.is_active:
            return error_response("User not found", 404)

        g.principal = Principal(user_id=user.id, role=user.role)
        return f(*args, **kwargs)
    return decorated_function


def current_principal() -> Principal:
    return g.principal

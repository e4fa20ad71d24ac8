"""Authentication service for user management."""
import logging
from typing import Optional, Tuple

from flask_jwt_extended import create_access_token, create_refresh_token

from campus_attendance import db
from campus_attendance.models.user import User
from campus_attendance.utils.helpers import utcnow
from campus_attendance.utils.validators import Validator

logger = logging.getLogger(__name__)


class AuthService:
    @staticmethod
    def issue_tokens(user: User) -> dict:
        """Access and refresh tokens carrying the user's role as a claim."""
        claims = {'role': user.role.value}
        return {
            "access_token": create_access_token(identity=str(user.id), additional_claims=claims),
            "refresh_token": create_refresh_token(identity=str(user.id), additional_claims=claims),
        }

    @staticmethod
    def login(email: str, password: str) -> Tuple[Optional[dict], Optional[str]]:
        """Authenticate user and return tokens."""
        if not email or not password:
            return None, "Email and password are required"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user or not user.check_password(password):
            logger.info("Failed login for %s", email)
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.last_login = utcnow()
        db.session.commit()

        result = AuthService.issue_tokens(user)
        result["user"] = user.to_dict()
        return result, None

    @staticmethod
    def get_user_by_id(user_id: int) -> Optional[User]:
        """Get user by ID."""
        return db.session.get(User, user_id)

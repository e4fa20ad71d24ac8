"""Per-department anti-cheat policy resolution."""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from flask import current_app

from campus_attendance import db
from campus_attendance.models.anti_cheat_settings import AntiCheatSettings
from campus_attendance.models.department import Department
from campus_attendance.models.lecturer import Lecturer
from campus_attendance.models.user import UserRole
from campus_attendance.services.audit_service import AuditService
from campus_attendance.utils.errors import DepartmentNotFound, Unauthorized, ValidationError
from campus_attendance.utils.permissions import Capability, Principal, require_capability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AntiCheatPolicy:
    """Effective anti-cheat rules for a department."""
    require_photo: bool
    require_device_fingerprint: bool
    require_otp: bool
    session_timeout: int
    configured: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PolicyService:
    """Resolves and maintains department anti-cheat settings."""

    @staticmethod
    def default_policy() -> AntiCheatPolicy:
        """Safe fallback: selfie required, nothing else."""
        return AntiCheatPolicy(
            require_photo=True,
            require_device_fingerprint=False,
            require_otp=False,
            session_timeout=current_app.config['ATTENDANCE_SESSION_TTL_SECONDS'],
        )

    @staticmethod
    def resolve(department_id: int) -> AntiCheatPolicy:
        """Configured settings for the department, or the default policy."""
        settings = AntiCheatSettings.query.filter_by(department_id=department_id).first()
        if settings is None:
            return PolicyService.default_policy()

        return AntiCheatPolicy(
            require_photo=settings.require_photo,
            require_device_fingerprint=settings.require_device_fingerprint,
            require_otp=settings.require_otp,
            session_timeout=settings.session_timeout,
            configured=True,
        )

    @staticmethod
    def get_policy(principal: Principal, department_id: int) -> AntiCheatPolicy:
        """Effective policy of an existing department, for policy managers."""
        require_capability(principal, Capability.MANAGE_ANTI_CHEAT)
        if db.session.get(Department, department_id) is None:
            raise DepartmentNotFound()
        return PolicyService.resolve(department_id)

    @staticmethod
    def upsert(
        principal: Principal,
        department_id: int,
        require_photo: Optional[bool] = None,
        require_device_fingerprint: Optional[bool] = None,
        require_otp: Optional[bool] = None,
        session_timeout: Optional[int] = None
    ) -> AntiCheatPolicy:
        """Create or update the single settings row of a department.

        Fields left as None keep their stored (or default) value. Existing
        sessions are unaffected; they hold their own copy of the flags.
        """
        require_capability(principal, Capability.MANAGE_ANTI_CHEAT)

        department = db.session.get(Department, department_id)
        if department is None:
            raise DepartmentNotFound()

        if principal.role == UserRole.HOD:
            lecturer = Lecturer.for_user(principal.user_id)
            if lecturer is None or lecturer.department_id != department_id:
                raise Unauthorized("Heads of department can only configure their own department")

        if session_timeout is not None:
            PolicyService._validate_timeout(session_timeout)

        current = PolicyService.resolve(department_id)
        settings = AntiCheatSettings.query.filter_by(department_id=department_id).first()
        if settings is None:
            settings = AntiCheatSettings(department_id=department_id)
            db.session.add(settings)

        settings.require_photo = current.require_photo if require_photo is None else require_photo
        settings.require_device_fingerprint = (
            current.require_device_fingerprint
            if require_device_fingerprint is None else require_device_fingerprint
        )
        settings.require_otp = current.require_otp if require_otp is None else require_otp
        settings.session_timeout = (
            current.session_timeout if session_timeout is None else session_timeout
        )
        db.session.commit()

        logger.info("Anti-cheat settings for department %s updated by user %s",
                    department.code, principal.user_id)
        AuditService.record(
            user_id=principal.user_id,
            action=f"Updated anti-cheat settings for department: {department.code}",
            entity_type='anti_cheat_settings',
            entity_id=settings.id
        )
        return PolicyService.resolve(department_id)

    @staticmethod
    def _validate_timeout(value: int) -> None:
        low = current_app.config['ATTENDANCE_MIN_SESSION_TIMEOUT']
        high = current_app.config['ATTENDANCE_MAX_SESSION_TIMEOUT']
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError("session_timeout must be an integer number of seconds")
        if value < low or value > high:
            raise ValidationError(f"session_timeout must be between {low} and {high} seconds")

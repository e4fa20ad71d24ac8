"""Role based capability checks.

Each service operation starts with ``require_capability`` instead of
relying on route decorators, so the rule travels with the operation.
"""
from dataclasses import dataclass
from enum import Enum

from campus_attendance.models.user import UserRole
from campus_attendance.utils.errors import Unauthorized


class Capability(Enum):
    CREATE_SESSION = 'create_session'
    MANAGE_SESSION = 'manage_session'
    REDEEM_SCAN = 'redeem_scan'
    MANAGE_ANTI_CHEAT = 'manage_anti_cheat'
    VIEW_AUDIT_LOG = 'view_audit_log'


ROLE_CAPABILITIES = {
    UserRole.ADMIN: {Capability.MANAGE_ANTI_CHEAT, Capability.VIEW_AUDIT_LOG},
    UserRole.HOD: {
        Capability.CREATE_SESSION,
        Capability.MANAGE_SESSION,
        Capability.MANAGE_ANTI_CHEAT,
    },
    UserRole.LECTURER: {Capability.CREATE_SESSION, Capability.MANAGE_SESSION},
    UserRole.STAFF: set(),
    UserRole.STUDENT: {Capability.REDEEM_SCAN},
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as resolved from the access token."""
    user_id: int
    role: UserRole

    def can(self, capability: Capability) -> bool:
        return capability in ROLE_CAPABILITIES.get(self.role, set())


def require_capability(principal: Principal, capability: Capability) -> None:
    """Raise ``Unauthorized`` unless the principal's role grants the capability."""
    if principal is None or not principal.can(capability):
        raise Unauthorized(f"Role is not allowed to {capability.value.replace('_', ' ')}")

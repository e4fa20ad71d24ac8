"""Best-effort audit trail."""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from campus_attendance import db
from campus_attendance.models.audit_log import AuditLog
from campus_attendance.utils.permissions import Capability, Principal, require_capability

logger = logging.getLogger(__name__)


class AuditService:
    """Writes audit records without ever failing the audited operation."""

    @staticmethod
    def record(
        user_id: Optional[int],
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        details: Optional[str] = None,
        ip_address: Optional[str] = None
    ) -> Optional[AuditLog]:
        """Persist an audit row in its own commit; return None if that fails.

        Call only after the primary change has been committed.
        """
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            ip_address=ip_address
        )
        try:
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning("Audit record dropped (%s %s:%s): %s",
                           action, entity_type, entity_id, e)
            return None
        return entry

    @staticmethod
    def recent(principal: Principal, limit: int = 100) -> List[AuditLog]:
        """Most recent audit records, newest first."""
        require_capability(principal, Capability.VIEW_AUDIT_LOG)
        return (
            AuditLog.query
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .all()
        )

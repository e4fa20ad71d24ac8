"""Audit trail of attendance actions."""
from campus_attendance import db
from campus_attendance.models.base import BaseModel


class AuditLog(BaseModel):
    __tablename__ = 'audit_logs'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    action = db.Column(db.Text, nullable=False)
    entity_type = db.Column(db.String(50), nullable=True)
    entity_id = db.Column(db.Integer, nullable=True)
    details = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)

    def to_dict(self):
        return super().to_dict(exclude=['updated_at'])

    def __repr__(self):
        return f'<AuditLog {self.action}>'

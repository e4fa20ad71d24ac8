"""Lecturer profile attached to a user account."""
from campus_attendance import db
from campus_attendance.models.base import BaseModel


class Lecturer(BaseModel):
    __tablename__ = 'lecturers'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)
    employee_id = db.Column(db.String(50), unique=True, nullable=False)
    designation = db.Column(db.String(255), nullable=True)
    is_hod = db.Column(db.Boolean, default=False, nullable=False)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=False)

    user = db.relationship('User', backref=db.backref('lecturer_profile', uselist=False))

    @classmethod
    def for_user(cls, user_id: int) -> 'Lecturer':
        return cls.query.filter_by(user_id=user_id).first()

    def __repr__(self):
        return f'<Lecturer {self.employee_id}>'

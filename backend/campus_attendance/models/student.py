"""Student profile attached to a user account."""
from campus_attendance import db
from campus_attendance.models.base import BaseModel


class Student(BaseModel):
    __tablename__ = 'students'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True)
    student_number = db.Column(db.String(50), unique=True, nullable=False, index=True)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=False)

    user = db.relationship('User', backref=db.backref('student_profile', uselist=False))

    @classmethod
    def for_user(cls, user_id: int) -> 'Student':
        return cls.query.filter_by(user_id=user_id).first()

    def __repr__(self):
        return f'<Student {self.student_number}>'

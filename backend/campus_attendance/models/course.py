"""Course model."""
from campus_attendance import db
from campus_attendance.models.base import BaseModel


class Course(BaseModel):
    __tablename__ = 'courses'

    code = db.Column(db.String(20), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=False)
    lecturer_id = db.Column(db.Integer, db.ForeignKey('lecturers.id'), nullable=True)
    credits = db.Column(db.Integer, nullable=True)

    def __repr__(self):
        return f'<Course {self.code}>'

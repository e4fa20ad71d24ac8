"""Academic department."""
from campus_attendance import db
from campus_attendance.models.base import BaseModel


class Department(BaseModel):
    __tablename__ = 'departments'

    code = db.Column(db.String(10), unique=True, nullable=False)  # ICT, ENG, BSM ...
    name = db.Column(db.String(255), nullable=False)

    courses = db.relationship('Course', backref='department', lazy='dynamic')

    def __repr__(self):
        return f'<Department {self.code}>'

"""Shared fixtures: an app on in-memory SQLite and a tiny campus."""
from datetime import datetime
from types import SimpleNamespace

import pytest
from flask_jwt_extended import create_access_token

from campus_attendance import create_app, db
from campus_attendance.models import Course, Department, Lecturer, Student, User, UserRole
from campus_attendance.utils.permissions import Principal

PASSWORD = 'password123'

# Fixed clock for service-level tests.
T0 = datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def make_user(email, role, name=None, department_id=None, user_id=None):
    user = User(id=user_id, email=email, name=name or email.split('@')[0], role=role,
                department_id=department_id)
    user.set_password(PASSWORD)
    return user.save()


def make_lecturer(email, department_id, employee_id, is_hod=False, user_id=None, lecturer_id=None):
    role = UserRole.HOD if is_hod else UserRole.LECTURER
    user = make_user(email, role, department_id=department_id, user_id=user_id)
    lecturer = Lecturer(id=lecturer_id, user_id=user.id, employee_id=employee_id,
                        is_hod=is_hod, department_id=department_id).save()
    return Principal(user.id, role), lecturer.id


def make_student(email, department_id, student_number, user_id=None, student_id=None):
    user = make_user(email, UserRole.STUDENT, department_id=department_id, user_id=user_id)
    student = Student(id=student_id, user_id=user.id, student_number=student_number,
                      department_id=department_id).save()
    return Principal(user.id, UserRole.STUDENT), student.id


@pytest.fixture
def campus(app):
    """Two departments, their lecturers, one course each and two students.

    Only ids and principals are exposed so tests never hold stale ORM rows.
    """
    ict = Department(code='ICT', name='Information & Communication Technology').save()
    eng = Department(code='ENG', name='Engineering').save()

    lecturer, lecturer_id = make_lecturer('lecturer@campus.edu', ict.id, 'EMP-001')
    hod, hod_id = make_lecturer('hod@campus.edu', ict.id, 'EMP-002', is_hod=True)
    colleague, colleague_id = make_lecturer('colleague@campus.edu', ict.id, 'EMP-003')
    eng_hod, eng_hod_id = make_lecturer('hod@eng.campus.edu', eng.id, 'EMP-101', is_hod=True)

    course = Course(code='ICT101', name='Programming Fundamentals', department_id=ict.id,
                    lecturer_id=lecturer_id, credits=3).save()
    eng_course = Course(code='ENG101', name='Statics', department_id=eng.id,
                        lecturer_id=eng_hod_id, credits=3).save()

    student, student_id = make_student('student1@campus.edu', ict.id, 'ICT-FT-2025-001')
    second_student, second_student_id = make_student('student2@campus.edu', ict.id,
                                                     'ICT-FT-2025-002')

    admin_user = make_user('admin@campus.edu', UserRole.ADMIN)
    staff_user = make_user('staff@campus.edu', UserRole.STAFF, department_id=ict.id)

    return SimpleNamespace(
        department_id=ict.id,
        other_department_id=eng.id,
        course_id=course.id,
        other_course_id=eng_course.id,
        lecturer=lecturer,
        lecturer_id=lecturer_id,
        hod=hod,
        hod_id=hod_id,
        colleague=colleague,
        colleague_id=colleague_id,
        eng_hod=eng_hod,
        student=student,
        student_id=student_id,
        second_student=second_student,
        second_student_id=second_student_id,
        admin=Principal(admin_user.id, UserRole.ADMIN),
        staff=Principal(staff_user.id, UserRole.STAFF),
    )


@pytest.fixture
def auth_headers(app):
    """Build an Authorization header for a principal."""
    def _headers(principal):
        token = create_access_token(identity=str(principal.user_id),
                                    additional_claims={'role': principal.role.value})
        return {'Authorization': f'Bearer {token}'}
    return _headers

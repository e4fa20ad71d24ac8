"""Database seeding service for demo data."""
from typing import Dict

from campus_attendance import db
from campus_attendance.models.course import Course
from campus_attendance.models.department import Department
from campus_attendance.models.lecturer import Lecturer
from campus_attendance.models.student import Student
from campus_attendance.models.user import User, UserRole

DEMO_PASSWORD = 'campus123'


class SeedService:
    """Service to seed database with a small, self-consistent campus."""

    @staticmethod
    def seed_all() -> Dict:
        """Seed one department with its head, a lecturer, a course and students.

        Safe to run repeatedly; existing rows are reused.
        """
        department = SeedService.seed_department('ICT', 'Information & Communication Technology')
        hod = SeedService.seed_lecturer(department, 'hod.ict@campus.edu', 'Head of ICT',
                                        'EMP-ICT-001', is_hod=True)
        lecturer = SeedService.seed_lecturer(department, 'lecturer.ict@campus.edu',
                                             'ICT Lecturer', 'EMP-ICT-002')
        course = SeedService.seed_course(department, lecturer, 'ICT101', 'Programming Fundamentals')
        students = [
            SeedService.seed_student(department, f'student{n}.ict@campus.edu',
                                     f'ICT Student {n}', f'ICT-FT-2025-{n:03d}')
            for n in (1, 2)
        ]
        db.session.commit()

        return {
            'department': department.code,
            'course': course.code,
            'lecturers': len([hod, lecturer]),
            'students': len(students)
        }

    @staticmethod
    def seed_department(code: str, name: str) -> Department:
        department = Department.query.filter_by(code=code).first()
        if department is None:
            department = Department(code=code, name=name)
            db.session.add(department)
            db.session.flush()
        return department

    @staticmethod
    def _user(email: str, name: str, role: UserRole, department: Department) -> User:
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, name=name, role=role, department_id=department.id)
            user.set_password(DEMO_PASSWORD)
            db.session.add(user)
            db.session.flush()
        return user

    @staticmethod
    def seed_lecturer(department: Department, email: str, name: str, employee_id: str,
                      is_hod: bool = False) -> Lecturer:
        role = UserRole.HOD if is_hod else UserRole.LECTURER
        user = SeedService._user(email, name, role, department)
        lecturer = Lecturer.for_user(user.id)
        if lecturer is None:
            lecturer = Lecturer(user_id=user.id, employee_id=employee_id, is_hod=is_hod,
                                department_id=department.id)
            db.session.add(lecturer)
            db.session.flush()
        return lecturer

    @staticmethod
    def seed_student(department: Department, email: str, name: str,
                     student_number: str) -> Student:
        user = SeedService._user(email, name, UserRole.STUDENT, department)
        student = Student.for_user(user.id)
        if student is None:
            student = Student(user_id=user.id, student_number=student_number,
                              department_id=department.id)
            db.session.add(student)
            db.session.flush()
        return student

    @staticmethod
    def seed_course(department: Department, lecturer: Lecturer, code: str, name: str) -> Course:
        course = Course.query.filter_by(code=code).first()
        if course is None:
            course = Course(code=code, name=name, department_id=department.id,
                            lecturer_id=lecturer.id, credits=3)
            db.session.add(course)
            db.session.flush()
        return course

import uuid

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from config.config import TestingConfig
from extensions import db
from models import Course, Enrollment, Module, Parent, Student, Teacher, User
from services.authorization import Principal

PASSWORD = "password123"


@pytest.fixture
def app(tmp_path):
    config = type("Config", (TestingConfig,), {"STORAGE_ROOT": str(tmp_path / "storage")})
    app = create_app(config)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def principal(user):
    # Accept a Student profile as well as a User
    user = getattr(user, "user", None) or user
    return Principal(user.user_id, user.role, user.email, user.full_name)


class Factory:
    """Builds rows straight through the session, bypassing the services."""

    def __init__(self):
        self.counter = 0

    def _next(self):
        self.counter += 1
        return self.counter

    def user(self, role, full_name=None, email=None):
        n = self._next()
        user = User(
            email=email or f"{role}{n}@school.test",
            full_name=full_name or f"{role.title()} {n}",
            role=role,
            password_hash=generate_password_hash(PASSWORD),
            is_active=True
        )
        db.session.add(user)
        db.session.flush()
        return user

    def teacher(self, full_name=None):
        user = self.user("teacher", full_name)
        db.session.add(Teacher(
            teacher_id=user.user_id, employee_id=f"EMP{user.user_id}",
            department="Science", designation="Teacher"
        ))
        db.session.commit()
        return user

    def student(self, full_name=None, parent=None):
        user = self.user("student", full_name)
        student = Student(
            student_id=user.user_id,
            registration_number=f"STU2024{user.user_id:05d}",
            class_name="10",
            section="A",
            parent_id=parent.user_id if parent else None,
            parent_link_code=str(uuid.uuid4())
        )
        db.session.add(student)
        db.session.commit()
        return student

    def parent(self, full_name=None):
        user = self.user("parent", full_name)
        db.session.add(Parent(parent_id=user.user_id, phone_number="555-0100", address="1 School Rd"))
        db.session.commit()
        return user

    def admin(self):
        user = self.user("admin", "Admin")
        db.session.commit()
        return user

    def course(self, teacher, name="Mathematics", code=None):
        course = Course(course_name=name, course_code=code or f"C{self._next()}", teacher_id=teacher.user_id)
        db.session.add(course)
        db.session.commit()
        return course

    def module(self, course, name="Quiz", total_marks=100):
        module = Module(course_id=course.course_id, module_name=name, total_marks=total_marks)
        db.session.add(module)
        db.session.commit()
        return module

    def enroll(self, student, course):
        enrollment = Enrollment(student_id=student.student_id, course_id=course.course_id)
        db.session.add(enrollment)
        db.session.commit()
        return enrollment


@pytest.fixture
def factory(app):
    return Factory()


@pytest.fixture
def login(client):
    def _login(user):
        user = getattr(user, "user", None) or user
        resp = client.post("/auth/login", json={"email": user.email, "password": PASSWORD})
        assert resp.status_code == 200
        return client
    return _login

import os
import uuid

from werkzeug.security import generate_password_hash

from extensions import db
from models import Course, Enrollment, Module, Student, Teacher, User


def get_or_create_user(email, full_name, role, password):
    user = User.query.filter_by(email=email).first()
    if user:
        return user, False

    user = User(
        email=email,
        full_name=full_name,
        role=role,
        password_hash=generate_password_hash(password),
        is_active=True
    )
    db.session.add(user)
    db.session.flush()
    return user, True


def seed_admin():
    email = os.getenv("ADMIN_EMAIL", "admin@school.local")
    password = os.getenv("ADMIN_PASSWORD", "admin123")

    _, created = get_or_create_user(email, "Administrator", "admin", password)
    db.session.commit()
    print(f"Admin {'created' if created else 'verified'} ({email})")


def seed_demo_course():
    teacher_user, created = get_or_create_user(
        "teacher@school.local", "Demo Teacher", "teacher", "teacher123"
    )
    if created:
        db.session.add(Teacher(
            teacher_id=teacher_user.user_id,
            employee_id="EMP001",
            department="Science",
            designation="Teacher"
        ))

    student_user, created = get_or_create_user(
        "student@school.local", "Demo Student", "student", "student123"
    )
    if created:
        db.session.add(Student(
            student_id=student_user.user_id,
            registration_number=f"STU0000{student_user.user_id:05d}",
            class_name="10",
            section="A",
            parent_link_code=str(uuid.uuid4())
        ))

    course = Course.query.filter_by(course_code="SCI101", teacher_id=teacher_user.user_id).first()
    if not course:
        course = Course(course_name="General Science", course_code="SCI101", teacher_id=teacher_user.user_id)
        db.session.add(course)
        db.session.flush()
        db.session.add_all([
            Module(course_id=course.course_id, module_name="Unit Test 1", total_marks=50),
            Module(course_id=course.course_id, module_name="Mid Term", total_marks=100),
        ])

    if not Enrollment.query.filter_by(student_id=student_user.user_id, course_id=course.course_id).first():
        db.session.add(Enrollment(student_id=student_user.user_id, course_id=course.course_id))

    db.session.commit()
    print("Demo course seeded (SCI101)")


def run_seed():
    seed_admin()
    seed_demo_course()

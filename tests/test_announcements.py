import pytest

from conftest import principal
from services.announcements import (
    create_announcement, get_parent_announcements, get_student_announcements,
    get_teacher_announcements
)


@pytest.fixture
def school(factory):
    teacher = factory.teacher()
    course = factory.course(teacher, name="History")
    other_course = factory.course(teacher, name="Art")
    parent = factory.parent()
    child = factory.student(parent=parent)
    factory.enroll(child, course)
    return teacher, course, other_course, parent, child


def post(teacher, title, audience, course=None):
    result = create_announcement(
        principal(teacher), title, "Details inside.", audience,
        course_id=course.course_id if course else None,
        is_all_students=course is None
    )
    assert result.success, result.error
    return result["announcement"]


def test_students_see_enrolled_and_school_wide_posts(school):
    teacher, course, other_course, _, child = school
    post(teacher, "Exam moved", "students", course)
    post(teacher, "Holiday", "both")
    post(teacher, "Art supplies", "students", other_course)
    post(teacher, "Parents evening", "parents")

    titles = [a["title"] for a in get_student_announcements(principal(child))["announcements"]]

    assert sorted(titles) == ["Exam moved", "Holiday"]


def test_parents_see_posts_for_their_childrens_courses(school):
    teacher, course, other_course, parent, _ = school
    post(teacher, "Trip consent", "parents", course)
    post(teacher, "Holiday", "both")
    post(teacher, "Art fees", "parents", other_course)
    post(teacher, "Exam moved", "students", course)

    titles = [a["title"] for a in get_parent_announcements(principal(parent))["announcements"]]

    assert sorted(titles) == ["Holiday", "Trip consent"]


def test_newest_first(school):
    teacher, _, _, _, child = school
    post(teacher, "First", "both")
    post(teacher, "Second", "both")

    titles = [a["title"] for a in get_student_announcements(principal(child))["announcements"]]
    assert titles == ["Second", "First"]


def test_course_or_everyone_but_not_both(school):
    teacher, course, _, _, _ = school
    actor = principal(teacher)

    both = create_announcement(actor, "T", "C", "students", course_id=course.course_id, is_all_students=True)
    neither = create_announcement(actor, "T", "C", "students")

    assert both.kind == "validation"
    assert neither.kind == "validation"


def test_announcement_validation(school):
    teacher, course, _, _, _ = school
    actor = principal(teacher)
    assert create_announcement(actor, "", "C", "students", is_all_students=True).kind == "validation"
    assert create_announcement(actor, "T", "", "students", is_all_students=True).kind == "validation"
    assert create_announcement(actor, "T", "C", "everyone", is_all_students=True).kind == "validation"


def test_teachers_post_only_to_their_courses(school, factory):
    _, course, _, _, child = school
    intruder = factory.teacher()

    result = create_announcement(principal(intruder), "T", "C", "students", course_id=course.course_id)

    assert result.kind == "forbidden"
    assert create_announcement(principal(child), "T", "C", "students", is_all_students=True).kind == "forbidden"


def test_teacher_sees_own_posts(school):
    teacher, course, _, _, _ = school
    post(teacher, "Mine", "students", course)
    listing = get_teacher_announcements(principal(teacher))["announcements"]
    assert [a["title"] for a in listing] == ["Mine"]
    assert listing[0]["course_name"] == "History"

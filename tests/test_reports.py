import pandas as pd
import pytest

from conftest import principal
from services.marks import save_mark
from services.reports import build_gradebook, gradebook_excel, gradebook_filename, gradebook_pdf


@pytest.fixture
def gradebook(factory):
    teacher = factory.teacher()
    course = factory.course(teacher, name="Physics", code="PHY 101")
    quiz = factory.module(course, name="Quiz", total_marks=50)
    exam = factory.module(course, name="Exam", total_marks=100)
    strong = factory.student(full_name="Bea")
    partial = factory.student(full_name="al")
    for student in (strong, partial):
        factory.enroll(student, course)

    save_mark(principal(teacher), quiz.module_id, strong.student_id, 45)
    save_mark(principal(teacher), exam.module_id, strong.student_id, 60)
    save_mark(principal(teacher), quiz.module_id, partial.student_id, 40)

    result = build_gradebook(principal(teacher), course.course_id)
    assert result.success, result.error
    return result["gradebook"]


def test_gradebook_rows(gradebook):
    rows = {row["student_name"]: row for row in gradebook["students"]}

    assert [row["student_name"] for row in gradebook["students"]] == ["al", "Bea"]
    assert rows["Bea"]["percentage"] == 70.0
    assert rows["Bea"]["gpa"] == 2.0
    assert rows["al"]["percentage"] == 80.0
    assert list(rows["al"]["scores"].values()) == [40, None]


def test_gradebook_is_owner_only(factory):
    course = factory.course(factory.teacher())
    assert build_gradebook(principal(factory.teacher()), course.course_id).kind == "forbidden"


def test_pdf_export(gradebook):
    data = gradebook_pdf(gradebook).read()
    assert data.startswith(b"%PDF")
    assert gradebook_filename(gradebook, "pdf") == "gradebook_PHY_101.pdf"


def test_excel_export(gradebook):
    df = pd.read_excel(gradebook_excel(gradebook), engine="openpyxl")
    assert list(df.columns) == ["Reg No", "Student Name", "Quiz (/50)", "Exam (/100)", "Percentage", "GPA"]
    assert list(df["Student Name"]) == ["al", "Bea"]
    assert list(df["Exam (/100)"].astype(str)) == ["--", "60"]

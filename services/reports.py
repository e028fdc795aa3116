"""Course gradebook: every enrolled student against every module, with GPA."""
import re
from io import BytesIO

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from extensions import db
from models import Enrollment, Mark, Module, Student
from services.courses import load_owned_course
from services.grading import percentage_to_gpa, weighted_percentage
from services.result import ServiceResult, service_action
from utils.dates import utcnow


@service_action("Failed to build gradebook.")
def build_gradebook(principal, course_id):
    course = load_owned_course(
        principal, course_id,
        "You do not have permission to view the gradebook for this course."
    )

    modules = (
        Module.query
        .filter_by(course_id=course.course_id)
        .order_by(Module.created_at.asc(), Module.module_id.asc())
        .all()
    )
    students = (
        Student.query
        .join(Enrollment, Enrollment.student_id == Student.student_id)
        .filter(Enrollment.course_id == course.course_id)
        .all()
    )

    module_ids = [m.module_id for m in modules]
    marks = {}
    if module_ids:
        for mark in db.session.query(Mark).filter(Mark.module_id.in_(module_ids)).all():
            marks[(mark.student_id, mark.module_id)] = mark.obtained_marks

    rows = []
    for student in students:
        scores = {}
        pairs = []
        for module in modules:
            obtained = marks.get((student.student_id, module.module_id))
            scores[module.module_id] = obtained
            if obtained is not None:
                pairs.append((obtained, module.total_marks))
        percentage = weighted_percentage(pairs)
        rows.append({
            "student_id": student.student_id,
            "student_name": student.full_name or "Unknown",
            "registration_number": student.registration_number,
            "scores": scores,
            "percentage": round(percentage, 2),
            "gpa": round(percentage_to_gpa(percentage), 2),
        })
    rows.sort(key=lambda r: r["student_name"].casefold())

    return ServiceResult.ok(gradebook={
        "course_id": course.course_id,
        "course_name": course.course_name,
        "course_code": course.course_code,
        "modules": [
            {"module_id": m.module_id, "module_name": m.module_name, "total_marks": m.total_marks}
            for m in modules
        ],
        "students": rows,
    })


def _table_rows(gradebook):
    header = ["Reg No", "Student Name"]
    header += [f"{m['module_name']} (/{m['total_marks']:g})" for m in gradebook["modules"]]
    header += ["Percentage", "GPA"]

    body = []
    for row in gradebook["students"]:
        line = [row["registration_number"] or "--", row["student_name"]]
        for m in gradebook["modules"]:
            score = row["scores"].get(m["module_id"])
            line.append("--" if score is None else f"{score:g}")
        line += [f"{row['percentage']}%", f"{row['gpa']:.2f}"]
        body.append(line)
    return header, body


def gradebook_filename(gradebook, extension):
    safe_code = re.sub(r"[^a-zA-Z0-9]+", "_", gradebook["course_code"]).strip("_")
    return f"gradebook_{safe_code or gradebook['course_id']}.{extension}"


def gradebook_pdf(gradebook):
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(A4),
        leftMargin=24, rightMargin=24, topMargin=24, bottomMargin=24
    )
    styles = getSampleStyleSheet()
    now_text = utcnow().strftime("%Y-%m-%d %H:%M")

    elements = [
        Paragraph(f"Gradebook - {gradebook['course_name']}", styles["Title"]),
        Paragraph(f"Course Code: {gradebook['course_code']} | Generated: {now_text} UTC", styles["Normal"]),
        Spacer(1, 12)
    ]

    header, body = _table_rows(gradebook)
    if not body:
        body = [["--", "No students enrolled"] + ["--"] * (len(header) - 2)]

    table = Table([header] + body, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (2, 1), (-1, -1), "CENTER"),
    ]))
    elements.append(table)
    doc.build(elements)
    buffer.seek(0)
    return buffer


def gradebook_excel(gradebook):
    header, body = _table_rows(gradebook)
    df = pd.DataFrame(body, columns=header)

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=re.sub(r"[\[\]:*?/\\]", "_", gradebook["course_code"])[:31] or "Gradebook", index=False)
    buffer.seek(0)
    return buffer

from extensions import db

ATTENDANCE_STATUSES = ("present", "absent", "late")


class Attendance(db.Model):
    __tablename__ = "attendance"

    attendance_id = db.Column(db.Integer, primary_key=True)

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("students.student_id"),
        nullable=False
    )

    course_id = db.Column(
        db.Integer,
        db.ForeignKey("courses.course_id"),
        nullable=False
    )

    date = db.Column(db.Date, nullable=False)
    status = db.Column(
        db.Enum(*ATTENDANCE_STATUSES, name="attendance_status"),
        nullable=False
    )

    course = db.relationship("Course", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("student_id", "course_id", "date", name="unique_student_course_date"),
    )

    def __repr__(self):
        return f"<Attendance student={self.student_id} {self.date}>"

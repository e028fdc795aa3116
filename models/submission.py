from extensions import db


class Submission(db.Model):
    __tablename__ = "submissions"

    submission_id = db.Column(db.Integer, primary_key=True)

    assignment_id = db.Column(
        db.Integer,
        db.ForeignKey("assignments.assignment_id"),
        nullable=False
    )

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("students.student_id"),
        nullable=False
    )

    text_answer = db.Column(db.Text, nullable=True)
    file_path = db.Column(db.String(255), nullable=True)

    # 0-100 scale, independent of module total_marks
    marks = db.Column(db.Float, nullable=True)
    feedback = db.Column(db.Text, nullable=True)

    submitted_at = db.Column(db.DateTime, nullable=False)
    graded_at = db.Column(db.DateTime, nullable=True)

    student = db.relationship("Student", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("assignment_id", "student_id", name="unique_assignment_student"),
    )

    def __repr__(self):
        return f"<Submission assignment={self.assignment_id} student={self.student_id}>"

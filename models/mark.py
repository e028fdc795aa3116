from extensions import db


class Mark(db.Model):
    __tablename__ = "marks"

    mark_id = db.Column(db.Integer, primary_key=True)

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("students.student_id"),
        nullable=False
    )

    module_id = db.Column(
        db.Integer,
        db.ForeignKey("modules.module_id"),
        nullable=False
    )

    obtained_marks = db.Column(db.Float, nullable=False)
    feedback = db.Column(db.Text, nullable=True)

    # Module-wide statistics, rewritten on every row of the module after each save
    average = db.Column(db.Float, nullable=True)
    std_deviation = db.Column(db.Float, nullable=True)
    min_marks = db.Column(db.Float, nullable=True)
    max_marks = db.Column(db.Float, nullable=True)
    median_marks = db.Column(db.Float, nullable=True)

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now()
    )

    __table_args__ = (
        db.UniqueConstraint("student_id", "module_id", name="unique_student_module"),
    )

    def __repr__(self):
        return f"<Mark student={self.student_id} module={self.module_id}>"

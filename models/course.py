from extensions import db


class Course(db.Model):
    __tablename__ = "courses"

    course_id = db.Column(db.Integer, primary_key=True)
    course_name = db.Column(db.String(150), nullable=False)
    course_code = db.Column(db.String(30), nullable=False)

    # One teacher per course
    teacher_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=False
    )

    created_at = db.Column(db.DateTime, server_default=db.func.now())

    teacher = db.relationship("User", lazy="joined")
    modules = db.relationship("Module", backref="course", lazy=True)
    enrollments = db.relationship("Enrollment", backref="course", lazy=True)
    assignments = db.relationship("Assignment", backref="course", lazy=True)

    @property
    def teacher_name(self):
        return self.teacher.full_name if self.teacher else None

    def __repr__(self):
        return f"<Course {self.course_code}>"

from extensions import db


class Student(db.Model):
    __tablename__ = "students"

    student_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True
    )
    registration_number = db.Column(db.String(20), unique=True, nullable=True)
    class_name = db.Column(db.String(50), nullable=False)
    section = db.Column(db.String(10), nullable=False)

    # Weak reference to the parent's user id, not an ownership link
    parent_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=True
    )
    parent_link_code = db.Column(db.String(36), unique=True, nullable=False)

    created_at = db.Column(db.DateTime, server_default=db.func.now())

    user = db.relationship("User", foreign_keys=[student_id], lazy="joined")
    enrollments = db.relationship("Enrollment", backref="student", lazy=True)
    marks = db.relationship("Mark", backref="student", lazy=True)
    attendance_records = db.relationship("Attendance", backref="student", lazy=True)

    @property
    def full_name(self):
        return self.user.full_name if self.user else None

    def __repr__(self):
        return f"<Student {self.registration_number}>"

from extensions import db


class Teacher(db.Model):
    __tablename__ = "teachers"

    teacher_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True
    )
    employee_id = db.Column(db.String(50), nullable=False)
    department = db.Column(db.String(100), nullable=False)
    designation = db.Column(db.String(100), nullable=False)

    user = db.relationship("User", lazy="joined")

    def __repr__(self):
        return f"<Teacher {self.employee_id}>"

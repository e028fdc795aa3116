from extensions import db

AUDIENCES = ("students", "parents", "both")


class Announcement(db.Model):
    __tablename__ = "announcements"

    announcement_id = db.Column(db.Integer, primary_key=True)

    teacher_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id"),
        nullable=False
    )

    # NULL means every student, regardless of enrollment
    course_id = db.Column(
        db.Integer,
        db.ForeignKey("courses.course_id"),
        nullable=True
    )

    audience = db.Column(db.Enum(*AUDIENCES, name="announcement_audience"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    teacher = db.relationship("User", lazy="joined")
    course = db.relationship("Course", lazy="joined")

    def __repr__(self):
        return f"<Announcement {self.title}>"

from extensions import db


class Module(db.Model):
    __tablename__ = "modules"

    module_id = db.Column(db.Integer, primary_key=True)

    course_id = db.Column(
        db.Integer,
        db.ForeignKey("courses.course_id"),
        nullable=False
    )

    module_name = db.Column(db.String(150), nullable=False)
    total_marks = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    marks = db.relationship("Mark", backref="module", lazy=True)

    __table_args__ = (
        db.CheckConstraint("total_marks > 0", name="module_total_marks_positive"),
    )

    def __repr__(self):
        return f"<Module {self.module_name}>"

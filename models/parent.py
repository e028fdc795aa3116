from extensions import db


class Parent(db.Model):
    __tablename__ = "parents"

    parent_id = db.Column(
        db.Integer,
        db.ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True
    )
    phone_number = db.Column(db.String(30), nullable=False)
    address = db.Column(db.String(255), nullable=False)

    user = db.relationship("User", lazy="joined")

    def __repr__(self):
        return f"<Parent {self.parent_id}>"

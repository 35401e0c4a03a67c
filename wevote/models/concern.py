from wevote.extensions import db


class Concern(db.Model):
    __tablename__ = "concerns"

    concern_id = db.Column(db.String(64), primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.BigInteger, nullable=False)

    ballots = db.relationship("Ballot", backref="concern", lazy=True)

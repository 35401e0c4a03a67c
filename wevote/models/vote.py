import json

from wevote.extensions import db


class Vote(db.Model):
    __tablename__ = "votes"
    __table_args__ = (db.UniqueConstraint("ballot_id", "voter_id"),)

    id = db.Column(db.Integer, primary_key=True)
    ballot_id = db.Column(
        db.String(64), db.ForeignKey("ballots.ballot_id"), nullable=False, index=True
    )
    voter_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    voter_hash = db.Column(db.String(64), nullable=False)
    payload_json = db.Column(db.Text, nullable=False)
    receipt_hash = db.Column(db.String(32), nullable=False, index=True)
    signature_json = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.BigInteger, nullable=False)
    updated_at = db.Column(db.BigInteger, nullable=False)

    voter = db.relationship("User", lazy=True)

    @property
    def payload(self):
        return json.loads(self.payload_json)

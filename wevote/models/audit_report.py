import json

from wevote.extensions import db


class AuditReport(db.Model):
    __tablename__ = "audit_reports"

    ballot_id = db.Column(
        db.String(64), db.ForeignKey("ballots.ballot_id"), primary_key=True
    )
    report_json = db.Column(db.Text, nullable=False)
    # Sanitized copy served without authentication.
    public_json = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.BigInteger, nullable=False)

    @property
    def report(self):
        return json.loads(self.report_json)

    @property
    def public(self):
        return json.loads(self.public_json)

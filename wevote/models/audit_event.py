from wevote.extensions import db


class AuditEvent(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    event = db.Column(db.String(80), nullable=False)
    uid = db.Column(db.String(64), nullable=True)
    ref_id = db.Column(db.String(64), nullable=True, index=True)
    severity = db.Column(db.String(10), nullable=False, default="info")
    data_json = db.Column(db.Text, nullable=True)
    hash = db.Column(db.String(64), nullable=False)
    signature_json = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.BigInteger, nullable=False)

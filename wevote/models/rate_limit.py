from wevote.extensions import db


class RateLimitRecord(db.Model):
    __tablename__ = "rate_limits"

    key = db.Column(db.String(255), primary_key=True)
    count = db.Column(db.Integer, nullable=False, default=0)
    since = db.Column(db.BigInteger, nullable=False)

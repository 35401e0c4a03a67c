import uuid

from flask_login import UserMixin

from wevote.extensions import db

TIER_ORDER = ("basic", "verified", "expert", "admin")


def tier_rank(tier):
    try:
        return TIER_ORDER.index((tier or "").lower()) + 1
    except ValueError:
        return 0


def _new_uid():
    return uuid.uuid4().hex


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    uid = db.Column(db.String(64), unique=True, nullable=False, default=_new_uid)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    tier = db.Column(db.String(20), nullable=False, default="basic")
    region_country = db.Column(db.String(80), nullable=True)
    region_state = db.Column(db.String(80), nullable=True)
    region_city = db.Column(db.String(80), nullable=True)

    ballots = db.relationship("Ballot", backref="creator", lazy=True)

    def region_tokens(self):
        tokens = []
        if self.region_country:
            tokens.append(f"country:{self.region_country}")
        if self.region_state:
            tokens.append(f"state:{self.region_country}-{self.region_state}")
        if self.region_city:
            tokens.append(
                f"city:{self.region_country}-{self.region_state}-{self.region_city}"
            )
        return tokens

import json

from sqlalchemy import event
from sqlalchemy.orm import object_session, validates

from wevote.errors import FailedPrecondition
from wevote.extensions import db

BALLOT_TYPES = ("simple", "approval", "rcv")

# "tallying" only exists inside the tally transaction.
BALLOT_TRANSITIONS = {
    "open": {"tallying"},
    "tallying": {"tallied"},
    "tallied": set(),
}


class Ballot(db.Model):
    __tablename__ = "ballots"

    ballot_id = db.Column(db.String(64), primary_key=True)
    concern_id = db.Column(
        db.String(64), db.ForeignKey("concerns.concern_id"), nullable=False, index=True
    )
    type = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="open", index=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    start_at = db.Column(db.BigInteger, nullable=False)
    end_at = db.Column(db.BigInteger, nullable=False)
    min_tier = db.Column(db.String(20), nullable=False, default="basic")
    min_tier_rank = db.Column(db.Integer, nullable=False, default=1)
    allowed_regions_json = db.Column(db.Text, nullable=True)

    # Stored as canonical text so the key order that tally_hash covers survives.
    results_json = db.Column(db.Text, nullable=True)
    tally_hash = db.Column(db.String(64), nullable=True)
    tally_signature_json = db.Column(db.Text, nullable=True)
    ledger_id = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.BigInteger, nullable=False)
    updated_at = db.Column(db.BigInteger, nullable=False)

    options = db.relationship(
        "BallotOption",
        backref="ballot",
        lazy=True,
        order_by="BallotOption.position",
    )
    votes = db.relationship("Vote", backref="ballot", lazy=True)

    @property
    def option_ids(self):
        return [option.option_key for option in self.options]

    @property
    def allowed_regions(self):
        if not self.allowed_regions_json:
            return None
        return json.loads(self.allowed_regions_json)

    @property
    def results(self):
        if self.results_json is None:
            return None
        return json.loads(self.results_json)

    @property
    def tally_signature(self):
        if self.tally_signature_json is None:
            return None
        return json.loads(self.tally_signature_json)

    def transition_to(self, status):
        if status not in BALLOT_TRANSITIONS.get(self.status, set()):
            raise FailedPrecondition(
                f"Ballot {self.ballot_id} cannot move from {self.status} to {status}"
            )
        self.status = status

    @validates("ledger_id")
    def _validate_ledger_id(self, key, value):
        if self.ledger_id is not None and value != self.ledger_id:
            raise FailedPrecondition(f"Ballot {self.ballot_id} ledger id is immutable")
        return value

    def to_dict(self):
        return {
            "ballotId": self.ballot_id,
            "concernId": self.concern_id,
            "type": self.type,
            "options": [option.to_dict() for option in self.options],
            "status": self.status,
            "startAt": self.start_at,
            "endAt": self.end_at,
            "minTier": self.min_tier,
            "minTierRank": self.min_tier_rank,
            "allowedRegions": self.allowed_regions,
            "results": self.results,
            "tallyHash": self.tally_hash,
            "tallySignature": self.tally_signature,
            "ledgerId": self.ledger_id,
        }


class BallotOption(db.Model):
    __tablename__ = "ballot_options"
    __table_args__ = (db.UniqueConstraint("ballot_id", "option_key"),)

    id = db.Column(db.Integer, primary_key=True)
    ballot_id = db.Column(
        db.String(64), db.ForeignKey("ballots.ballot_id"), nullable=False
    )
    position = db.Column(db.Integer, nullable=False)
    option_key = db.Column(db.String(120), nullable=False)
    label = db.Column(db.String(200), nullable=False)

    def to_dict(self):
        return {"id": self.option_key, "label": self.label}


@event.listens_for(BallotOption, "before_update")
def _reject_option_update(mapper, connection, target):
    session = object_session(target)
    if session is not None and not session.is_modified(target, include_collections=False):
        return
    raise FailedPrecondition("Ballot options are immutable once created")

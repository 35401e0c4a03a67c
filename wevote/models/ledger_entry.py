import json

from wevote.extensions import db


class LedgerEntry(db.Model):
    __tablename__ = "transparency_ledger"

    ledger_id = db.Column(db.String(64), primary_key=True)
    seq = db.Column(db.Integer, unique=True, nullable=False)
    prev_hash = db.Column(db.String(64), nullable=True)
    entry_hash = db.Column(db.String(64), nullable=False)
    canonical = db.Column(db.Text, nullable=False)
    kind = db.Column(db.String(40), nullable=False)
    ballot_id = db.Column(db.String(64), nullable=True, index=True)
    signature_json = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.BigInteger, nullable=False)

    @property
    def data(self):
        return json.loads(self.canonical)["data"]

    @property
    def signature(self):
        if self.signature_json is None:
            return None
        return json.loads(self.signature_json)

    def to_dict(self):
        return {
            "ledgerId": self.ledger_id,
            "seq": self.seq,
            "prevHash": self.prev_hash,
            "entryHash": self.entry_hash,
            "data": self.data,
            "canonical": self.canonical,
            "signature": self.signature,
            "createdAt": self.created_at,
        }

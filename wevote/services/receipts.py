from flask import current_app

from wevote.errors import FailedPrecondition
from wevote.models import Vote
from wevote.services.canonical import canonicalize, hmac_sha256_hex
from wevote.services.signing import try_sign
from wevote.services.voting.payloads import vote_from_payload

RECEIPT_PREFIX = "WeVote-RECEIPT-"
RECEIPT_HASH_LENGTH = 32


def build_vote_canonical(ballot_id, voter, vote, ts):
    return canonicalize({"ballotId": ballot_id, "voter": voter, "vote": vote, "ts": ts})


def compute_receipt_hash(secret, canonical):
    return hmac_sha256_hex(secret, canonical)[:RECEIPT_HASH_LENGTH]


def short_code(receipt_hash):
    return f"{RECEIPT_PREFIX}{receipt_hash[:8]}"


def get_receipt_secret():
    secret = current_app.config.get("RECEIPTS_SECRET")
    if not secret:
        raise FailedPrecondition("Receipt secret not configured")
    return secret


def issue_receipt(secret, ballot_id, voter, payload, ts, signer=None):
    canonical = build_vote_canonical(ballot_id, voter, payload.to_payload(), ts)
    receipt_hash = compute_receipt_hash(secret, canonical)
    return {
        "shortCode": short_code(receipt_hash),
        "receiptHash": receipt_hash,
        "ballotId": ballot_id,
        "type": payload.kind,
        "voteShape": payload.shape(),
        "signature": try_sign(signer, canonical),
    }


def verify_receipt(receipt_hash, ballot_id=None):
    if not isinstance(receipt_hash, str) or len(receipt_hash) < 8:
        return {"valid": False, "error": "invalid-argument"}

    query = Vote.query.filter_by(receipt_hash=receipt_hash[:RECEIPT_HASH_LENGTH])
    if ballot_id:
        query = query.filter_by(ballot_id=ballot_id)
    vote = query.first()
    if vote is None:
        return {"valid": False}

    payload = vote_from_payload(vote.payload)
    return {
        "valid": True,
        "ballotId": vote.ballot_id,
        "shortCode": short_code(vote.receipt_hash),
        "type": payload.kind,
        "submittedAt": vote.updated_at or vote.created_at,
        "voteShape": payload.shape(),
    }

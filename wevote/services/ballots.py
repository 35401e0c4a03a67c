import json
import uuid

from flask import current_app

from wevote.errors import FailedPrecondition, InvalidArgument, NotFound, PermissionDenied
from wevote.extensions import db
from wevote.models import (
    BALLOT_TYPES,
    TIER_ORDER,
    AuditReport,
    Ballot,
    BallotOption,
    Concern,
    LedgerEntry,
    Vote,
    tier_rank,
)
from wevote.services import clock
from wevote.services.audit import log_event
from wevote.services.canonical import canonical_text, canonicalize, sha256_hex
from wevote.services.rate_limit import apply_ballot_create_rate_limit, apply_vote_rate_limit
from wevote.services.receipts import get_receipt_secret, issue_receipt
from wevote.services.signing import get_signer, try_sign
from wevote.services.transactions import run_in_transaction
from wevote.services.voting.payloads import parse_vote_payload

MAX_REGIONS = 25
MAX_REGION_LENGTH = 80


def _normalize_options(raw_options):
    if not isinstance(raw_options, list) or len(raw_options) < 2:
        raise InvalidArgument("concernId and >=2 options required")

    options = []
    seen = set()
    for index, raw in enumerate(raw_options):
        if not isinstance(raw, dict):
            raise InvalidArgument("options must be objects with id and label")
        option_id = str(raw.get("id") or f"opt_{index}")
        label = raw.get("label") or raw.get("text") or f"Option {index + 1}"
        if option_id in seen:
            raise InvalidArgument(f"Duplicate option id: {option_id}")
        seen.add(option_id)
        options.append((option_id, label))
    return options


def _normalize_regions(regions):
    if not isinstance(regions, list):
        return None
    cleaned = list(
        dict.fromkeys(
            region
            for region in regions
            if isinstance(region, str) and len(region) < MAX_REGION_LENGTH
        )
    )
    return cleaned[:MAX_REGIONS] or None


def create_ballot(user, data):
    data = data or {}
    concern_id = data.get("concernId")
    ballot_type = data.get("type")
    min_tier = (data.get("minTier") or "basic").lower()
    duration_minutes = data.get("durationMinutes", 60)

    if not concern_id:
        raise InvalidArgument("concernId and >=2 options required")
    options = _normalize_options(data.get("options"))
    if ballot_type not in BALLOT_TYPES:
        raise InvalidArgument("Unsupported type")
    if min_tier not in TIER_ORDER:
        raise InvalidArgument("Invalid minTier")
    if not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise InvalidArgument("durationMinutes must be a positive integer")
    regions = _normalize_regions(data.get("regions"))

    apply_ballot_create_rate_limit(user.uid)

    def work(session):
        concern = session.get(Concern, concern_id, with_for_update=True)
        if concern is None:
            raise NotFound("Concern not found")

        overlap = (
            session.query(Ballot)
            .filter_by(concern_id=concern_id, status="open")
            .first()
        )
        if overlap is not None:
            raise FailedPrecondition("An open ballot already exists for this concern")

        now = clock.now_millis()
        ballot = Ballot(
            ballot_id=uuid.uuid4().hex,
            concern_id=concern_id,
            type=ballot_type,
            status="open",
            created_by=user.id,
            start_at=now,
            end_at=now + duration_minutes * 60_000,
            min_tier=min_tier,
            min_tier_rank=tier_rank(min_tier),
            allowed_regions_json=json.dumps(regions) if regions else None,
            created_at=now,
            updated_at=now,
        )
        session.add(ballot)
        for position, (option_id, label) in enumerate(options):
            session.add(
                BallotOption(
                    ballot_id=ballot.ballot_id,
                    position=position,
                    option_key=option_id,
                    label=label,
                )
            )
        return ballot

    ballot = run_in_transaction(work)
    log_event("createBallot", uid=user.uid, ref_id=ballot.ballot_id, data={"type": ballot_type})
    return ballot


def get_ballot(ballot_id):
    ballot = db.session.get(Ballot, ballot_id)
    if ballot is None:
        raise NotFound("Ballot not found")
    return ballot


def check_eligibility(ballot, user):
    if ballot.min_tier_rank and tier_rank(user.tier) < ballot.min_tier_rank:
        raise PermissionDenied("Tier too low to vote on this ballot")

    allowed = ballot.allowed_regions
    if allowed:
        if not any(token in allowed for token in user.region_tokens()):
            raise PermissionDenied("Region not eligible for this ballot")


def cast_vote(user, ballot_id, data):
    ballot = get_ballot(ballot_id)
    check_eligibility(ballot, user)

    now = clock.now_millis()
    if ballot.status != "open" or ballot.end_at < now:
        raise FailedPrecondition("Ballot closed")

    apply_vote_rate_limit(user.uid, ballot_id)
    secret = get_receipt_secret()
    payload = parse_vote_payload(ballot.type, ballot.option_ids, data)

    receipt = issue_receipt(secret, ballot_id, user.uid, payload, now, signer=get_signer())
    payload_text = canonical_text(payload.to_payload())
    signature_text = json.dumps(receipt["signature"]) if receipt["signature"] else None

    def work(session):
        fresh = session.get(Ballot, ballot_id, with_for_update=True, populate_existing=True)
        if fresh.status != "open":
            raise FailedPrecondition("Ballot closed")

        vote = (
            session.query(Vote)
            .filter_by(ballot_id=ballot_id, voter_id=user.id)
            .with_for_update()
            .first()
        )
        if vote is None:
            vote = Vote(
                ballot_id=ballot_id,
                voter_id=user.id,
                voter_hash=sha256_hex((user.uid + ballot_id).encode("utf-8")),
                created_at=now,
            )
            session.add(vote)
        vote.payload_json = payload_text
        vote.receipt_hash = receipt["receiptHash"]
        vote.signature_json = signature_text
        vote.updated_at = now
        return vote

    run_in_transaction(work)
    current_app.logger.info("Vote recorded on ballot %s (%s)", ballot_id, receipt["shortCode"])
    log_event("castVote", uid=user.uid, ref_id=ballot_id, data={"type": ballot.type})
    return {"receipt": receipt["shortCode"], "receiptHash": receipt["receiptHash"]}


def _anonymized_vote(ballot_type, vote):
    payload = vote.payload
    if ballot_type == "rcv":
        return {"ranking": payload.get("ranking") or [], "receiptHash": vote.receipt_hash}
    if ballot_type == "approval":
        return {"approvals": payload.get("approvals") or [], "receiptHash": vote.receipt_hash}
    return {"choice": payload.get("choice"), "receiptHash": vote.receipt_hash}


def export_ballot_report(ballot_id):
    ballot = get_ballot(ballot_id)
    if ballot.status != "tallied":
        raise FailedPrecondition("Ballot not tallied")

    ledger_entry = None
    if ballot.ledger_id:
        entry = db.session.get(LedgerEntry, ballot.ledger_id)
        if entry is not None:
            ledger_entry = entry.to_dict()

    votes = Vote.query.filter_by(ballot_id=ballot_id).order_by(Vote.id.asc()).all()
    anonymized = [_anonymized_vote(ballot.type, vote) for vote in votes]
    results = ballot.results or {}

    report = db.session.get(AuditReport, ballot_id)
    audit_report = None
    if report is not None:
        stored = report.report
        audit_report = {
            "totalVotes": stored["totalVotes"],
            "rounds": stored["rounds"],
            "winner": stored["winner"],
        }

    bundle = {
        "ballot": {
            "ballotId": ballot.ballot_id,
            "concernId": ballot.concern_id,
            "type": ballot.type,
            "options": [option.to_dict() for option in ballot.options],
            "results": results,
            "winner": results.get("winner"),
            "tallySignature": ballot.tally_signature,
            "ledgerId": ballot.ledger_id,
            "minTier": ballot.min_tier,
            "tallyHash": ballot.tally_hash,
            "exhausted": results.get("exhausted"),
        },
        "ledgerEntry": ledger_entry,
        "auditReport": audit_report,
        "votes": anonymized,
        "receiptHashes": list(
            dict.fromkeys(v["receiptHash"] for v in anonymized if v["receiptHash"])
        ),
        "algorithm": {
            "type": ballot.type,
            "version": "1.0",
            "tieBreak": "lexicographically-last-of-lowest"
            if ballot.type == "rcv"
            else "lexicographically-first-of-highest",
            "hashInputs": "sha256(canonical({ballotId, type, results}))",
            "maxRounds": current_app.config["RCV_MAX_ROUNDS"],
        },
        "exportedAt": clock.now_millis(),
    }
    signature = try_sign(get_signer(), canonicalize(bundle))
    return {"export": bundle, "signature": signature}

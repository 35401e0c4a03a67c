import json

from flask import current_app

from wevote.errors import NotFound, PermissionDenied
from wevote.extensions import db
from wevote.models import AuditReport, Ballot, Vote
from wevote.services import clock
from wevote.services.audit import log_event
from wevote.services.canonical import canonical_text
from wevote.services.ledger import append_entry
from wevote.services.signing import get_signer, try_sign
from wevote.services.transactions import run_in_transaction
from wevote.services.voting.payloads import vote_from_payload
from wevote.services.voting.results import (
    compute_results,
    compute_tally_hash,
    tally_signature_input,
)


def _stored_outcome(ballot, already_tallied):
    return {
        "alreadyTallied": already_tallied,
        "results": ballot.results,
        "tallyHash": ballot.tally_hash,
        "ledgerId": ballot.ledger_id,
    }


def load_vote_payloads(session, ballot_id):
    votes = (
        session.query(Vote)
        .filter_by(ballot_id=ballot_id)
        .order_by(Vote.id.asc())
        .all()
    )
    return [vote_from_payload(vote.payload) for vote in votes]


def build_audit_report(ballot, results, now):
    report = {
        "ballotId": ballot.ballot_id,
        "createdAt": now,
        "results": results,
        "winner": results.get("winner"),
        "totalVotes": results.get("total"),
        "rounds": results.get("rounds"),
        "ledgerId": ballot.ledger_id,
        "tallySignature": ballot.tally_signature,
        "tallyHash": ballot.tally_hash,
    }
    public = {
        "ballotId": ballot.ballot_id,
        "createdAt": now,
        "winner": results.get("winner"),
        "totalVotes": results.get("total"),
        "exhausted": results.get("exhausted"),
        "rounds": [
            {"counts": round_["counts"], "eliminated": round_.get("eliminated")}
            for round_ in results.get("rounds") or []
        ],
        "tallyHash": ballot.tally_hash,
        "ledgerId": ballot.ledger_id,
    }
    return AuditReport(
        ballot_id=ballot.ballot_id,
        report_json=canonical_text(report),
        public_json=canonical_text(public),
        created_at=now,
    )


def tally_ballot(ballot_id, user):
    ballot = db.session.get(Ballot, ballot_id)
    if ballot is None:
        raise NotFound("Ballot not found")
    if ballot.status == "tallied":
        return _stored_outcome(ballot, True)
    if ballot.created_by != user.id:
        raise PermissionDenied("Only the ballot creator may tally it")

    max_rounds = current_app.config["RCV_MAX_ROUNDS"]
    signer = get_signer()

    def work(session):
        fresh = session.get(Ballot, ballot_id, with_for_update=True, populate_existing=True)
        if fresh.status == "tallied":
            # a concurrent tally committed first
            return fresh, True

        # Votes are read under the ballot lock so none can land after the count.
        payloads = load_vote_payloads(session, ballot_id)
        results = compute_results(fresh.type, fresh.option_ids, payloads, max_rounds=max_rounds)
        tally_signature = try_sign(signer, tally_signature_input(ballot_id, results))

        now = clock.now_millis()
        fresh.transition_to("tallying")
        append_entry(session, fresh, "tally", results, now, signer=signer)
        fresh.results_json = canonical_text(results)
        fresh.tally_hash = compute_tally_hash(ballot_id, fresh.type, results)
        fresh.tally_signature_json = json.dumps(tally_signature) if tally_signature else None
        fresh.updated_at = now
        fresh.transition_to("tallied")
        session.merge(build_audit_report(fresh, results, now))
        return fresh, False

    ballot, already_tallied = run_in_transaction(work)
    if already_tallied:
        return _stored_outcome(ballot, True)

    results = ballot.results
    current_app.logger.info(
        "Ballot %s tallied (%s votes, winner=%s)",
        ballot_id,
        results["total"],
        results["winner"],
    )
    log_event("tallyBallot", uid=user.uid, ref_id=ballot_id, data={"winner": results["winner"]})
    return _stored_outcome(ballot, False)


def get_public_audit(ballot_id):
    report = db.session.get(AuditReport, ballot_id)
    if report is None:
        raise NotFound("Audit report not found")
    return report.public

import json
import uuid
from collections import namedtuple

from flask import current_app

from wevote.errors import Internal
from wevote.models import LedgerEntry
from wevote.services.canonical import canonical_text, sha256_hex
from wevote.services.signing import try_sign

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 200

LedgerIssue = namedtuple("LedgerIssue", ["seq", "message"])


class LedgerVerification(namedtuple("LedgerVerification", ["ok", "issues", "checked"])):
    def messages(self):
        return [f"seq {issue.seq}: {issue.message}" for issue in self.issues]


def build_canonical(seq, prev_hash, data):
    canonical = canonical_text({"seq": seq, "prevHash": prev_hash, "data": data})
    return canonical, sha256_hex(canonical.encode("utf-8"))


def last_entry(session, lock=False):
    query = session.query(LedgerEntry).order_by(LedgerEntry.seq.desc())
    if lock:
        query = query.with_for_update()
    return query.first()


# Caller holds the ballot row lock inside its own transaction.
def append_entry(session, ballot, kind, results, ts, signer=None):
    if ballot.ledger_id is not None:
        existing = session.get(LedgerEntry, ballot.ledger_id)
        if existing is None:
            current_app.logger.error(
                "Ballot %s references missing ledger entry %s",
                ballot.ballot_id,
                ballot.ledger_id,
            )
            raise Internal(f"Ledger entry missing for ballot {ballot.ballot_id}")
        return existing

    previous = last_entry(session, lock=True)
    seq = previous.seq + 1 if previous else 1
    prev_hash = previous.entry_hash if previous else None

    data = {"kind": kind, "ballotId": ballot.ballot_id, "results": results, "ts": ts}
    canonical, entry_hash = build_canonical(seq, prev_hash, data)
    signature = try_sign(signer, canonical.encode("utf-8"))

    entry = LedgerEntry(
        ledger_id=uuid.uuid4().hex,
        seq=seq,
        prev_hash=prev_hash,
        entry_hash=entry_hash,
        canonical=canonical,
        kind=kind,
        ballot_id=ballot.ballot_id,
        signature_json=json.dumps(signature) if signature else None,
        created_at=ts,
    )
    session.add(entry)
    ballot.ledger_id = entry.ledger_id
    current_app.logger.info(
        "Ledger entry %d appended for ballot %s (%s)", seq, ballot.ballot_id, entry_hash
    )
    return entry


def list_entries(limit=None):
    if not isinstance(limit, int) or not 0 < limit <= MAX_LIST_LIMIT:
        limit = DEFAULT_LIST_LIMIT
    return LedgerEntry.query.order_by(LedgerEntry.seq.desc()).limit(limit).all()


def chain_entries():
    return LedgerEntry.query.order_by(LedgerEntry.seq.asc()).all()


def _check_canonical(seq, entry_hash, prev_hash, canonical, issues):
    if not canonical:
        issues.append(LedgerIssue(seq, "missing canonical form"))
        return
    if not isinstance(canonical, str):
        issues.append(LedgerIssue(seq, "canonical form is not a string"))
        return

    if sha256_hex(canonical.encode("utf-8")) != entry_hash:
        issues.append(LedgerIssue(seq, "hash mismatch"))
    try:
        body = json.loads(canonical)
    except ValueError:
        body = None
    if not isinstance(body, dict):
        issues.append(LedgerIssue(seq, "canonical form is not a JSON object"))
    elif body.get("seq") != seq or body.get("prevHash") != prev_hash:
        issues.append(LedgerIssue(seq, "canonical form disagrees with entry fields"))


def verify_ledger(entries):
    issues = []
    previous_hash = previous_seq = None

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            issues.append(LedgerIssue(f"#{index + 1}", "entry is not an object"))
            previous_hash = previous_seq = None
            continue

        seq = entry.get("seq")
        prev_hash = entry.get("prevHash")
        entry_hash = entry.get("entryHash")

        if index == 0:
            if prev_hash is not None:
                issues.append(LedgerIssue(seq, "first entry prevHash should be null"))
        else:
            if prev_hash != previous_hash:
                issues.append(LedgerIssue(seq, "chain link mismatch"))
            if isinstance(seq, int) and isinstance(previous_seq, int):
                if seq != previous_seq + 1:
                    issues.append(LedgerIssue(seq, "sequence gap"))

        _check_canonical(seq, entry_hash, prev_hash, entry.get("canonical"), issues)
        previous_hash, previous_seq = entry_hash, seq

    return LedgerVerification(not issues, issues, len(entries))

import json
import sys

import click

from wevote.errors import InvalidArgument
from wevote.services.canonical import canonical_text, canonicalize
from wevote.services.ledger import verify_ledger
from wevote.services.signing import load_public_key, verify_signature
from wevote.services.voting.payloads import vote_from_payload
from wevote.services.voting.rcv import DEFAULT_MAX_ROUNDS
from wevote.services.voting.results import (
    compute_results,
    compute_tally_hash,
    tally_signature_input,
)

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_UNREADABLE = 2


class Report:
    def __init__(self):
        self.checks = []

    def add(self, name, passed, detail=""):
        self.checks.append((name, bool(passed), detail))

    @property
    def ok(self):
        return all(passed for _, passed, _ in self.checks)

    def lines(self):
        for name, passed, detail in self.checks:
            line = f"{'PASS' if passed else 'FAIL'} {name}"
            if detail:
                line = f"{line} ({detail})"
            yield line


def _load_json(path):
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _as_dict(value):
    return value if isinstance(value, dict) else {}


def _recount(ballot, votes, algorithm):
    options = ballot.get("options")
    if not isinstance(votes, list) or not isinstance(options, list):
        raise InvalidArgument("votes and options must be arrays")
    option_ids = []
    for index, option in enumerate(options):
        if not isinstance(option, dict):
            raise InvalidArgument(f"option {index} is not an object")
        option_ids.append(option.get("id"))

    payloads = []
    for index, vote in enumerate(votes):
        if not isinstance(vote, dict):
            raise InvalidArgument(f"vote {index} is not an object")
        payloads.append(vote_from_payload({k: v for k, v in vote.items() if k != "receiptHash"}))

    max_rounds = algorithm.get("maxRounds")
    if not isinstance(max_rounds, int) or max_rounds < 1:
        max_rounds = DEFAULT_MAX_ROUNDS
    return compute_results(ballot.get("type"), option_ids, payloads, max_rounds=max_rounds)


def check_ballot(export, report):
    ballot = export.get("ballot")
    if not isinstance(ballot, dict):
        report.add("ballot present", False, "missing ballot key")
        return

    recomputed = compute_tally_hash(ballot.get("ballotId"), ballot.get("type"), ballot.get("results"))
    stored = ballot.get("tallyHash")
    report.add("tally hash", recomputed == stored, f"stored={stored}, recomputed={recomputed}")

    if "votes" in export:
        try:
            recount = _recount(ballot, export.get("votes"), _as_dict(export.get("algorithm")))
        except (InvalidArgument, ValueError, TypeError) as exc:
            report.add("recount", False, str(exc))
        else:
            report.add(
                "recount",
                canonical_text(recount) == canonical_text(ballot.get("results")),
                f"winner={recount.get('winner')}",
            )

    entry = export.get("ledgerEntry")
    if isinstance(entry, dict):
        data = _as_dict(entry.get("data"))
        matches = (
            data.get("ballotId") == ballot.get("ballotId")
            and canonical_text(data.get("results")) == canonical_text(ballot.get("results"))
        )
        report.add("ledger entry matches ballot", matches, f"seq={entry.get('seq')}")


def check_ledger(entries, report, public_key=None):
    result = verify_ledger(entries)
    report.add("ledger chain", result.ok, f"{result.checked} entries")
    for message in result.messages():
        report.add("ledger", False, message)

    if public_key is None:
        return
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            continue
        label = f"seq {entry.get('seq', f'#{index + 1}')}"
        signature = entry.get("signature")
        canonical = entry.get("canonical")
        if not signature:
            report.add("ledger signature", False, f"{label}: unsigned")
        elif not isinstance(canonical, str):
            report.add("ledger signature", False, f"{label}: no canonical form")
        else:
            valid = verify_signature(public_key, canonical.encode("utf-8"), signature)
            report.add("ledger signature", valid, label)


def check_tally_signature(export, report, public_key):
    ballot = _as_dict(export.get("ballot"))
    signature = ballot.get("tallySignature")
    if not signature:
        report.add("tally signature", False, "unsigned")
        return
    data = tally_signature_input(ballot.get("ballotId"), ballot.get("results"))
    report.add("tally signature", verify_signature(public_key, data, signature))


def check_export_signature(export, signature, report, public_key):
    if not signature:
        report.add("export signature", False, "unsigned")
        return
    report.add("export signature", verify_signature(public_key, canonicalize(export), signature))


@click.command(name="wevote-verify")
@click.option("--ballot", "ballot_path", required=True, type=click.Path(dir_okay=False))
@click.option("--ledger", "ledger_path", type=click.Path(dir_okay=False))
@click.option("--public-key", "public_key_path", type=click.Path(dir_okay=False))
def main(ballot_path, ledger_path, public_key_path):
    """Re-check a ballot export and ledger without trusting the server."""
    try:
        root = _load_json(ballot_path)
        entries = _load_json(ledger_path) if ledger_path else None
        public_key = None
        if public_key_path:
            with open(public_key_path, "rb") as handle:
                public_key = load_public_key(handle.read())
    except (OSError, ValueError) as exc:
        click.echo(f"Verification failed: {exc}", err=True)
        sys.exit(EXIT_UNREADABLE)

    root = _as_dict(root)
    wrapped = isinstance(root.get("export"), dict)
    export = root["export"] if wrapped else root
    report = Report()
    check_ballot(export, report)
    if public_key is not None:
        check_tally_signature(export, report, public_key)
        if wrapped and "signature" in root:
            check_export_signature(export, root.get("signature"), report, public_key)
    if entries is not None:
        if isinstance(entries, list):
            check_ledger(entries, report, public_key)
        else:
            report.add("ledger chain", False, "ledger file must hold an array")

    for line in report.lines():
        click.echo(line)
    click.echo("RESULT: PASS" if report.ok else "RESULT: FAIL")
    sys.exit(EXIT_OK if report.ok else EXIT_MISMATCH)


if __name__ == "__main__":
    main()

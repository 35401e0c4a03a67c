from flask import request

from wevote.services.ledger import chain_entries, list_entries, verify_ledger
from wevote.services.receipts import verify_receipt
from wevote.services.tally import get_public_audit


def register_transparency_routes(app):
    @app.route("/api/ledger")
    def ledger_entries():
        limit = request.args.get("limit", type=int)
        entries = [entry.to_dict() for entry in list_entries(limit=limit)]
        return {"ok": True, "entries": entries}

    @app.route("/api/ledger/verify")
    def ledger_verify():
        entries = [entry.to_dict() for entry in chain_entries()]
        report = verify_ledger(entries)
        return {
            "ok": report.ok,
            "checked": report.checked,
            "issues": report.messages(),
        }

    @app.route("/api/ballots/<ballot_id>/audit")
    def ballot_audit(ballot_id):
        return {"ok": True, "audit": get_public_audit(ballot_id)}

    @app.route("/api/receipts/verify", methods=["POST"])
    def receipt_verify():
        data = request.get_json(silent=True) or {}
        return verify_receipt(data.get("receiptHash"), data.get("ballotId"))

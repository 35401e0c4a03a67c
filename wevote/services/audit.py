import json

from flask import current_app

from wevote.models import AuditEvent
from wevote.services import clock
from wevote.services.canonical import canonicalize, sha256_hex
from wevote.services.signing import get_signer, try_sign
from wevote.services.transactions import run_in_transaction


def log_event(event, uid=None, ref_id=None, data=None, severity="info"):
    ts = clock.now_millis()
    canonical = canonicalize({"e": event, "u": uid, "r": ref_id, "d": data, "t": ts})
    signature = try_sign(get_signer(), canonical)

    def work(session):
        row = AuditEvent(
            event=event,
            uid=uid,
            ref_id=ref_id,
            severity=severity,
            data_json=json.dumps(data) if data is not None else None,
            hash=sha256_hex(canonical),
            signature_json=json.dumps(signature) if signature else None,
            created_at=ts,
        )
        session.add(row)
        return row

    row = run_in_transaction(work)
    current_app.logger.info("audit %s ref=%s", event, ref_id)
    return row

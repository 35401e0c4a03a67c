from collections import namedtuple

from flask import current_app

from wevote.errors import RateLimitExceeded
from wevote.models import RateLimitRecord
from wevote.services import clock
from wevote.services.transactions import run_in_transaction

RateLimitCheck = namedtuple("RateLimitCheck", ["key", "limit", "window_ms"])


def _evaluate(session, check, now):
    record = session.get(
        RateLimitRecord, check.key, with_for_update=True, populate_existing=True
    )
    count, since = 0, now
    if record is not None:
        count, since = record.count, record.since
        if since < now - check.window_ms:
            count, since = 0, now
    return record, count, since


def check_and_increment_many(checks, now=None, message=None):
    if now is None:
        now = clock.now_millis()

    def work(session):
        pending = []
        for check in checks:
            record, count, since = _evaluate(session, check, now)
            if count >= check.limit:
                current_app.logger.info("Rate limit hit for %s", check.key)
                raise RateLimitExceeded(message, key=check.key)
            pending.append((check, record, count, since))

        for check, record, count, since in pending:
            if record is None:
                session.add(RateLimitRecord(key=check.key, count=count + 1, since=since))
            else:
                record.count = count + 1
                record.since = since

    run_in_transaction(work)


def check_and_increment(key, limit, window_ms, now=None, message=None):
    check_and_increment_many([RateLimitCheck(key, limit, window_ms)], now=now, message=message)


def _policy(name, key):
    limit, window_ms = current_app.config[name]
    return RateLimitCheck(key, limit, window_ms)


def apply_ballot_create_rate_limit(uid, now=None):
    check_and_increment_many(
        [_policy("RATE_LIMIT_BALLOT_CREATE", f"ballots_{uid}")],
        now=now,
        message="Ballot creation rate limit exceeded",
    )


def apply_vote_rate_limit(uid, ballot_id, now=None):
    check_and_increment_many(
        [
            _policy("RATE_LIMIT_VOTE_GLOBAL", f"votes_global_{uid}"),
            _policy("RATE_LIMIT_VOTE", f"votes_{ballot_id}_{uid}"),
        ],
        now=now,
        message="Too many vote updates; wait before changing again",
    )

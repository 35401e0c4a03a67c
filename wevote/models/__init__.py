from wevote.models.audit_event import AuditEvent
from wevote.models.audit_report import AuditReport
from wevote.models.ballot import BALLOT_TYPES, Ballot, BallotOption
from wevote.models.concern import Concern
from wevote.models.ledger_entry import LedgerEntry
from wevote.models.rate_limit import RateLimitRecord
from wevote.models.user import TIER_ORDER, User, tier_rank
from wevote.models.vote import Vote

__all__ = [
    "AuditEvent",
    "AuditReport",
    "BALLOT_TYPES",
    "Ballot",
    "BallotOption",
    "Concern",
    "LedgerEntry",
    "RateLimitRecord",
    "TIER_ORDER",
    "User",
    "Vote",
    "tier_rank",
]

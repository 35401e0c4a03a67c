from wevote.errors import InvalidArgument, NotFound, PermissionDenied
from wevote.models import TIER_ORDER, User
from wevote.services.audit import log_event
from wevote.services.transactions import run_in_transaction


def set_user_tier(actor, target_uid, tier):
    if not target_uid or not tier:
        raise InvalidArgument("targetUid & tier required")
    if actor.tier != "admin":
        raise PermissionDenied("Not admin")
    if tier not in TIER_ORDER:
        raise InvalidArgument("Invalid tier")

    def work(session):
        target = session.query(User).filter_by(uid=target_uid).with_for_update().first()
        if target is None:
            raise NotFound("User not found")
        target.tier = tier
        return target

    run_in_transaction(work)
    log_event("setUserTier", uid=actor.uid, ref_id=target_uid, data={"tier": tier})
    return tier

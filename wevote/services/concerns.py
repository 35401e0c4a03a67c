import uuid

from wevote.errors import InvalidArgument
from wevote.models import Concern
from wevote.services import clock
from wevote.services.transactions import run_in_transaction


def create_concern(user, data):
    data = data or {}
    title = (data.get("title") or "").strip()
    if not title:
        raise InvalidArgument("Concern title is required.")
    description = (data.get("description") or "").strip() or None

    def work(session):
        concern = Concern(
            concern_id=uuid.uuid4().hex,
            title=title,
            description=description,
            created_by=user.id,
            created_at=clock.now_millis(),
        )
        session.add(concern)
        return concern

    return run_in_transaction(work)

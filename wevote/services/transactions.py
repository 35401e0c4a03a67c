from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from wevote.errors import Internal
from wevote.extensions import db

# Raised by the store when two transactions collide on the same rows.
CONFLICT_ERRORS = (IntegrityError, OperationalError, StaleDataError)


# work(session) is re-run from scratch after a conflict, so it must read
# everything it depends on through the session it is given.
def run_in_transaction(work, max_attempts=None):
    if max_attempts is None:
        max_attempts = current_app.config["TRANSACTION_MAX_RETRIES"]

    session = db.session
    last_error = None
    for attempt in range(1, max_attempts + 1):
        try:
            result = work(session)
            session.commit()
            return result
        except CONFLICT_ERRORS as exc:
            session.rollback()
            last_error = exc
            current_app.logger.warning(
                "Transaction conflict (attempt %d/%d): %s",
                attempt,
                max_attempts,
                exc.__class__.__name__,
            )
        except Exception:
            session.rollback()
            raise

    raise Internal(
        f"Transaction failed after {max_attempts} attempts"
    ) from last_error

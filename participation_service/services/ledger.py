"""
Ledger Store helpers.
All status changes go through transition(), a compare-and-set UPDATE; all
multi-row writes go through atomic(), which commits them as one unit.
"""

import logging
import uuid
from contextlib import contextmanager
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError
from participation_service.extensions import db
from participation_service.errors import InvalidState, NotFound, StoreUnavailable, Timeout
from participation_service.models.participation import TERMINAL_STATUSES, Participation, VALID_TRANSITIONS
from participation_service.utils.dates import utcnow

logger = logging.getLogger(__name__)


def as_uuid(value, what="Resource"):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFound(f"{what} not found")


def get_participation(participation_id):
    participation = db.session.get(Participation, as_uuid(participation_id, "Participation"))
    if not participation:
        raise NotFound("Participation not found")
    return participation


@contextmanager
def atomic(on_conflict=None):
    """
    Commit every write made inside the block together, or roll all of them back.
    on_conflict: exception raised in place of an IntegrityError.
    """
    try:
        yield db.session
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if on_conflict is not None:
            raise on_conflict from e
        raise
    except PoolTimeoutError as e:
        db.session.rollback()
        logger.error("Store checkout timed out: %s", e)
        raise Timeout() from e
    except OperationalError as e:
        db.session.rollback()
        logger.error("Store unavailable: %s", e)
        raise StoreUnavailable() from e
    except Exception:
        db.session.rollback()
        raise


def transition(participation_id, expected, new_status, **values):
    """
    Move a participation from `expected` to `new_status` only if the stored
    status still equals `expected` at write time.
    Raises InvalidState for illegal transitions and for lost races.
    """
    if expected in TERMINAL_STATUSES:
        raise InvalidState(f"Participation is already {expected}")
    if new_status not in VALID_TRANSITIONS.get(expected, set()):
        raise InvalidState(f"Cannot transition from {expected} to {new_status}")

    values.update(status=new_status, updated_at=utcnow())
    result = db.session.execute(
        update(Participation)
        .where(
            Participation.participation_id == participation_id,
            Participation.status == expected,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(
            "Stale transition %s -> %s rejected for participation %s",
            expected, new_status, participation_id,
        )
        raise InvalidState(f"Participation is no longer {expected}")

    logger.info("Participation %s: %s -> %s", participation_id, expected, new_status)

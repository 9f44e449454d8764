"""
Participation Manager
Enrollment, lookup and withdrawal of a user's participation in a competition.
"""

import logging
from participation_service.extensions import db
from participation_service.errors import (
    AlreadyEnrolled,
    CompetitionClosed,
    Forbidden,
    UserIneligible,
)
from participation_service.models.participation import (
    CANCELLED,
    ENROLLED,
    Participation,
)
from participation_service.services.competition_service import get_competition
from participation_service.services.ledger import atomic, get_participation, transition
from participation_service.utils.dates import utcnow

logger = logging.getLogger(__name__)


def enroll(identity, competition_id):
    """
    Enroll the caller in a competition.
    Raises NotFound, CompetitionClosed, UserIneligible or AlreadyEnrolled.
    """
    if not identity.is_active:
        raise UserIneligible("Blocked users cannot participate")

    competition = get_competition(competition_id)
    if not competition.accepts_entries(utcnow()):
        raise CompetitionClosed("Competition has closed or already started")
    if competition.is_full():
        raise CompetitionClosed("Competition is full")

    existing = (
        Participation.query
        .filter_by(user_id=identity.user_id, competition_id=competition.competition_id)
        .filter(Participation.status != CANCELLED)
        .first()
    )
    if existing:
        raise AlreadyEnrolled()

    participation = Participation(
        user_id=identity.user_id,
        competition_id=competition.competition_id,
        status=ENROLLED,
    )
    # The partial unique index catches a concurrent duplicate enrollment
    with atomic(on_conflict=AlreadyEnrolled()):
        db.session.add(participation)

    logger.info(
        "User %s enrolled in competition %s (participation %s)",
        identity.user_id, competition.competition_id, participation.participation_id,
    )
    return participation


def get(participation_id, identity):
    """Owners see their own participations; admins see any."""
    participation = get_participation(participation_id)
    if not identity.is_admin and participation.user_id != identity.user_id:
        raise Forbidden()
    return participation


def cancel(participation_id, identity):
    """Withdraw before payment is verified. Frees the (user, competition) slot."""
    participation = get_participation(participation_id)
    if participation.user_id != identity.user_id:
        raise Forbidden()

    with atomic():
        transition(participation.participation_id, participation.status, CANCELLED)

    db.session.refresh(participation)
    return participation

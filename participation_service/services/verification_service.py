"""
Verification Engine
Admin review of a pending payment.

    PENDING_VERIFICATION -> VERIFIED          (approve: payout written)
    PENDING_VERIFICATION -> PAYMENT_REJECTED  (reject: no payout)

Approval writes the status change, the reviewed payment detail, the payout
and the competition head-count in a single commit. The CAS on status plus
the unique payouts.payment_id make a second concurrent approval fail with
InvalidState instead of paying twice.
"""

import logging
from sqlalchemy import update
from participation_service.extensions import db
from participation_service.auth import require_admin
from participation_service.errors import InvalidState, ValidationError
from participation_service.models.competition import Competition
from participation_service.models.participation import (
    PAYMENT_REJECTED,
    PENDING_VERIFICATION,
    VERIFIED,
)
from participation_service.models.payment import APPROVED, DECISIONS, REJECTED
from participation_service.models.payout import Payout
from participation_service.services import calculator
from participation_service.services.config_service import get_effective_config
from participation_service.services.ledger import atomic, get_participation, transition
from participation_service.utils.dates import utcnow

logger = logging.getLogger(__name__)


def verify(participation_id, decision, reviewer, admin_notes=None):
    """
    Approve or reject the pending payment of a participation.
    Raises Unauthorized, ValidationError, NotFound, InvalidState or NoConfiguration.
    """
    # Capability is re-checked on every call from the caller's current claims
    require_admin(reviewer)

    decision = str(decision or "").upper()
    if decision not in DECISIONS:
        raise ValidationError("Valid status (APPROVED/REJECTED) is required")

    participation = get_participation(participation_id)
    if participation.status != PENDING_VERIFICATION:
        raise InvalidState("Participation is not pending verification")

    payment = participation.current_payment
    if payment is None or payment.decision is not None:
        raise InvalidState("No payment awaiting review")

    reviewed_at = utcnow()
    participation_key = participation.participation_id
    payment_key = payment.payment_id

    if decision == REJECTED:
        with atomic():
            transition(participation_key, PENDING_VERIFICATION, PAYMENT_REJECTED)
            payment.decision = REJECTED
            payment.reviewed_by = reviewer.user_id
            payment.reviewed_at = reviewed_at
            payment.admin_notes = admin_notes
        logger.info("Payment %s rejected by %s", payment_key, reviewer.user_id)
        db.session.refresh(participation)
        return participation

    # Configuration is read once, at the approval timestamp
    config = get_effective_config(reviewed_at)
    breakdown = calculator.compute(payment.amount, config)
    config_version = config.version
    user_id = participation.user_id
    competition_key = participation.competition_id

    with atomic(on_conflict=InvalidState("Payment was already paid out")):
        transition(participation_key, PENDING_VERIFICATION, VERIFIED)
        payment.decision = APPROVED
        payment.reviewed_by = reviewer.user_id
        payment.reviewed_at = reviewed_at
        payment.admin_notes = admin_notes
        db.session.add(Payout(
            payment_id=payment_key,
            participation_id=participation_key,
            user_id=user_id,
            config_version=config_version,
            gross_amount=breakdown.gross,
            sponsor_bonus_amount=breakdown.sponsor_bonus,
            tds_amount=breakdown.tds,
            net_amount=breakdown.net,
            created_at=reviewed_at,
        ))
        db.session.execute(
            update(Competition)
            .where(Competition.competition_id == competition_key)
            .values(current_participants=Competition.current_participants + 1)
            .execution_options(synchronize_session=False)
        )

    logger.info(
        "Payment %s approved by %s: gross=%s bonus=%s tds=%s net=%s (config v%s)",
        payment_key, reviewer.user_id, breakdown.gross, breakdown.sponsor_bonus,
        breakdown.tds, breakdown.net, config_version,
    )
    db.session.refresh(participation)
    return participation

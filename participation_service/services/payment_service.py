"""
Payment Intake
Attaches payment evidence to a participation and moves it to PENDING_VERIFICATION.
"""

import logging
from participation_service.extensions import db
from participation_service.errors import Forbidden, InvalidAmount, InvalidState, ValidationError
from participation_service.models.participation import (
    ENROLLED,
    PAYMENT_REJECTED,
    PENDING_VERIFICATION,
    Participation,
)
from participation_service.models.payment import PaymentDetail
from participation_service.services.ledger import atomic, get_participation, transition
from participation_service.utils.dates import utcnow
from participation_service.utils.money import has_cents_precision, to_decimal

logger = logging.getLogger(__name__)

SUBMITTABLE = (ENROLLED, PAYMENT_REJECTED)


def _clean_evidence(evidence):
    evidence = evidence or {}
    payment_method = str(evidence.get("payment_method") or "").strip()
    evidence_ref = str(evidence.get("evidence_ref") or "").strip()
    if not payment_method or not evidence_ref:
        raise ValidationError("Payment method and UTR / transaction reference are required")
    if len(payment_method) > 50 or len(evidence_ref) > 100:
        raise ValidationError("Payment method or reference is too long")

    screenshot_url = evidence.get("screenshot_url") or None
    if screenshot_url is not None and len(str(screenshot_url)) > 500:
        raise ValidationError("screenshot_url is too long")
    return payment_method, evidence_ref, screenshot_url


def _clean_amount(amount, entry_fee):
    try:
        amount = to_decimal(amount)
    except ValueError:
        raise InvalidAmount("Amount must be a number")
    if amount <= 0:
        raise InvalidAmount("Amount must be greater than zero")
    if not has_cents_precision(amount):
        raise InvalidAmount("Amount supports at most two decimal places")
    # Exact-match policy: partial or over-payments are refused here, not at verification
    if amount != entry_fee:
        raise InvalidAmount(f"Amount must equal the entry fee of {entry_fee}")
    return amount


def submit_payment(participation_id, amount, evidence, identity):
    """
    Record a payment attempt for the caller's participation.
    Raises NotFound, Forbidden, InvalidState, InvalidAmount or ValidationError.
    """
    participation = get_participation(participation_id)
    if participation.user_id != identity.user_id:
        raise Forbidden()

    current_status = participation.status
    if current_status not in SUBMITTABLE:
        raise InvalidState(
            "Payment already submitted or participation not awaiting payment"
        )

    amount = _clean_amount(amount, participation.competition.entry_fee)
    payment_method, evidence_ref, screenshot_url = _clean_evidence(evidence)

    attempt = participation.attempt_count + 1
    payment = PaymentDetail(
        participation_id=participation.participation_id,
        attempt=attempt,
        amount=amount,
        payment_method=payment_method,
        evidence_ref=evidence_ref,
        screenshot_url=screenshot_url,
        submitted_at=utcnow(),
    )

    # Status CAS and the new detail row land together; a duplicate attempt
    # number means another submission won the race
    with atomic(on_conflict=InvalidState("Payment was submitted concurrently")):
        transition(
            participation.participation_id,
            current_status,
            PENDING_VERIFICATION,
            attempt_count=Participation.attempt_count + 1,
        )
        db.session.add(payment)

    logger.info(
        "Payment attempt %s submitted for participation %s (ref %s)",
        attempt, participation.participation_id, evidence_ref,
    )
    db.session.refresh(participation)
    return participation

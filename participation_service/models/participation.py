"""
Participation Model
Status: ENROLLED | PENDING_VERIFICATION | PAYMENT_REJECTED | VERIFIED | CANCELLED
"""

import uuid
from participation_service.extensions import db
from participation_service.utils.dates import utcnow, isoformat
from participation_service.utils.money import money

ENROLLED = "ENROLLED"
PENDING_VERIFICATION = "PENDING_VERIFICATION"
PAYMENT_REJECTED = "PAYMENT_REJECTED"
VERIFIED = "VERIFIED"
CANCELLED = "CANCELLED"

STATUSES = (ENROLLED, PENDING_VERIFICATION, PAYMENT_REJECTED, VERIFIED, CANCELLED)
TERMINAL_STATUSES = frozenset({VERIFIED, CANCELLED})

# No path skips PENDING_VERIFICATION on the way to VERIFIED
VALID_TRANSITIONS = {
    ENROLLED: {PENDING_VERIFICATION, CANCELLED},
    PENDING_VERIFICATION: {VERIFIED, PAYMENT_REJECTED},
    PAYMENT_REJECTED: {PENDING_VERIFICATION, CANCELLED},
    VERIFIED: set(),
    CANCELLED: set(),
}


class Participation(db.Model):
    __tablename__ = "participations"
    __table_args__ = (
        # One live participation per (user, competition); cancelled rows don't count
        db.Index(
            "uq_participations_active_pair",
            "user_id",
            "competition_id",
            unique=True,
            postgresql_where=db.text("status <> 'CANCELLED'"),
            sqlite_where=db.text("status <> 'CANCELLED'"),
        ),
        db.Index("idx_participations_status", "status"),
    )

    participation_id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    competition_id = db.Column(
        db.Uuid, db.ForeignKey("competitions.competition_id"), nullable=False, index=True
    )
    user_id = db.Column(db.String(64), nullable=False, index=True)
    status = db.Column(
        db.Enum(*STATUSES, name="participation_status"),
        nullable=False,
        default=ENROLLED,
    )
    attempt_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    competition = db.relationship("Competition", lazy="joined")
    payments = db.relationship(
        "PaymentDetail",
        back_populates="participation",
        order_by="PaymentDetail.attempt",
        lazy="selectin",
    )
    payout = db.relationship("Payout", uselist=False, lazy="selectin")

    @property
    def current_payment(self):
        return self.payments[-1] if self.payments else None

    def to_dict(self, include_history=False):
        data = {
            "participation_id": str(self.participation_id),
            "competition_id":   str(self.competition_id),
            "user_id":          self.user_id,
            "status":           self.status,
            "attempt_count":    self.attempt_count,
            "created_at":       isoformat(self.created_at),
            "updated_at":       isoformat(self.updated_at),
            "competition": {
                "title":      self.competition.title,
                "entry_fee":  money(self.competition.entry_fee),
                "event_date": isoformat(self.competition.event_date),
            } if self.competition else None,
            "payment": self.current_payment.to_dict() if self.current_payment else None,
            "payout":  self.payout.to_dict() if self.payout else None,
        }
        if include_history:
            data["payment_history"] = [p.to_dict() for p in self.payments]
        return data

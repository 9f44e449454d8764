"""
Payment Detail Model
One row per submission attempt. Rejected rows are kept; resubmission adds a new attempt.
Decision: NULL (awaiting review) | APPROVED | REJECTED
"""

import uuid
from participation_service.extensions import db
from participation_service.utils.dates import utcnow, isoformat
from participation_service.utils.money import money

APPROVED = "APPROVED"
REJECTED = "REJECTED"
DECISIONS = (APPROVED, REJECTED)


class PaymentDetail(db.Model):
    __tablename__ = "payment_details"
    __table_args__ = (
        db.UniqueConstraint("participation_id", "attempt", name="uq_payment_details_attempt"),
    )

    payment_id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    participation_id = db.Column(
        db.Uuid, db.ForeignKey("participations.participation_id"), nullable=False, index=True
    )
    attempt = db.Column(db.Integer, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(db.String(50), nullable=False)
    evidence_ref = db.Column(db.String(100), nullable=False, index=True)  # UTR / transaction id
    screenshot_url = db.Column(db.String(500), nullable=True)
    submitted_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    decision = db.Column(db.Enum(*DECISIONS, name="payment_decision"), nullable=True)
    reviewed_by = db.Column(db.String(64), nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    admin_notes = db.Column(db.Text, nullable=True)

    participation = db.relationship("Participation", back_populates="payments")

    def to_dict(self):
        return {
            "payment_id":     str(self.payment_id),
            "attempt":        self.attempt,
            "amount":         money(self.amount),
            "payment_method": self.payment_method,
            "evidence_ref":   self.evidence_ref,
            "screenshot_url": self.screenshot_url,
            "submitted_at":   isoformat(self.submitted_at),
            "decision":       self.decision,
            "reviewed_by":    self.reviewed_by,
            "reviewed_at":    isoformat(self.reviewed_at),
            "admin_notes":    self.admin_notes,
        }

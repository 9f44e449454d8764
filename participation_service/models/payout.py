"""
Payout Model
Written once, in the same transaction that approves its payment detail. Never updated.
"""

import uuid
from participation_service.extensions import db
from participation_service.utils.dates import utcnow, isoformat
from participation_service.utils.money import money


class Payout(db.Model):
    __tablename__ = "payouts"

    payout_id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    # unique: a payment detail can be paid out at most once
    payment_id = db.Column(
        db.Uuid, db.ForeignKey("payment_details.payment_id"), nullable=False, unique=True
    )
    participation_id = db.Column(
        db.Uuid, db.ForeignKey("participations.participation_id"), nullable=False, index=True
    )
    user_id = db.Column(db.String(64), nullable=False, index=True)
    config_version = db.Column(
        db.Integer, db.ForeignKey("bonus_configs.version"), nullable=False
    )
    gross_amount = db.Column(db.Numeric(12, 2), nullable=False)
    sponsor_bonus_amount = db.Column(db.Numeric(12, 2), nullable=False)
    tds_amount = db.Column(db.Numeric(12, 2), nullable=False)
    net_amount = db.Column(db.Numeric(12, 2), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def to_dict(self):
        return {
            "payout_id":            str(self.payout_id),
            "payment_id":           str(self.payment_id),
            "config_version":       self.config_version,
            "gross_amount":         money(self.gross_amount),
            "sponsor_bonus_amount": money(self.sponsor_bonus_amount),
            "tds_amount":           money(self.tds_amount),
            "net_amount":           money(self.net_amount),
            "created_at":           isoformat(self.created_at),
        }

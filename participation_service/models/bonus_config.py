"""
Sponsor bonus / TDS configuration.
Append-only: every change is a new version, ordered by effective_from.
"""

from participation_service.extensions import db
from participation_service.utils.dates import utcnow, isoformat


class BonusConfig(db.Model):
    __tablename__ = "bonus_configs"

    version = db.Column(db.Integer, primary_key=True, autoincrement=False)
    sponsor_bonus_pct = db.Column(db.Numeric(5, 2), nullable=False)
    tds_pct = db.Column(db.Numeric(5, 2), nullable=False)
    effective_from = db.Column(db.DateTime, nullable=False, unique=True, index=True)
    created_by = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            "version":           self.version,
            "sponsor_bonus_pct": str(self.sponsor_bonus_pct),
            "tds_pct":           str(self.tds_pct),
            "effective_from":    isoformat(self.effective_from),
            "created_by":        self.created_by,
            "created_at":        isoformat(self.created_at),
        }

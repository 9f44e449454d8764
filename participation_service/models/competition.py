import uuid
from participation_service.extensions import db
from participation_service.utils.dates import utcnow, isoformat
from participation_service.utils.money import money


class Competition(db.Model):
    __tablename__ = "competitions"

    competition_id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    address = db.Column(db.Text, nullable=False)
    entry_fee = db.Column(db.Numeric(12, 2), nullable=False)
    event_date = db.Column(db.DateTime, nullable=False)
    is_open = db.Column(db.Boolean, nullable=False, default=True)
    closes_at = db.Column(db.DateTime, nullable=True)
    max_participants = db.Column(db.Integer, nullable=True)
    current_participants = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def is_full(self):
        return (
            self.max_participants is not None
            and (self.current_participants or 0) >= self.max_participants
        )

    def accepts_entries(self, now):
        if not self.is_open:
            return False
        if self.closes_at is not None and now >= self.closes_at:
            return False
        return now < self.event_date

    def to_dict(self):
        return {
            "competition_id":       str(self.competition_id),
            "title":                self.title,
            "description":          self.description,
            "address":              self.address,
            "entry_fee":            money(self.entry_fee),
            "event_date":           isoformat(self.event_date),
            "is_open":              self.is_open,
            "closes_at":            isoformat(self.closes_at),
            "max_participants":     self.max_participants,
            "current_participants": self.current_participants,
            "created_at":           isoformat(self.created_at),
        }

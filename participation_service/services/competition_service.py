"""
Competition Catalog
Admin-managed competitions. Once anyone has enrolled a competition is
immutable except for closing its entry window, which never reopens.
"""

import logging
from participation_service.extensions import db
from participation_service.auth import require_admin
from participation_service.errors import InvalidState, NotFound, ValidationError
from participation_service.models.competition import Competition
from participation_service.models.participation import Participation
from participation_service.services.ledger import as_uuid, atomic
from participation_service.utils.dates import parse_timestamp, utcnow
from participation_service.utils.money import has_cents_precision, to_decimal

logger = logging.getLogger(__name__)


def _clean(data, partial=False):
    """Validate competition fields; returns only the keys that were supplied."""
    cleaned = {}
    required = ["title", "address", "entry_fee", "event_date"]
    if not partial:
        missing = [f for f in required if data.get(f) in (None, "")]
        if missing:
            raise ValidationError(f"Missing fields: {', '.join(missing)}")

    if "title" in data:
        title = str(data["title"]).strip()
        if not 5 <= len(title) <= 200:
            raise ValidationError("Title must be between 5 and 200 characters")
        cleaned["title"] = title

    if "address" in data:
        address = str(data["address"]).strip()
        if not address:
            raise ValidationError("Address is required")
        cleaned["address"] = address

    if "description" in data:
        cleaned["description"] = data["description"]

    if "entry_fee" in data:
        try:
            fee = to_decimal(data["entry_fee"])
        except ValueError:
            raise ValidationError("entry_fee must be a number")
        if fee <= 0 or not has_cents_precision(fee):
            raise ValidationError("entry_fee must be positive with at most two decimal places")
        cleaned["entry_fee"] = fee

    for field in ("event_date", "closes_at"):
        if field in data:
            try:
                cleaned[field] = parse_timestamp(data[field])
            except ValueError:
                raise ValidationError(f"{field} must be an ISO-8601 timestamp")

    if "max_participants" in data and data["max_participants"] is not None:
        try:
            max_participants = int(data["max_participants"])
        except (TypeError, ValueError):
            raise ValidationError("max_participants must be an integer")
        if max_participants < 1:
            raise ValidationError("max_participants must be at least 1")
        cleaned["max_participants"] = max_participants

    return cleaned


def get_competition(competition_id):
    competition = db.session.get(Competition, as_uuid(competition_id, "Competition"))
    if not competition:
        raise NotFound("Competition not found")
    return competition


def list_competitions(include_closed=False):
    query = Competition.query
    if not include_closed:
        query = query.filter(Competition.is_open.is_(True), Competition.event_date > utcnow())
    return query.order_by(Competition.event_date.asc()).all()


def create_competition(data, admin):
    require_admin(admin)
    cleaned = _clean(data or {})
    if cleaned["event_date"] <= utcnow():
        raise ValidationError("Competition date must be in the future")

    competition = Competition(**cleaned)
    with atomic():
        db.session.add(competition)

    logger.info("Competition %s created by %s", competition.competition_id, admin.user_id)
    return competition


def _moves_window_earlier(current, new):
    return new is not None and (current is None or new < current)


def _window_closed(competition, now):
    return not competition.is_open or (
        competition.closes_at is not None and competition.closes_at <= now
    )


def update_competition(competition_id, data, admin):
    """
    Apply a partial update. Once participations exist only closing the window
    (is_open=false, or an earlier closes_at) is accepted; a closed window can
    never be reopened.
    """
    require_admin(admin)
    competition = get_competition(competition_id)
    data = data or {}

    cleaned = _clean(data, partial=True)
    changed = {f: v for f, v in cleaned.items() if v != getattr(competition, f)}

    reopening = data.get("is_open") is True and not competition.is_open
    if "closes_at" in changed and _window_closed(competition, utcnow()):
        if not _moves_window_earlier(competition.closes_at, changed["closes_at"]):
            reopening = True
    if reopening:
        raise InvalidState("A closed competition cannot be reopened")

    locked = [
        f for f, v in changed.items()
        if not (f == "closes_at" and _moves_window_earlier(competition.closes_at, v))
    ]
    if locked:
        has_participants = (
            Participation.query.filter_by(competition_id=competition.competition_id).first()
            is not None
        )
        if has_participants:
            raise InvalidState(
                f"Cannot change {', '.join(sorted(locked))} once participants exist"
            )

    with atomic():
        for field, value in changed.items():
            setattr(competition, field, value)
        if data.get("is_open") is False:
            competition.is_open = False

    logger.info("Competition %s updated by %s", competition.competition_id, admin.user_id)
    return competition


def close_competition(competition_id, admin):
    require_admin(admin)
    competition = get_competition(competition_id)
    if competition.is_open:
        with atomic():
            competition.is_open = False
        logger.info("Competition %s closed by %s", competition.competition_id, admin.user_id)
    return competition

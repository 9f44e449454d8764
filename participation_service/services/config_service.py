"""
Admin Configuration Store
Versioned sponsor bonus / TDS percentages. Versions are only ever appended;
lookups pick the latest version already in effect at a given time.
"""

import logging
from decimal import Decimal
from participation_service.auth import require_admin
from participation_service.extensions import db
from participation_service.errors import (
    InvalidRange,
    NoConfiguration,
    NonMonotonicTimestamp,
    ValidationError,
)
from participation_service.models.bonus_config import BonusConfig
from participation_service.services.ledger import atomic
from participation_service.utils.dates import parse_timestamp, utcnow
from participation_service.utils.money import to_decimal

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _percentage(value, field):
    try:
        pct = to_decimal(value)
    except ValueError:
        raise InvalidRange(f"{field} must be a number")
    if pct < 0 or pct > HUNDRED:
        raise InvalidRange(f"{field} must be between 0 and 100")
    if pct != pct.quantize(Decimal("0.01")):
        raise InvalidRange(f"{field} supports at most two decimal places")
    return pct


def latest_version():
    return BonusConfig.query.order_by(BonusConfig.effective_from.desc()).first()


def list_versions():
    return BonusConfig.query.order_by(BonusConfig.effective_from.asc()).all()


def get_effective_config(at=None):
    """Latest version whose effective_from <= at (default: now)."""
    at = at or utcnow()
    config = (
        BonusConfig.query
        .filter(BonusConfig.effective_from <= at)
        .order_by(BonusConfig.effective_from.desc())
        .first()
    )
    if not config:
        raise NoConfiguration()
    return config


def set_config(sponsor_bonus_pct, tds_pct, effective_from, admin):
    """
    Append a configuration version.
    effective_from defaults to now and must be strictly later than the
    latest version's effective_from.
    """
    require_admin(admin)

    sponsor_bonus_pct = _percentage(sponsor_bonus_pct, "sponsor_bonus_pct")
    tds_pct = _percentage(tds_pct, "tds_pct")
    if sponsor_bonus_pct + tds_pct > HUNDRED:
        raise InvalidRange("sponsor_bonus_pct and tds_pct together cannot exceed 100")

    try:
        effective_from = parse_timestamp(effective_from) or utcnow()
    except ValueError:
        raise ValidationError("effective_from must be an ISO-8601 timestamp")

    latest = latest_version()
    if latest and effective_from <= latest.effective_from:
        raise NonMonotonicTimestamp(
            f"effective_from must be after {latest.effective_from.isoformat()}Z"
        )

    config = BonusConfig(
        version=(latest.version + 1) if latest else 1,
        sponsor_bonus_pct=sponsor_bonus_pct,
        tds_pct=tds_pct,
        effective_from=effective_from,
        created_by=admin.user_id,
    )
    # A concurrent writer that claimed the same version number or timestamp wins
    with atomic(on_conflict=NonMonotonicTimestamp("A newer configuration version was written concurrently")):
        db.session.add(config)

    logger.info(
        "Config v%s: sponsor_bonus=%s%% tds=%s%% effective_from=%s (by %s)",
        config.version, sponsor_bonus_pct, tds_pct, effective_from, admin.user_id,
    )
    return config


def _current_values():
    try:
        current = get_effective_config()
    except NoConfiguration:
        return Decimal("0"), Decimal("0")
    return current.sponsor_bonus_pct, current.tds_pct


def set_sponsor_bonus(percentage, admin):
    """New version effective now with the given sponsor bonus; TDS carried over."""
    require_admin(admin)
    _, tds_pct = _current_values()
    return set_config(percentage, tds_pct, None, admin)


def set_tds(percentage, admin):
    """New version effective now with the given TDS; sponsor bonus carried over."""
    require_admin(admin)
    sponsor_bonus_pct, _ = _current_values()
    return set_config(sponsor_bonus_pct, percentage, None, admin)


def seed_initial_config(sponsor_bonus_pct, tds_pct, created_by="system"):
    """
    Write version 1 if the store is empty. Returns the new version, or None
    when a configuration already exists.
    """
    if latest_version():
        return None

    sponsor_bonus_pct = _percentage(sponsor_bonus_pct, "sponsor_bonus_pct")
    tds_pct = _percentage(tds_pct, "tds_pct")
    if sponsor_bonus_pct + tds_pct > HUNDRED:
        raise InvalidRange()

    config = BonusConfig(
        version=1,
        sponsor_bonus_pct=sponsor_bonus_pct,
        tds_pct=tds_pct,
        effective_from=utcnow(),
        created_by=created_by,
    )
    with atomic(on_conflict=NonMonotonicTimestamp("Configuration already seeded")):
        db.session.add(config)
    logger.info("Seeded config v1: sponsor_bonus=%s%% tds=%s%%", sponsor_bonus_pct, tds_pct)
    return config

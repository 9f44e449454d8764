"""
Reporting Facade
Read-only projections over the ledger. Aggregates are computed on request.
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import case, func
from participation_service.extensions import db
from participation_service.auth import require_admin
from participation_service.errors import ValidationError
from participation_service.models.competition import Competition
from participation_service.models.participation import STATUSES, VERIFIED, Participation
from participation_service.models.payout import Payout
from participation_service.services.ledger import as_uuid
from participation_service.utils.money import money

GROUP_KEYS = ("competition", "status")


def _paginate(query, page, per_page):
    page = max(page or 1, 1)
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)
    return {
        "data": [p.to_dict() for p in pagination.items],
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": pagination.total,
            "total_pages": pagination.pages,
        },
    }


def _check_status(status):
    if status and status not in STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(STATUSES)}")


def my_participations(identity, page=1, per_page=10, status=None):
    _check_status(status)
    query = Participation.query.filter_by(user_id=identity.user_id)
    if status:
        query = query.filter_by(status=status)
    return _paginate(query.order_by(Participation.created_at.desc()), page, per_page)


def all_participations(admin, page=1, per_page=10, status=None, competition_id=None,
                       month=None, year=None):
    require_admin(admin)
    _check_status(status)

    query = Participation.query
    if status:
        query = query.filter_by(status=status)
    if competition_id:
        query = query.filter_by(competition_id=as_uuid(competition_id, "Competition"))
    if month and year:
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        start = datetime(year, month, 1)
        end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
        query = query.filter(Participation.created_at >= start, Participation.created_at < end)

    return _paginate(query.order_by(Participation.created_at.desc()), page, per_page)


def income_stats(admin, start=None, end=None, user_id=None):
    """
    Payout totals per user for payouts created in [start, end).
    """
    require_admin(admin)
    if start and end and start >= end:
        raise ValidationError("start must be before end")

    query = db.session.query(
        Payout.user_id,
        func.count(Payout.payout_id),
        func.sum(Payout.gross_amount),
        func.sum(Payout.sponsor_bonus_amount),
        func.sum(Payout.tds_amount),
        func.sum(Payout.net_amount),
    )
    if start:
        query = query.filter(Payout.created_at >= start)
    if end:
        query = query.filter(Payout.created_at < end)
    if user_id:
        query = query.filter(Payout.user_id == user_id)

    rows = query.group_by(Payout.user_id).order_by(Payout.user_id).all()

    users = []
    totals = {"payouts": 0, "gross": Decimal("0"), "sponsor_bonus": Decimal("0"),
              "tds": Decimal("0"), "net": Decimal("0")}
    for uid, count, gross, bonus, tds, net in rows:
        amounts = {
            "gross": Decimal(str(gross or 0)),
            "sponsor_bonus": Decimal(str(bonus or 0)),
            "tds": Decimal(str(tds or 0)),
            "net": Decimal(str(net or 0)),
        }
        users.append({"user_id": uid, "payouts": count, **{k: money(v) for k, v in amounts.items()}})
        totals["payouts"] += count
        for key, value in amounts.items():
            totals[key] += value

    return {
        "users": users,
        "totals": {k: (v if k == "payouts" else money(v)) for k, v in totals.items()},
    }


def bv_stats(admin, group_by="competition"):
    """
    Participation volume per group: all participations, verified ones, and
    the verified gross amount.
    """
    require_admin(admin)
    if group_by not in GROUP_KEYS:
        raise ValidationError(f"group_by must be one of: {', '.join(GROUP_KEYS)}")

    verified_count = func.sum(case((Participation.status == VERIFIED, 1), else_=0))
    volume = func.coalesce(func.sum(Payout.gross_amount), 0)

    if group_by == "competition":
        rows = (
            db.session.query(
                Competition.competition_id,
                Competition.title,
                func.count(Participation.participation_id),
                verified_count,
                volume,
            )
            .join(Participation, Participation.competition_id == Competition.competition_id)
            .outerjoin(Payout, Payout.participation_id == Participation.participation_id)
            .group_by(Competition.competition_id, Competition.title)
            .order_by(Competition.title)
            .all()
        )
        groups = [
            {
                "key": str(cid),
                "label": title,
                "participations": count,
                "verified": int(verified or 0),
                "verified_volume": money(Decimal(str(vol or 0))),
            }
            for cid, title, count, verified, vol in rows
        ]
    else:
        rows = (
            db.session.query(
                Participation.status,
                func.count(Participation.participation_id),
                verified_count,
                volume,
            )
            .outerjoin(Payout, Payout.participation_id == Participation.participation_id)
            .group_by(Participation.status)
            .order_by(Participation.status)
            .all()
        )
        groups = [
            {
                "key": status,
                "label": status,
                "participations": count,
                "verified": int(verified or 0),
                "verified_volume": money(Decimal(str(vol or 0))),
            }
            for status, count, verified, vol in rows
        ]

    return {"group_by": group_by, "groups": groups}

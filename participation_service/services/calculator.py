"""
Bonus & TDS Calculator.
Pure computation: no database access, no clock.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from participation_service.errors import InvalidAmount, InvalidConfiguration
from participation_service.utils.money import CENT

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PayoutBreakdown:
    gross: Decimal
    sponsor_bonus: Decimal
    tds: Decimal
    net: Decimal


def round_cents(value):
    # ROUND_HALF_UP on Decimal rounds half away from zero
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def validate_percentages(sponsor_bonus_pct, tds_pct):
    sponsor_bonus_pct = Decimal(sponsor_bonus_pct)
    tds_pct = Decimal(tds_pct)
    if sponsor_bonus_pct < 0 or tds_pct < 0:
        raise InvalidConfiguration("Percentages cannot be negative")
    if sponsor_bonus_pct + tds_pct > HUNDRED:
        raise InvalidConfiguration("Sponsor bonus and TDS together cannot exceed 100%")
    return sponsor_bonus_pct, tds_pct


def compute(gross_amount, config):
    """
    Split a verified payment into sponsor bonus, TDS and net.

    sponsor_bonus and tds are each rounded to the cent independently; net is
    whatever is left, so the three always add back up to gross exactly.

    config: any object with sponsor_bonus_pct and tds_pct attributes.
    """
    sponsor_bonus_pct, tds_pct = validate_percentages(config.sponsor_bonus_pct, config.tds_pct)

    gross = Decimal(gross_amount)
    if gross < 0:
        raise InvalidAmount("Gross amount cannot be negative")
    gross = round_cents(gross)

    sponsor_bonus = round_cents(gross * sponsor_bonus_pct / HUNDRED)
    tds = round_cents(gross * tds_pct / HUNDRED)
    net = gross - sponsor_bonus - tds

    return PayoutBreakdown(gross=gross, sponsor_bonus=sponsor_bonus, tds=tds, net=net)

from participation_service.models.competition import Competition
from participation_service.models.participation import Participation
from participation_service.models.payment import PaymentDetail
from participation_service.models.bonus_config import BonusConfig
from participation_service.models.payout import Payout

__all__ = ["Competition", "Participation", "PaymentDetail", "BonusConfig", "Payout"]

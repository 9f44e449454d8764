import unittest
from datetime import timedelta
from decimal import Decimal
from flask_jwt_extended import create_access_token
from participation_service.app import create_app
from participation_service.auth import Identity
from participation_service.extensions import db
from participation_service.models import BonusConfig, Competition
from participation_service.utils.dates import utcnow

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET_KEY": "test-secret-key-with-at-least-32-bytes!!",
    "LOG_LEVEL": "WARNING",
}

ADMIN = Identity(user_id="admin-1", is_admin=True)


class ServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app(TEST_CONFIG)
        self.ctx = self.app.app_context()
        self.ctx.push()
        db.create_all()
        self.client = self.app.test_client()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    # --- auth -----------------------------------------------------------

    def headers(self, user_id, is_admin=False, is_active=True):
        token = create_access_token(
            identity=user_id,
            additional_claims={"is_admin": is_admin, "is_active": is_active},
        )
        return {"Authorization": f"Bearer {token}"}

    def admin_headers(self):
        return self.headers(ADMIN.user_id, is_admin=True)

    # --- fixtures -------------------------------------------------------

    def make_competition(self, entry_fee="1000.00", **overrides):
        fields = {
            "title": "Regional Vedic Maths Olympiad",
            "address": "Town Hall, Pune",
            "entry_fee": Decimal(entry_fee),
            "event_date": utcnow() + timedelta(days=30),
            "is_open": True,
        }
        fields.update(overrides)
        competition = Competition(**fields)
        db.session.add(competition)
        db.session.commit()
        return str(competition.competition_id)

    def seed_config(self, sponsor_bonus_pct="10", tds_pct="5", effective_from=None, version=None):
        if version is None:
            version = BonusConfig.query.count() + 1
        config = BonusConfig(
            version=version,
            sponsor_bonus_pct=Decimal(sponsor_bonus_pct),
            tds_pct=Decimal(tds_pct),
            effective_from=effective_from or utcnow() - timedelta(days=1),
            created_by=ADMIN.user_id,
        )
        db.session.add(config)
        db.session.commit()
        return config

    # --- HTTP steps -----------------------------------------------------

    def enroll(self, user_id, competition_id, **claims):
        return self.client.post(
            f"/api/participations/competitions/{competition_id}/participate",
            headers=self.headers(user_id, **claims),
        )

    def enrolled(self, user_id, competition_id):
        resp = self.enroll(user_id, competition_id)
        self.assertEqual(resp.status_code, 201, resp.get_json())
        return resp.get_json()["data"]["participation_id"]

    def pay(self, user_id, participation_id, amount="1000.00", evidence_ref="UTR0001"):
        return self.client.post(
            f"/api/participations/{participation_id}/payment",
            headers=self.headers(user_id),
            json={
                "amount": amount,
                "payment_method": "UPI",
                "evidence_ref": evidence_ref,
                "screenshot_url": "https://files.example.com/receipt.png",
            },
        )

    def decide(self, participation_id, status, headers=None, admin_notes=None):
        return self.client.put(
            f"/api/participations/admin/{participation_id}/verify-payment",
            headers=headers or self.admin_headers(),
            json={"status": status, "admin_notes": admin_notes},
        )

    def pending(self, user_id, competition_id, **pay_kwargs):
        participation_id = self.enrolled(user_id, competition_id)
        resp = self.pay(user_id, participation_id, **pay_kwargs)
        self.assertEqual(resp.status_code, 200, resp.get_json())
        return participation_id

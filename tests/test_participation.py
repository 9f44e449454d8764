import unittest
from datetime import timedelta
from helpers import ServiceTestCase
from participation_service.models import Participation
from participation_service.utils.dates import utcnow


class TestEnrollment(ServiceTestCase):
    def setUp(self):
        super().setUp()
        self.competition_id = self.make_competition()

    def test_enroll_creates_enrolled_participation(self):
        resp = self.enroll("user-a", self.competition_id)
        self.assertEqual(resp.status_code, 201)
        data = resp.get_json()["data"]
        self.assertEqual(data["status"], "ENROLLED")
        self.assertEqual(data["user_id"], "user-a")
        self.assertEqual(data["attempt_count"], 0)
        self.assertIsNone(data["payment"])

    def test_second_enrollment_rejected(self):
        self.enrolled("user-a", self.competition_id)
        resp = self.enroll("user-a", self.competition_id)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["error_code"], "ALREADY_ENROLLED")
        self.assertEqual(Participation.query.count(), 1)

    def test_other_users_can_enroll(self):
        self.enrolled("user-a", self.competition_id)
        self.enrolled("user-b", self.competition_id)
        self.assertEqual(Participation.query.count(), 2)

    def test_closed_window_rejected(self):
        closed = self.make_competition(is_open=False)
        resp = self.enroll("user-a", closed)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["error_code"], "COMPETITION_CLOSED")

    def test_past_closes_at_rejected(self):
        expired = self.make_competition(closes_at=utcnow() - timedelta(hours=1))
        resp = self.enroll("user-a", expired)
        self.assertEqual(resp.get_json()["error_code"], "COMPETITION_CLOSED")

    def test_started_competition_rejected(self):
        started = self.make_competition(event_date=utcnow() - timedelta(minutes=5))
        resp = self.enroll("user-a", started)
        self.assertEqual(resp.get_json()["error_code"], "COMPETITION_CLOSED")

    def test_full_competition_rejected(self):
        full = self.make_competition(max_participants=1, current_participants=1)
        resp = self.enroll("user-a", full)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["message"], "Competition is full")

    def test_blocked_user_ineligible(self):
        resp = self.enroll("user-a", self.competition_id, is_active=False)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.get_json()["error_code"], "USER_INELIGIBLE")

    def test_unknown_competition(self):
        resp = self.enroll("user-a", "00000000-0000-0000-0000-000000000000")
        self.assertEqual(resp.status_code, 404)

    def test_requires_token(self):
        resp = self.client.post(f"/api/participations/competitions/{self.competition_id}/participate")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json()["error_code"], "AUTHENTICATION_REQUIRED")


class TestGetAndCancel(ServiceTestCase):
    def setUp(self):
        super().setUp()
        self.competition_id = self.make_competition()
        self.participation_id = self.enrolled("user-a", self.competition_id)

    def test_owner_can_fetch(self):
        resp = self.client.get(
            f"/api/participations/{self.participation_id}", headers=self.headers("user-a")
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["data"]["payment_history"], [])

    def test_other_user_forbidden(self):
        resp = self.client.get(
            f"/api/participations/{self.participation_id}", headers=self.headers("user-b")
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.get_json()["error_code"], "FORBIDDEN")

    def test_admin_can_fetch_any(self):
        resp = self.client.get(
            f"/api/participations/{self.participation_id}", headers=self.admin_headers()
        )
        self.assertEqual(resp.status_code, 200)

    def test_unknown_participation(self):
        resp = self.client.get(
            "/api/participations/00000000-0000-0000-0000-000000000000",
            headers=self.headers("user-a"),
        )
        self.assertEqual(resp.status_code, 404)

    def test_cancel_then_re_enroll(self):
        resp = self.client.put(
            f"/api/participations/{self.participation_id}/cancel", headers=self.headers("user-a")
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["data"]["status"], "CANCELLED")

        new_id = self.enrolled("user-a", self.competition_id)
        self.assertNotEqual(new_id, self.participation_id)

    def test_cannot_cancel_pending_payment(self):
        self.pay("user-a", self.participation_id)
        resp = self.client.put(
            f"/api/participations/{self.participation_id}/cancel", headers=self.headers("user-a")
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["error_code"], "INVALID_STATE")

    def test_finished_participation_cannot_be_cancelled(self):
        self.seed_config()
        self.pay("user-a", self.participation_id)
        self.decide(self.participation_id, "APPROVED")
        cancel_url = f"/api/participations/{self.participation_id}/cancel"

        resp = self.client.put(cancel_url, headers=self.headers("user-a"))
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["message"], "Participation is already VERIFIED")

    def test_cancel_twice(self):
        cancel_url = f"/api/participations/{self.participation_id}/cancel"
        self.assertEqual(self.client.put(cancel_url, headers=self.headers("user-a")).status_code, 200)

        resp = self.client.put(cancel_url, headers=self.headers("user-a"))
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["message"], "Participation is already CANCELLED")

    def test_cannot_cancel_someone_elses(self):
        resp = self.client.put(
            f"/api/participations/{self.participation_id}/cancel", headers=self.headers("user-b")
        )
        self.assertEqual(resp.status_code, 403)


if __name__ == '__main__':
    unittest.main()

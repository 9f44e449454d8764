import unittest
from helpers import ServiceTestCase
from participation_service.models import PaymentDetail


class TestPaymentIntake(ServiceTestCase):
    def setUp(self):
        super().setUp()
        self.competition_id = self.make_competition(entry_fee="1000.00")
        self.participation_id = self.enrolled("user-a", self.competition_id)

    def test_submission_moves_to_pending(self):
        resp = self.pay("user-a", self.participation_id)
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()["data"]
        self.assertEqual(data["status"], "PENDING_VERIFICATION")
        self.assertEqual(data["attempt_count"], 1)
        self.assertEqual(data["payment"]["amount"], "1000.00")
        self.assertEqual(data["payment"]["evidence_ref"], "UTR0001")
        self.assertIsNone(data["payment"]["decision"])

    def test_numeric_amount_accepted(self):
        resp = self.client.post(
            f"/api/participations/{self.participation_id}/payment",
            headers=self.headers("user-a"),
            json={"amount": 1000, "payment_method": "UPI", "evidence_ref": "UTR0002"},
        )
        self.assertEqual(resp.status_code, 200)

    def test_amount_must_match_fee(self):
        for amount in ["999.99", "1000.01", "500"]:
            resp = self.pay("user-a", self.participation_id, amount=amount)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.get_json()["error_code"], "INVALID_AMOUNT")
        self.assertEqual(PaymentDetail.query.count(), 0)

    def test_non_positive_or_garbage_amount(self):
        for amount in ["0", "-1000", "abc", None, "1000.001"]:
            resp = self.pay("user-a", self.participation_id, amount=amount)
            self.assertEqual(resp.get_json()["error_code"], "INVALID_AMOUNT", amount)

    def test_evidence_required(self):
        resp = self.client.post(
            f"/api/participations/{self.participation_id}/payment",
            headers=self.headers("user-a"),
            json={"amount": "1000.00", "payment_method": "UPI"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error_code"], "VALIDATION_ERROR")

    def test_only_owner_can_submit(self):
        resp = self.pay("user-b", self.participation_id)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.get_json()["error_code"], "FORBIDDEN")

    def test_cannot_submit_twice_while_pending(self):
        self.assertEqual(self.pay("user-a", self.participation_id).status_code, 200)
        resp = self.pay("user-a", self.participation_id, evidence_ref="UTR0002")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["error_code"], "INVALID_STATE")
        self.assertEqual(PaymentDetail.query.count(), 1)

    def test_resubmission_after_rejection_creates_new_detail(self):
        self.pay("user-a", self.participation_id, evidence_ref="UTR-BAD")
        resp = self.decide(self.participation_id, "REJECTED", admin_notes="UTR not found")
        self.assertEqual(resp.get_json()["data"]["status"], "PAYMENT_REJECTED")

        resp = self.pay("user-a", self.participation_id, evidence_ref="UTR-GOOD")
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()["data"]
        self.assertEqual(data["status"], "PENDING_VERIFICATION")
        self.assertEqual(data["attempt_count"], 2)

        details = PaymentDetail.query.order_by(PaymentDetail.attempt).all()
        self.assertEqual(len(details), 2)
        self.assertNotEqual(details[0].payment_id, details[1].payment_id)
        self.assertEqual(details[0].decision, "REJECTED")
        self.assertEqual(details[0].admin_notes, "UTR not found")
        self.assertIsNone(details[1].decision)
        self.assertEqual(details[1].evidence_ref, "UTR-GOOD")

    def test_cannot_submit_after_verification(self):
        self.seed_config()
        self.pay("user-a", self.participation_id)
        self.decide(self.participation_id, "APPROVED")
        resp = self.pay("user-a", self.participation_id, evidence_ref="UTR0009")
        self.assertEqual(resp.status_code, 409)


if __name__ == '__main__':
    unittest.main()

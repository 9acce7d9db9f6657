"""
Tests for the loan application lifecycle over HTTP: pricing, role rules,
the transition table, disbursement and dashboard figures.
Run from the project root: python -m pytest tests/test_api_loan_applications.py -v
"""
import unittest

from models.enums import UserRole
from services.calculations import calculate_emi, calculate_total_interest
from tests.api_case import ApiTestCase


class TestCreateApplication(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.product_id = self.create_product()
        self.customer_headers, self.customer = self.register_customer()

    def test_created_as_draft_with_emi(self):
        app = self.create_application(self.customer_headers, self.product_id, amount=500_000, tenure=24)
        self.assertEqual(app["status"], "DRAFT")
        self.assertTrue(app["applicationNumber"].startswith("APP"))
        self.assertEqual(len(app["applicationNumber"]), 14)
        self.assertEqual(app["interestRate"], 12.0)
        self.assertEqual(app["calculatedEmi"], 23536.74)
        self.assertEqual(app["totalInterest"], 64881.76)
        self.assertEqual(app["processingFee"], 7500.0)
        self.assertEqual(app["existingEMI"], 5000)
        self.assertEqual(app["customer"]["id"], self.customer["id"])
        self.assertEqual(app["loanProduct"]["productCode"], "SILVER-001")

    def test_amount_outside_product_bounds(self):
        resp = self.client.post(
            "/api/loan-applications",
            json={"loanProductId": self.product_id, "requestedAmount": 10_000, "tenure": 24},
            headers=self.customer_headers,
        )
        self.assertError(resp, 400, "VALIDATION_ERROR")

    def test_tenure_outside_product_bounds(self):
        resp = self.client.post(
            "/api/loan-applications",
            json={"loanProductId": self.product_id, "requestedAmount": 100_000, "tenure": 60},
            headers=self.customer_headers,
        )
        self.assertError(resp, 400, "VALIDATION_ERROR")

    def test_unknown_or_inactive_product(self):
        inactive_id = self.create_product(product_code="OLD-001", status="INACTIVE")
        for product_id in ("missing", inactive_id):
            with self.subTest(product_id=product_id):
                resp = self.client.post(
                    "/api/loan-applications",
                    json={"loanProductId": product_id, "requestedAmount": 100_000, "tenure": 12},
                    headers=self.customer_headers,
                )
                self.assertError(resp, 404, "NOT_FOUND")

    def test_staff_cannot_apply(self):
        officer = self.create_staff()
        resp = self.client.post(
            "/api/loan-applications",
            json={"loanProductId": self.product_id, "requestedAmount": 100_000, "tenure": 12},
            headers=officer,
        )
        self.assertError(resp, 403, "INSUFFICIENT_PERMISSIONS")

    def test_collateral_pledged_on_create(self):
        holding = self.add_holding(self.customer_headers, units=1000, nav=500.0)
        app = self.create_application(
            self.customer_headers, self.product_id, amount=300_000, collateralIds=[holding["id"]]
        )
        self.assertEqual(app["collateralValue"], 500_000)
        self.assertEqual(app["ltv"], 60.0)
        holdings = self.client.get("/api/collaterals", headers=self.customer_headers).json()["data"]
        self.assertEqual(holdings[0]["status"], "PLEDGED")


class TestStatusChanges(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.product_id = self.create_product()
        self.customer_headers, self.customer = self.register_customer()
        self.officer = self.create_staff(UserRole.LOAN_OFFICER)
        self.application = self.create_application(self.customer_headers, self.product_id)

    def test_customer_gets_403_for_any_status(self):
        for status in ("APPROVED", "SUBMITTED", "not-a-status"):
            with self.subTest(status=status):
                resp = self.set_status(self.customer_headers, self.application["id"], status)
                self.assertError(resp, 403, "INSUFFICIENT_PERMISSIONS")
        resp = self.client.post(f"/api/loan-applications/{self.application['id']}/approve", json={}, headers=self.customer_headers)
        self.assertError(resp, 403, "INSUFFICIENT_PERMISSIONS")

    def test_invalid_transition_is_rejected(self):
        resp = self.set_status(self.officer, self.application["id"], "DISBURSED")
        body = self.assertError(resp, 409, "INVALID_STATUS_TRANSITION")
        self.assertEqual(body["error"]["details"]["from"], "DRAFT")
        current = self.client.get(f"/api/loan-applications/{self.application['id']}", headers=self.officer).json()["data"]
        self.assertEqual(current["status"], "DRAFT")

    def test_unknown_status_value(self):
        self.assertError(self.set_status(self.officer, self.application["id"], "PAID"), 400, "INVALID_STATUS")

    def test_missing_application(self):
        self.assertError(self.set_status(self.officer, "missing", "SUBMITTED"), 404, "NOT_FOUND")

    def test_full_lifecycle(self):
        app_id = self.application["id"]
        for status in ("SUBMITTED", "UNDER_REVIEW"):
            resp = self.set_status(self.officer, app_id, status, reviewNotes=f"moved to {status}")
            self.assertEqual(resp.status_code, 200, resp.text)
            self.assertEqual(resp.json()["data"]["status"], status)

        resp = self.client.post(
            f"/api/loan-applications/{app_id}/approve",
            json={"approvedAmount": 400_000, "reviewNotes": "Approved at reduced amount"},
            headers=self.officer,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        approved = resp.json()["data"]
        self.assertEqual(approved["status"], "APPROVED")
        self.assertEqual(approved["approvedAmount"], 400_000)
        self.assertIsNotNone(approved["approvedAt"])
        # EMI on the application stays as quoted
        self.assertEqual(approved["calculatedEmi"], 23536.74)

        resp = self.set_status(self.officer, app_id, "DISBURSED")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertIsNotNone(resp.json()["data"]["disbursedAt"])

        loans = self.client.get("/api/loans", headers=self.customer_headers).json()["data"]
        self.assertEqual(len(loans), 1)
        loan = loans[0]
        self.assertTrue(loan["loanNumber"].startswith("LN"))
        self.assertEqual(loan["principalAmount"], 400_000)
        self.assertEqual(loan["emiAmount"], calculate_emi(400_000, 12.0, 24))
        self.assertEqual(loan["outstandingPrincipal"], 400_000)
        self.assertEqual(loan["outstandingInterest"], calculate_total_interest(400_000, 12.0, 24))
        self.assertEqual(loan["status"], "ACTIVE")

        schedule = self.client.get(f"/api/loans/{loan['id']}/emi-schedule", headers=self.customer_headers)
        self.assertEqual(schedule.status_code, 200, schedule.text)
        rows = schedule.json()["data"]["schedule"]
        self.assertEqual(len(rows), 24)
        self.assertEqual(rows[-1]["balance"], 0.0)

        resp = self.set_status(self.officer, app_id, "CLOSED")
        self.assertEqual(resp.status_code, 200, resp.text)
        loan = self.client.get(f"/api/loans/{loan['id']}", headers=self.officer).json()["data"]
        self.assertEqual(loan["status"], "CLOSED")
        self.assertEqual(loan["outstandingPrincipal"], 0.0)

        self.assertError(self.set_status(self.officer, app_id, "DRAFT"), 409, "INVALID_STATUS_TRANSITION")

    def test_disbursement_without_approved_amount_uses_requested(self):
        app_id = self.application["id"]
        self.assertEqual(self.set_status(self.officer, app_id, "APPROVED").status_code, 200)
        self.assertEqual(self.set_status(self.officer, app_id, "DISBURSED").status_code, 200)
        loan = self.client.get("/api/loans", headers=self.officer).json()["data"][0]
        self.assertEqual(loan["principalAmount"], 500_000)
        self.assertEqual(loan["emiAmount"], 23536.74)

    def test_rejection_is_terminal_and_releases_collateral(self):
        holding = self.add_holding(self.customer_headers)
        app = self.create_application(self.customer_headers, self.product_id, amount=200_000, collateralIds=[holding["id"]])
        resp = self.client.post(
            f"/api/loan-applications/{app['id']}/reject",
            json={"reason": "Income not verifiable"},
            headers=self.officer,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()["data"]
        self.assertEqual(data["status"], "REJECTED")
        self.assertEqual(data["rejectionReason"], "Income not verifiable")
        self.assertEqual(data["allowedTransitions"], [])

        holdings = self.client.get("/api/collaterals", headers=self.customer_headers).json()["data"]
        self.assertEqual(holdings[0]["status"], "AVAILABLE")
        self.assertError(self.set_status(self.officer, app["id"], "APPROVED"), 409, "INVALID_STATUS_TRANSITION")

    def test_admin_can_change_status(self):
        admin = self.create_staff(UserRole.ADMIN)
        resp = self.set_status(admin, self.application["id"], "under_review")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["data"]["status"], "UNDER_REVIEW")


class TestReadAccess(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.product_id = self.create_product()
        self.john, _ = self.register_customer()
        self.jane, _ = self.register_customer("jane.smith@example.com", "XYZAB5678C", firstName="Jane")
        self.officer = self.create_staff()
        self.johns_app = self.create_application(self.john, self.product_id)
        self.create_application(self.jane, self.product_id, amount=100_000, tenure=12)

    def test_customers_see_only_their_own(self):
        resp = self.client.get("/api/loan-applications", headers=self.john)
        body = resp.json()
        self.assertEqual([a["id"] for a in body["data"]], [self.johns_app["id"]])
        self.assertEqual(body["pagination"]["total"], 1)
        self.assertError(
            self.client.get(f"/api/loan-applications/{self.johns_app['id']}", headers=self.jane),
            403,
            "INSUFFICIENT_PERMISSIONS",
        )

    def test_staff_see_all(self):
        body = self.client.get("/api/loan-applications?limit=1", headers=self.officer).json()
        self.assertEqual(len(body["data"]), 1)
        self.assertEqual(body["pagination"]["total"], 2)
        self.assertTrue(body["pagination"]["hasNext"])

    def test_status_filter(self):
        self.set_status(self.officer, self.johns_app["id"], "SUBMITTED")
        body = self.client.get("/api/loan-applications?status=SUBMITTED", headers=self.officer).json()
        self.assertEqual([a["id"] for a in body["data"]], [self.johns_app["id"]])

    def test_detail_masks_customer_pii(self):
        resp = self.client.get(f"/api/loan-applications/{self.johns_app['id']}", headers=self.officer)
        self.assertEqual(resp.status_code, 200, resp.text)
        customer = resp.json()["data"]["customer"]
        self.assertEqual(customer["panNumber"], "AB****234F")
        self.assertEqual(customer["aadhaarNumber"], "****-****-9012")

    def test_dashboard(self):
        customer_stats = self.client.get("/api/loan-applications/dashboard/stats", headers=self.john).json()["data"]
        self.assertEqual(customer_stats["totalApplications"], 1)
        self.assertEqual(customer_stats["activeLoans"], 0)
        self.assertEqual(customer_stats["creditScore"], 750)

        self.set_status(self.officer, self.johns_app["id"], "APPROVED")
        self.set_status(self.officer, self.johns_app["id"], "DISBURSED")
        staff_stats = self.client.get("/api/loan-applications/dashboard/stats", headers=self.officer).json()["data"]
        self.assertEqual(staff_stats["totalApplications"], 2)
        self.assertEqual(staff_stats["activeLoans"], 1)
        self.assertEqual(staff_stats["totalCustomers"], 2)
        self.assertAlmostEqual(staff_stats["totalOutstanding"], 564881.76, places=2)
        self.assertEqual(staff_stats["totalCollateral"], 0.0)


if __name__ == "__main__":
    unittest.main()

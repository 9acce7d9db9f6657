"""
Shared base for API tests: a fresh app on an in-memory database per test,
driven through TestClient so the lifespan and requests share one event loop.
"""
import unittest
from typing import Any

from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from models import LoanProduct, User
from models.enums import ProductStatus, UserRole, UserStatus
from utils.helpers import new_id
from utils.security import hash_password

STAFF_PASSWORD = "Staff@1234"
CUSTOMER_PASSWORD = "Customer@123"


def register_payload(email: str, pan: str, **overrides: Any) -> dict[str, Any]:
    payload = {
        "email": email,
        "password": CUSTOMER_PASSWORD,
        "confirmPassword": CUSTOMER_PASSWORD,
        "firstName": "John",
        "lastName": "Doe",
        "phoneNumber": "9876543210",
        "dateOfBirth": "1990-05-15",
        "panNumber": pan,
        "aadhaarNumber": "123456789012",
        "address": {
            "line1": "123 Main Street",
            "city": "Mumbai",
            "state": "Maharashtra",
            "pincode": "400001",
        },
    }
    payload.update(overrides)
    return payload


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.settings = Settings(
            database_url="sqlite+aiosqlite:///:memory:",
            environment="test",
            log_level="WARNING",
            bcrypt_rounds=4,
            jwt_secret="test-access-secret",
            jwt_refresh_secret="test-refresh-secret",
            encryption_key="test-encryption-key",
        )
        self.app = create_app(self.settings)
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    # database fixtures

    def add_rows(self, *rows: Any) -> None:
        async def _add():
            async with self.app.state.sessionmaker() as session:
                session.add_all(rows)
                await session.commit()

        self.client.portal.call(_add)

    def create_product(self, **overrides: Any) -> str:
        fields = {
            "product_name": "Silver Plan - Standard Loan",
            "product_code": "SILVER-001",
            "min_amount": 50_000,
            "max_amount": 5_000_000,
            "min_tenure_months": 3,
            "max_tenure_months": 48,
            "interest_rate": 12.0,
            "processing_fee_percentage": 1.5,
            "ltv_ratio": 55,
            "eligible_mf_categories": ["EQUITY", "HYBRID", "DEBT"],
            "features": ["Quick approval"],
            "status": ProductStatus.ACTIVE.value,
        }
        fields.update(overrides)
        product = LoanProduct(id=new_id(), **fields)
        self.add_rows(product)
        return product.id

    def create_staff(self, role: UserRole = UserRole.LOAN_OFFICER, email: str | None = None) -> dict[str, str]:
        email = email or f"{role.value.lower()}@lmsnbfc.test"
        self.add_rows(User(
            id=new_id(),
            email=email,
            password_hash=hash_password(STAFF_PASSWORD, rounds=4),
            role=role.value,
            status=UserStatus.ACTIVE.value,
        ))
        return self.login(email, STAFF_PASSWORD)

    # API helpers

    def login(self, email: str, password: str) -> dict[str, str]:
        resp = self.client.post("/api/auth/login", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return {"Authorization": f"Bearer {resp.json()['data']['accessToken']}"}

    def register_customer(
        self, email: str = "john.doe@example.com", pan: str = "ABCDE1234F", **overrides: Any
    ) -> tuple[dict[str, str], dict[str, Any]]:
        resp = self.client.post("/api/auth/register", json=register_payload(email, pan, **overrides))
        self.assertEqual(resp.status_code, 201, resp.text)
        data = resp.json()["data"]
        return {"Authorization": f"Bearer {data['accessToken']}"}, data["customer"]

    def add_holding(self, headers: dict[str, str], units: float = 1000, nav: float = 500.0) -> dict[str, Any]:
        resp = self.client.post(
            "/api/collaterals",
            json={
                "schemeName": "HDFC Top 100 Fund - Direct Plan - Growth",
                "isin": "INF179K01YV8",
                "folioNumber": "12345678/90",
                "amcName": "HDFC Mutual Fund",
                "category": "EQUITY",
                "units": units,
                "nav": nav,
            },
            headers=headers,
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["data"]

    def create_application(
        self,
        headers: dict[str, str],
        product_id: str,
        amount: float = 500_000,
        tenure: int = 24,
        **extra: Any,
    ) -> dict[str, Any]:
        body = {
            "loanProductId": product_id,
            "requestedAmount": amount,
            "tenure": tenure,
            "purposeOfLoan": "Business expansion",
            "monthlyIncome": 100_000,
            "existingEMI": 5_000,
            **extra,
        }
        resp = self.client.post("/api/loan-applications", json=body, headers=headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["data"]

    def set_status(self, headers: dict[str, str], application_id: str, status: str, **extra: Any):
        return self.client.patch(
            f"/api/loan-applications/{application_id}/status",
            json={"status": status, **extra},
            headers=headers,
        )

    def assertError(self, resp, status_code: int, code: str) -> dict[str, Any]:
        self.assertEqual(resp.status_code, status_code, resp.text)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"]["code"], code)
        return body

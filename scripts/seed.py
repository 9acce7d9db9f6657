"""
Seed demo users, customers, loan products and an API partner.
Run: python -m scripts.seed (from the project root). Safe to run repeatedly.
"""
import asyncio
import os
import sys
from datetime import date, datetime, timezone

# Add parent so we can import from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from config import Settings, settings as default_settings
from database import build_engine, build_sessionmaker, init_db
from models import ApiPartner, Collateral, Customer, LoanProduct, User
from models.enums import (
    CollateralStatus,
    KycStatus,
    PartnerStatus,
    ProductStatus,
    UserRole,
    UserStatus,
)
from services.calculations import round_money
from utils.helpers import generate_api_key, generate_customer_code, new_id
from utils.security import encrypt, hash_password

STAFF_DATA = [
    {"email": "admin@lmsnbfc.com", "password": "Admin@123", "role": UserRole.ADMIN},
    {"email": "officer@lmsnbfc.com", "password": "Officer@123", "role": UserRole.LOAN_OFFICER},
]

CUSTOMER_PASSWORD = "Customer@123"

CUSTOMERS_DATA = [
    {
        "email": "john.doe@gmail.com",
        "first_name": "John",
        "last_name": "Doe",
        "phone_number": "9876543210",
        "date_of_birth": date(1990, 5, 15),
        "pan_number": "ABCDE1234F",
        "aadhaar_number": "123456789012",
        "address": {
            "line1": "123 Main Street",
            "line2": "Apartment 4B",
            "city": "Mumbai",
            "state": "Maharashtra",
            "pincode": "400001",
        },
        "annual_income": 1_200_000,
        "occupation": "Software Engineer",
        "kyc_status": KycStatus.VERIFIED,
        "holdings": [
            {
                "scheme_name": "HDFC Top 100 Fund - Direct Plan - Growth",
                "isin": "INF179K01YV8",
                "folio_number": "12345678/90",
                "amc_name": "HDFC Mutual Fund",
                "category": "EQUITY",
                "units": 1250.456,
                "nav": 985.32,
            },
            {
                "scheme_name": "ICICI Prudential Corporate Bond Fund - Direct Plan - Growth",
                "isin": "INF109K01ZB4",
                "folio_number": "98765432",
                "amc_name": "ICICI Prudential Mutual Fund",
                "category": "DEBT",
                "units": 8000.0,
                "nav": 27.41,
            },
        ],
    },
    {
        "email": "jane.smith@gmail.com",
        "first_name": "Jane",
        "last_name": "Smith",
        "phone_number": "9876543211",
        "date_of_birth": date(1988, 3, 20),
        "pan_number": "XYZAB5678C",
        "aadhaar_number": "234567890123",
        "address": {
            "line1": "456 Park Avenue",
            "city": "Bangalore",
            "state": "Karnataka",
            "pincode": "560001",
        },
        "annual_income": 1_800_000,
        "occupation": "Product Manager",
        "kyc_status": KycStatus.VERIFIED,
        "holdings": [],
    },
    {
        "email": "rajesh.kumar@gmail.com",
        "first_name": "Rajesh",
        "last_name": "Kumar",
        "phone_number": "9876543212",
        "date_of_birth": date(1985, 12, 10),
        "pan_number": "PQRST9876D",
        "aadhaar_number": "345678901234",
        "address": {
            "line1": "789 Gandhi Nagar",
            "line2": "Near City Mall",
            "city": "Delhi",
            "state": "Delhi",
            "pincode": "110001",
        },
        "annual_income": 2_400_000,
        "occupation": "Business Owner",
        "kyc_status": KycStatus.PENDING,
        "holdings": [],
    },
]

PRODUCTS_DATA = [
    {
        "product_name": "Gold Plan - Premium Loan",
        "product_code": "GOLD-001",
        "description": "Premium loan product with the lowest interest rates for high-value mutual fund portfolios.",
        "min_amount": 100_000,
        "max_amount": 10_000_000,
        "min_tenure_months": 3,
        "max_tenure_months": 60,
        "interest_rate": 10.5,
        "processing_fee_percentage": 1.0,
        "ltv_ratio": 60,
        "eligible_mf_categories": ["EQUITY", "HYBRID", "DEBT"],
        "features": ["Lowest interest rate", "Flexible repayment", "No prepayment charges", "Online account management"],
    },
    {
        "product_name": "Silver Plan - Standard Loan",
        "product_code": "SILVER-001",
        "description": "Standard loan product with competitive rates for salaried professionals and small business owners.",
        "min_amount": 50_000,
        "max_amount": 5_000_000,
        "min_tenure_months": 3,
        "max_tenure_months": 48,
        "interest_rate": 12.0,
        "processing_fee_percentage": 1.5,
        "ltv_ratio": 55,
        "eligible_mf_categories": ["EQUITY", "HYBRID", "DEBT"],
        "features": ["Competitive rates", "Quick approval", "Minimal documentation", "EMI flexibility"],
    },
    {
        "product_name": "Bronze Plan - Quick Loan",
        "product_code": "BRONZE-001",
        "description": "Quick disbursement loan with flexible terms for urgent financial needs.",
        "min_amount": 25_000,
        "max_amount": 2_000_000,
        "min_tenure_months": 3,
        "max_tenure_months": 36,
        "interest_rate": 14.0,
        "processing_fee_percentage": 2.0,
        "ltv_ratio": 50,
        "eligible_mf_categories": ["EQUITY", "HYBRID"],
        "features": ["Instant approval", "Same day disbursement", "Minimal eligibility criteria", "Online application"],
    },
    {
        "product_name": "Flexi Loan - Overdraft Facility",
        "product_code": "FLEXI-001",
        "description": "Overdraft facility against mutual funds; interest charged only on the utilized amount.",
        "min_amount": 50_000,
        "max_amount": 7_500_000,
        "min_tenure_months": 12,
        "max_tenure_months": 60,
        "interest_rate": 11.5,
        "processing_fee_percentage": 1.25,
        "ltv_ratio": 60,
        "eligible_mf_categories": ["EQUITY", "HYBRID", "DEBT", "LIQUID"],
        "features": ["Pay interest only on used amount", "Withdraw anytime", "No foreclosure charges", "Auto-renewal facility"],
    },
    {
        "product_name": "Emergency Loan - Express",
        "product_code": "EXPRESS-001",
        "description": "Emergency loans for medical and other urgent needs with express approval.",
        "min_amount": 10_000,
        "max_amount": 1_000_000,
        "min_tenure_months": 3,
        "max_tenure_months": 24,
        "interest_rate": 15.0,
        "processing_fee_percentage": 2.5,
        "ltv_ratio": 45,
        "eligible_mf_categories": ["EQUITY", "DEBT"],
        "features": ["1-hour approval", "Medical emergency priority", "No collateral evaluation fee", "Grace period available"],
    },
]

PARTNER_DATA = {"partner_code": "DEMO-DSA", "partner_name": "Demo DSA Partner"}


async def _get_user(session, email: str):
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def seed(settings: Settings = default_settings) -> dict[str, int]:
    """Insert whatever demo rows are missing; returns how many were created per kind."""
    engine = build_engine(settings)
    await init_db(engine)
    session_factory = build_sessionmaker(engine)
    created = {"users": 0, "customers": 0, "products": 0, "collaterals": 0, "partners": 0}
    try:
        async with session_factory() as session:
            for data in STAFF_DATA:
                if await _get_user(session, data["email"]):
                    print(f"User {data['email']} already exists, skipping")
                    continue
                session.add(User(
                    id=new_id(),
                    email=data["email"],
                    password_hash=hash_password(data["password"], settings.bcrypt_rounds),
                    role=data["role"].value,
                    status=UserStatus.ACTIVE.value,
                ))
                created["users"] += 1
                print(f"Seeded {data['role'].value}: {data['email']} / {data['password']}")

            for data in CUSTOMERS_DATA:
                user = await _get_user(session, data["email"])
                if user is None:
                    user = User(
                        id=new_id(),
                        email=data["email"],
                        password_hash=hash_password(CUSTOMER_PASSWORD, settings.bcrypt_rounds),
                        role=UserRole.CUSTOMER.value,
                        status=UserStatus.ACTIVE.value,
                    )
                    session.add(user)
                    created["users"] += 1
                existing = await session.execute(
                    select(Customer).where(Customer.pan_number == data["pan_number"])
                )
                if existing.scalar_one_or_none():
                    print(f"Customer {data['pan_number']} already exists, skipping")
                    continue
                customer = Customer(
                    id=new_id(),
                    user_id=user.id,
                    customer_code=generate_customer_code(),
                    first_name=data["first_name"],
                    last_name=data["last_name"],
                    email=data["email"],
                    phone_number=data["phone_number"],
                    date_of_birth=data["date_of_birth"],
                    pan_number=data["pan_number"],
                    aadhaar_number=encrypt(data["aadhaar_number"], settings.encryption_key),
                    address=data["address"],
                    annual_income=data["annual_income"],
                    occupation=data["occupation"],
                    kyc_status=data["kyc_status"].value,
                    kyc_verified_at=(
                        datetime.now(timezone.utc) if data["kyc_status"] is KycStatus.VERIFIED else None
                    ),
                )
                session.add(customer)
                created["customers"] += 1
                for h in data["holdings"]:
                    session.add(Collateral(
                        id=new_id(),
                        customer_id=customer.id,
                        current_value=round_money(h["units"] * h["nav"]),
                        valuation_date=date.today(),
                        status=CollateralStatus.AVAILABLE.value,
                        **h,
                    ))
                    created["collaterals"] += 1
                print(f"Seeded customer: {data['first_name']} {data['last_name']} ({data['email']} / {CUSTOMER_PASSWORD})")
            await session.flush()

            for data in PRODUCTS_DATA:
                existing = await session.execute(
                    select(LoanProduct).where(LoanProduct.product_code == data["product_code"])
                )
                if existing.scalar_one_or_none():
                    print(f"Product {data['product_code']} already exists, skipping")
                    continue
                session.add(LoanProduct(id=new_id(), status=ProductStatus.ACTIVE.value, **data))
                created["products"] += 1
                print(f"Seeded product: {data['product_name']} @ {data['interest_rate']}%")

            existing = await session.execute(
                select(ApiPartner).where(ApiPartner.partner_code == PARTNER_DATA["partner_code"])
            )
            if existing.scalar_one_or_none() is None:
                partner = ApiPartner(
                    id=new_id(),
                    api_key=generate_api_key(),
                    status=PartnerStatus.ACTIVE.value,
                    ip_whitelist=[],
                    webhook_events=[],
                    **PARTNER_DATA,
                )
                session.add(partner)
                created["partners"] += 1
                print(f"Seeded API partner {partner.partner_name}, X-API-Key: {partner.api_key}")

            await session.commit()
    finally:
        await engine.dispose()
    print("Seed complete.")
    return created


if __name__ == "__main__":
    asyncio.run(seed())

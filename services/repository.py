"""
Storage access for the API. Wraps one AsyncSession per request; handlers and
services receive it explicitly through get_repository.
"""
from __future__ import annotations

from typing import Any, Optional, Sequence

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from database import get_db
from models import (
    ApiPartner,
    Collateral,
    Customer,
    Loan,
    LoanApplication,
    LoanCollateral,
    LoanProduct,
    User,
)
from models.enums import LoanStatus, PledgeStatus, ProductStatus


class Repository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def add(self, obj: Any) -> None:
        self.session.add(obj)

    async def flush(self) -> None:
        await self.session.flush()

    # users / customers

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).options(selectinload(User.customer)).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        result = await self.session.execute(
            select(Customer).options(selectinload(Customer.user)).where(Customer.id == customer_id)
        )
        return result.scalar_one_or_none()

    async def get_customer_for_user(self, user_id: str) -> Optional[Customer]:
        result = await self.session.execute(select(Customer).where(Customer.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_customer_by_pan(self, pan_number: str) -> Optional[Customer]:
        result = await self.session.execute(
            select(Customer).where(Customer.pan_number == pan_number.upper())
        )
        return result.scalar_one_or_none()

    async def list_customers(
        self, offset: int, limit: int, kyc_status: Optional[str] = None
    ) -> tuple[Sequence[Customer], int]:
        stmt = select(Customer)
        count_stmt = select(func.count(Customer.id))
        if kyc_status:
            stmt = stmt.where(Customer.kyc_status == kyc_status)
            count_stmt = count_stmt.where(Customer.kyc_status == kyc_status)
        total = (await self.session.execute(count_stmt)).scalar_one()
        result = await self.session.execute(
            stmt.order_by(Customer.created_at.desc()).offset(offset).limit(limit)
        )
        return result.scalars().all(), total

    # products

    async def get_product(self, product_id: str) -> Optional[LoanProduct]:
        return await self.session.get(LoanProduct, product_id)

    async def get_product_by_code(self, product_code: str) -> Optional[LoanProduct]:
        result = await self.session.execute(
            select(LoanProduct).where(LoanProduct.product_code == product_code)
        )
        return result.scalar_one_or_none()

    async def list_active_products(self) -> Sequence[LoanProduct]:
        result = await self.session.execute(
            select(LoanProduct)
            .where(LoanProduct.status == ProductStatus.ACTIVE.value)
            .order_by(LoanProduct.product_name)
        )
        return result.scalars().all()

    # applications

    def _application_query(self):
        return select(LoanApplication).options(
            selectinload(LoanApplication.loan_product),
            selectinload(LoanApplication.customer).selectinload(Customer.user),
        )

    async def get_application(self, application_id: str) -> Optional[LoanApplication]:
        result = await self.session.execute(
            self._application_query().where(LoanApplication.id == application_id)
        )
        return result.scalar_one_or_none()

    async def get_application_by_number(self, application_number: str) -> Optional[LoanApplication]:
        result = await self.session.execute(
            self._application_query().where(LoanApplication.application_number == application_number)
        )
        return result.scalar_one_or_none()

    async def list_applications(
        self,
        offset: int,
        limit: int,
        customer_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> tuple[Sequence[LoanApplication], int]:
        stmt = self._application_query()
        count_stmt = select(func.count(LoanApplication.id))
        if customer_id:
            stmt = stmt.where(LoanApplication.customer_id == customer_id)
            count_stmt = count_stmt.where(LoanApplication.customer_id == customer_id)
        if status:
            stmt = stmt.where(LoanApplication.status == status)
            count_stmt = count_stmt.where(LoanApplication.status == status)
        total = (await self.session.execute(count_stmt)).scalar_one()
        result = await self.session.execute(
            stmt.order_by(LoanApplication.created_at.desc()).offset(offset).limit(limit)
        )
        return result.scalars().all(), total

    # collateral

    async def get_collaterals(self, collateral_ids: list[str]) -> Sequence[Collateral]:
        if not collateral_ids:
            return []
        result = await self.session.execute(select(Collateral).where(Collateral.id.in_(collateral_ids)))
        return result.scalars().all()

    async def list_collaterals(
        self, customer_id: Optional[str] = None, status: Optional[str] = None
    ) -> Sequence[Collateral]:
        stmt = select(Collateral)
        if customer_id:
            stmt = stmt.where(Collateral.customer_id == customer_id)
        if status:
            stmt = stmt.where(Collateral.status == status)
        result = await self.session.execute(stmt.order_by(Collateral.created_at.desc()))
        return result.scalars().all()

    async def active_pledges_for_application(self, application_id: str) -> Sequence[LoanCollateral]:
        result = await self.session.execute(
            select(LoanCollateral).where(
                LoanCollateral.application_id == application_id,
                LoanCollateral.status == PledgeStatus.PLEDGED.value,
            )
        )
        return result.scalars().all()

    async def active_pledges_for_collaterals(self, collateral_ids: list[str]) -> Sequence[LoanCollateral]:
        result = await self.session.execute(
            select(LoanCollateral).where(
                LoanCollateral.collateral_id.in_(collateral_ids),
                LoanCollateral.status == PledgeStatus.PLEDGED.value,
            )
        )
        return result.scalars().all()

    # loans

    async def get_loan(self, loan_id: str) -> Optional[Loan]:
        return await self.session.get(Loan, loan_id)

    async def get_loan_for_application(self, application_id: str) -> Optional[Loan]:
        result = await self.session.execute(select(Loan).where(Loan.application_id == application_id))
        return result.scalar_one_or_none()

    async def list_loans(self, customer_id: Optional[str] = None) -> Sequence[Loan]:
        stmt = select(Loan)
        if customer_id:
            stmt = stmt.where(Loan.customer_id == customer_id)
        result = await self.session.execute(stmt.order_by(Loan.disbursed_at.desc()))
        return result.scalars().all()

    # partners

    async def get_partner_by_api_key(self, api_key: str) -> Optional[ApiPartner]:
        result = await self.session.execute(select(ApiPartner).where(ApiPartner.api_key == api_key))
        return result.scalar_one_or_none()

    # dashboard aggregates

    async def count_applications(self, customer_id: Optional[str] = None) -> int:
        stmt = select(func.count(LoanApplication.id))
        if customer_id:
            stmt = stmt.where(LoanApplication.customer_id == customer_id)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_active_loans(self, customer_id: Optional[str] = None) -> int:
        stmt = select(func.count(Loan.id)).where(Loan.status == LoanStatus.ACTIVE.value)
        if customer_id:
            stmt = stmt.where(Loan.customer_id == customer_id)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_customers(self) -> int:
        return (await self.session.execute(select(func.count(Customer.id)))).scalar_one()

    async def total_outstanding(self, customer_id: Optional[str] = None) -> float:
        stmt = select(
            func.coalesce(func.sum(Loan.outstanding_principal), 0),
            func.coalesce(func.sum(Loan.outstanding_interest), 0),
        ).where(Loan.status == LoanStatus.ACTIVE.value)
        if customer_id:
            stmt = stmt.where(Loan.customer_id == customer_id)
        principal, interest = (await self.session.execute(stmt)).one()
        return float(principal) + float(interest)

    async def total_pledged_value(self) -> float:
        stmt = select(func.coalesce(func.sum(LoanCollateral.pledge_value), 0)).where(
            LoanCollateral.status == PledgeStatus.PLEDGED.value
        )
        return float((await self.session.execute(stmt)).scalar_one())


async def get_repository(db: AsyncSession = Depends(get_db)) -> Repository:
    return Repository(db)

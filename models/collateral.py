from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from database import Base, utcnow
from models.enums import CollateralStatus, PledgeStatus


class Collateral(Base):
    """A mutual fund holding (one scheme in one folio) that can be pledged."""

    __tablename__ = "collaterals"

    id = Column(String(64), primary_key=True, index=True)
    customer_id = Column(String(64), ForeignKey("customers.id"), nullable=False, index=True)
    scheme_name = Column(String(256), nullable=False)
    isin = Column(String(12), nullable=True)
    folio_number = Column(String(64), nullable=False)
    amc_name = Column(String(256), nullable=True)
    category = Column(String(32), nullable=False)
    units = Column(Float, nullable=False)
    nav = Column(Float, nullable=False)
    current_value = Column(Float, nullable=False)
    valuation_date = Column(Date, nullable=True)
    status = Column(String(32), nullable=False, default=CollateralStatus.AVAILABLE.value, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="collaterals")


class LoanCollateral(Base):
    __tablename__ = "loan_collaterals"

    id = Column(String(64), primary_key=True, index=True)
    application_id = Column(String(64), ForeignKey("loan_applications.id"), nullable=False, index=True)
    collateral_id = Column(String(64), ForeignKey("collaterals.id"), nullable=False, index=True)
    # Market value at the time of pledge
    pledge_value = Column(Float, nullable=False)
    status = Column(String(32), nullable=False, default=PledgeStatus.PLEDGED.value, index=True)
    pledged_at = Column(DateTime(timezone=True), nullable=False)
    released_at = Column(DateTime(timezone=True), nullable=True)

    application = relationship("LoanApplication", back_populates="pledges")
    collateral = relationship("Collateral")

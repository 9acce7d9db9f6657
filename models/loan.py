from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String

from database import Base, utcnow
from models.enums import LoanStatus


class Loan(Base):
    __tablename__ = "loans"

    id = Column(String(64), primary_key=True, index=True)
    loan_number = Column(String(32), unique=True, nullable=False, index=True)
    application_id = Column(String(64), ForeignKey("loan_applications.id"), unique=True, nullable=False)
    customer_id = Column(String(64), ForeignKey("customers.id"), nullable=False, index=True)
    principal_amount = Column(Float, nullable=False)
    interest_rate = Column(Float, nullable=False)
    tenure_months = Column(Integer, nullable=False)
    emi_amount = Column(Float, nullable=False)
    outstanding_principal = Column(Float, nullable=False)
    outstanding_interest = Column(Float, nullable=False)
    status = Column(String(32), nullable=False, default=LoanStatus.ACTIVE.value, index=True)
    disbursed_at = Column(DateTime(timezone=True), nullable=False)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from database import Base, utcnow
from models.enums import ApplicationStatus


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id = Column(String(64), primary_key=True, index=True)
    application_number = Column(String(32), unique=True, nullable=False, index=True)
    customer_id = Column(String(64), ForeignKey("customers.id"), nullable=False, index=True)
    loan_product_id = Column(String(64), ForeignKey("loan_products.id"), nullable=False)
    requested_amount = Column(Float, nullable=False)
    approved_amount = Column(Float, nullable=True)
    tenure_months = Column(Integer, nullable=False)
    interest_rate = Column(Float, nullable=False)
    purpose_of_loan = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default=ApplicationStatus.DRAFT.value, index=True)
    # monthly_income, existing_emi, calculated_emi, total_interest, processing_fee, ltv, collateral_value
    application_data = Column(JSON, nullable=True)
    review_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_by_id = Column(String(64), nullable=True)
    reviewed_by_id = Column(String(64), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    approved_by_id = Column(String(64), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    disbursed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    customer = relationship("Customer")
    loan_product = relationship("LoanProduct")
    pledges = relationship("LoanCollateral", back_populates="application")

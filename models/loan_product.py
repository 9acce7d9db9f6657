from sqlalchemy import JSON, Column, DateTime, Float, Integer, String, Text

from database import Base, utcnow
from models.enums import ProductStatus


class LoanProduct(Base):
    __tablename__ = "loan_products"

    id = Column(String(64), primary_key=True, index=True)
    product_name = Column(String(256), nullable=False)
    product_code = Column(String(64), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    min_amount = Column(Float, nullable=False)
    max_amount = Column(Float, nullable=False)
    min_tenure_months = Column(Integer, nullable=False)
    max_tenure_months = Column(Integer, nullable=False)
    # Annual nominal rate, percent
    interest_rate = Column(Float, nullable=False)
    processing_fee_percentage = Column(Float, nullable=True)
    # Nominal maximum loan-to-value, percent; informational only
    ltv_ratio = Column(Float, nullable=True)
    eligible_mf_categories = Column(JSON, nullable=True)
    features = Column(JSON, nullable=True)
    status = Column(String(32), nullable=False, default=ProductStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

from sqlalchemy import JSON, Column, Date, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from database import Base, utcnow
from models.enums import KycStatus


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(64), primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    customer_code = Column(String(32), unique=True, nullable=False)
    first_name = Column(String(64), nullable=False)
    last_name = Column(String(64), nullable=False)
    email = Column(String(256), nullable=False)
    phone_number = Column(String(16), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    pan_number = Column(String(10), unique=True, nullable=False, index=True)
    # Fernet token, never the raw number
    aadhaar_number = Column(Text, nullable=True)
    address = Column(JSON, nullable=True)
    annual_income = Column(Float, nullable=True)
    occupation = Column(String(128), nullable=True)
    kyc_status = Column(String(32), nullable=False, default=KycStatus.PENDING.value, index=True)
    kyc_documents = Column(JSON, nullable=True)
    kyc_remarks = Column(Text, nullable=True)
    kyc_verified_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="customer")
    collaterals = relationship("Collateral", back_populates="customer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

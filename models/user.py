from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from database import Base, utcnow
from models.enums import UserRole, UserStatus


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, index=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(32), nullable=False, default=UserRole.CUSTOMER.value, index=True)
    status = Column(String(32), nullable=False, default=UserStatus.ACTIVE.value)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="user", uselist=False)

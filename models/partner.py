from sqlalchemy import JSON, Column, DateTime, String, Text

from database import Base, utcnow
from models.enums import PartnerStatus


class ApiPartner(Base):
    __tablename__ = "api_partners"

    id = Column(String(64), primary_key=True, index=True)
    partner_code = Column(String(64), unique=True, nullable=False)
    partner_name = Column(String(256), nullable=False)
    api_key = Column(String(128), unique=True, nullable=False, index=True)
    status = Column(String(32), nullable=False, default=PartnerStatus.ACTIVE.value)
    # Empty list means any address may call
    ip_whitelist = Column(JSON, nullable=True)
    webhook_url = Column(Text, nullable=True)
    webhook_events = Column(JSON, nullable=True)
    last_activity_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

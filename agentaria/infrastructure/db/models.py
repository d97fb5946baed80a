from sqlalchemy import Column, DateTime, String, text

from agentaria.infrastructure.db.base import Base


class SubscriberDetails(Base):
    """Account profile written at signup and read once by the onboarding wizard."""

    __tablename__ = "subscribers details"
    subscriber_id = Column(String(64), primary_key=True)
    subscriber_name = Column(String(200), default="")
    business_name = Column(String(200), default="")
    service_number = Column(String(32), nullable=True)
    # text "true"/"false", as the dashboard reads it
    is_onboarded = Column(String(8), default="false", server_default=text("'false'"))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

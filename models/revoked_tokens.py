from core.database import Base
from sqlalchemy import Column, DateTime, String, Text, Index


class RevokedToken(Base):
    """
    Access tokens signed out before their natural expiry.

    The raw bearer string is the primary key, so the insert itself is the
    "already revoked?" check. Rows past expires_at are swept.
    """
    __tablename__ = "revoked_tokens"

    #pk
    token = Column(Text, primary_key=True)

    # No FK: a record must outlive the user it belonged to until it expires
    user_id = Column(String(36), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_revoked_tokens_expires_at", "expires_at"),
    )

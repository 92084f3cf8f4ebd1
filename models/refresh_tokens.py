from core.database import Base
from sqlalchemy import Column, String, ForeignKey
from models.mixins import CreatedAtMixin

class RefreshToken(Base, CreatedAtMixin):
    """
    Stores the single live refresh token of each user.

    Keyed by user so a new sign-in overwrites the previous record. Only a
    SHA-256 digest of the token is kept.
    """
    __tablename__ = "refresh_tokens"

    #pk
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    token_hash = Column(String(64), nullable=False)

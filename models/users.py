import enum
import uuid
from core.database import Base
from sqlalchemy import Column, String, Enum
from models.mixins import CreatedAtMixin


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base, CreatedAtMixin):
    """Credential record. Owned by the credential store."""
    __tablename__ = "users"

    #pk
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    email = Column(String(320), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(Role, values_callable=lambda e: [m.value for m in e]),
                  default=Role.USER, nullable=False)

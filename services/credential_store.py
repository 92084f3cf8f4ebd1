from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from core.exceptions import EmailAlreadyRegistered
from models.users import User, Role
from models.records import CredentialRecord
from utils.store import store_session, SessionFactory
from utils.logger import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.lower().strip()


class CredentialStore:
    """Lookup and lifecycle of {email, hashed_password, id, role} records."""

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def find_by_email(self, email: str) -> Optional[CredentialRecord]:
        with store_session(self._session_factory, "credentials.find_by_email") as db:
            row = db.scalars(
                select(User).where(User.email == normalize_email(email)).limit(1)
            ).first()
            return CredentialRecord.from_row(row) if row else None

    def find_by_id(self, user_id: str) -> Optional[CredentialRecord]:
        with store_session(self._session_factory, "credentials.find_by_id") as db:
            row = db.get(User, user_id)
            return CredentialRecord.from_row(row) if row else None

    def create(self, email: str, hashed_password: str, role: Role = Role.USER) -> str:
        """Insert a credential and return its id. Email must be unused."""
        with store_session(self._session_factory, "credentials.create") as db:
            model = User(
                email=normalize_email(email),
                hashed_password=hashed_password,
                role=role
            )
            db.add(model)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                logger.warning(
                    "Registration attempt with existing email",
                    extra={"email": email}
                )
                raise EmailAlreadyRegistered() from exc

            return model.id

    def delete(self, user_id: str) -> bool:
        with store_session(self._session_factory, "credentials.delete") as db:
            model = db.get(User, user_id)
            if model is None:
                return False
            db.delete(model)
            db.commit()
            return True

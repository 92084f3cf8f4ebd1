from datetime import datetime, timezone
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from core.exceptions import AlreadyRevoked
from models.revoked_tokens import RevokedToken
from models.records import RevocationRecord
from utils.store import store_session, SessionFactory
from utils.logger import get_logger

logger = get_logger(__name__)


class RevocationStore:
    """
    Denylist of access tokens signed out before their natural expiry.

    add() is a single INSERT against the primary key, so of two concurrent
    revocations of the same token exactly one commits.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def add(self, token: str, expires_at: datetime, user_id: str) -> RevocationRecord:
        with store_session(self._session_factory, "revocations.add") as db:
            model = RevokedToken(
                token=token,
                user_id=user_id,
                expires_at=expires_at.astimezone(timezone.utc)
            )
            db.add(model)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise AlreadyRevoked() from exc

            return RevocationRecord.from_row(model)

    def is_revoked(self, token: str) -> bool:
        with store_session(self._session_factory, "revocations.is_revoked") as db:
            found = db.scalar(select(RevokedToken.token).where(RevokedToken.token == token))
            return found is not None

    def purge_expired(self, now: datetime) -> int:
        """
        Delete every record whose expires_at is before `now`.

        One DELETE, one commit: a record is either gone or untouched. Records
        inserted while this runs may survive until the next sweep.

        Returns:
            Number of records removed
        """
        cutoff = now.astimezone(timezone.utc)
        with store_session(self._session_factory, "revocations.purge_expired") as db:
            result = db.execute(delete(RevokedToken).where(RevokedToken.expires_at < cutoff))
            db.commit()

        if result.rowcount:
            logger.info("Purged expired revocations", extra={"purged": result.rowcount})
        return result.rowcount

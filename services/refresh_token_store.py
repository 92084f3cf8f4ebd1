import hashlib
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from models.refresh_tokens import RefreshToken
from models.records import RefreshTokenRecord
from utils.store import store_session, SessionFactory


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class RefreshTokenStore:
    """
    One hashed refresh token per user.

    put() overwrites whatever the user had before, so only the most recent
    sign-in's refresh token matches the stored hash.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def put(self, user_id: str, refresh_token: str) -> None:
        token_hash = hash_token(refresh_token)
        now = datetime.now(timezone.utc)

        with store_session(self._session_factory, "refresh_tokens.put") as db:
            model = db.get(RefreshToken, user_id)
            if model is None:
                db.add(RefreshToken(user_id=user_id, token_hash=token_hash, created_at=now))
            else:
                model.token_hash = token_hash
                model.created_at = now

            try:
                db.commit()
            except IntegrityError:
                # A concurrent sign-in inserted first; overwrite it (last write wins)
                db.rollback()
                result = db.execute(
                    update(RefreshToken)
                    .where(RefreshToken.user_id == user_id)
                    .values(token_hash=token_hash, created_at=now)
                )
                if result.rowcount == 0:
                    raise
                db.commit()

    def get(self, user_id: str) -> Optional[RefreshTokenRecord]:
        with store_session(self._session_factory, "refresh_tokens.get") as db:
            model = db.get(RefreshToken, user_id)
            return RefreshTokenRecord.from_row(model) if model else None

    def delete(self, user_id: str) -> None:
        """Remove the user's record. Deleting a missing record is a no-op."""
        with store_session(self._session_factory, "refresh_tokens.delete") as db:
            db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
            db.commit()

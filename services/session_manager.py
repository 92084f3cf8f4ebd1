from datetime import datetime, timezone
from typing import Optional
from fastapi import BackgroundTasks
from core.exceptions import (
    InvalidCredentials, UserNotFound, InvalidToken, TokenError, Unauthenticated
)
from models.records import CredentialRecord
from models.users import Role
from services.credential_store import CredentialStore
from services.refresh_token_store import RefreshTokenStore
from services.revocation_store import RevocationStore
from services.token_service import TokenCodec, TokenClaims, TokenPair
from utils.hashing import PasswordVerifier
from utils.logger import get_logger

logger = get_logger(__name__)


class SessionManager:
    """
    Sign-in, sign-out and the per-request token gate.

    Built once at startup with every collaborator injected. Holds no mutable
    state of its own; each call's steps run in order against the stores.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        passwords: PasswordVerifier,
        codec: TokenCodec,
        refresh_tokens: RefreshTokenStore,
        revocations: RevocationStore,
    ):
        self.credentials = credentials
        self.passwords = passwords
        self.codec = codec
        self.refresh_tokens = refresh_tokens
        self.revocations = revocations

    def register(self, email: str, password: str, role: Role = Role.USER) -> CredentialRecord:
        user_id = self.credentials.create(email, self.passwords.hash(password), role)

        logger.info("User registered", extra={"user_id": user_id})

        return self.credentials.find_by_id(user_id)

    def sign_in(self, email: str, password: str) -> TokenPair:
        """
        Flow:
        1. Look up the credential by email
        2. Verify the password
        3. Issue access + refresh tokens
        4. Store the refresh token (replaces the user's previous one)

        Nothing is persisted unless every step succeeds.
        """
        user = self.credentials.find_by_email(email)
        if user is None:
            logger.warning("Login failed - user not found", extra={"email": email})
            raise UserNotFound()

        if not self.passwords.verify(password, user.hashed_password):
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "email": email}
            )
            raise InvalidCredentials()

        pair = self.codec.issue_pair(user.id, user.email)
        self.refresh_tokens.put(user.id, pair.refresh_token)

        logger.info("User signed in", extra={"user_id": user.id})

        return pair

    def sign_out(self, access_token: str, background: Optional[BackgroundTasks] = None) -> None:
        """
        Revoke an access token and drop the user's refresh token.

        The expired-revocation sweep runs afterwards: queued on `background`
        when given, inline otherwise. Its failure never fails the sign-out.
        """
        if not isinstance(access_token, str) or not access_token.strip():
            raise InvalidToken()

        claims = self.codec.verify(access_token)

        self.revocations.add(access_token, claims.expires_at, claims.subject)
        self.refresh_tokens.delete(claims.subject)

        logger.info(
            "User signed out",
            extra={"user_id": claims.subject, "jti": claims.jti}
        )

        if background is not None:
            background.add_task(self.purge_expired_quietly)
        else:
            self.purge_expired_quietly()

    def purge_expired_quietly(self) -> int:
        try:
            return self.revocations.purge_expired(datetime.now(timezone.utc))
        except Exception:
            logger.exception("Purging expired revocations failed")
            return 0

    def authenticate(self, access_token: Optional[str]) -> TokenClaims:
        """Gate for protected requests. Every failure is Unauthenticated."""
        if not access_token:
            raise Unauthenticated("No token provided")

        try:
            claims = self.codec.verify(access_token)
        except TokenError as exc:
            logger.debug("Token rejected", extra={"reason": exc.message})
            raise Unauthenticated() from exc

        if self.revocations.is_revoked(access_token):
            logger.warning("Revoked token presented", extra={"user_id": claims.subject})
            raise Unauthenticated("Token is revoked. Please login again.")

        return claims

    def fetch_user(self, user_id: Optional[str] = None, email: Optional[str] = None) -> CredentialRecord:
        """By id when given, otherwise by email."""
        if user_id:
            user = self.credentials.find_by_id(user_id)
        elif email:
            user = self.credentials.find_by_email(email)
        else:
            raise ValueError("Either user_id or email must be provided")

        if user is None:
            raise UserNotFound()
        return user

    def remove_user(self, user_id: str) -> None:
        self.refresh_tokens.delete(user_id)
        if not self.credentials.delete(user_id):
            raise UserNotFound()

        logger.info("User removed", extra={"user_id": user_id})

import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Mapping, Optional
from jose import jwt, JWTError, ExpiredSignatureError
from jose.exceptions import JWTClaimsError
from core.config import settings
from core.exceptions import MalformedToken, InvalidSignature, TokenExpired
from utils.logger import get_logger

logger = get_logger(__name__)

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    email: str
    issued_at: datetime
    expires_at: datetime
    token_type: str
    jti: str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenCodec:
    """
    Issues and verifies signed access/refresh tokens.

    Signing keys are a {kid: secret} set. New tokens are signed with the
    active kid; verification picks the key named in the token header, so
    retired keys keep working until removed from the set.
    """

    def __init__(
        self,
        keys: Mapping[str, str],
        active_kid: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        if active_kid not in keys:
            raise ValueError(f"Active key id '{active_kid}' is not in the key set")
        if refresh_ttl <= access_ttl:
            raise ValueError("Refresh token lifetime must exceed access token lifetime")

        self._keys = dict(keys)
        self._active_kid = active_kid
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, config=settings) -> "TokenCodec":
        return cls(
            keys=config.signing_keys,
            active_kid=config.SECRET_KEY_ID,
            algorithm=config.ALGORITHM,
            access_ttl=timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def _issue(self, subject: str, email: str, token_type: str, expires_delta: timedelta) -> str:
        now = datetime.now(timezone.utc)

        payload = {
            "sub": str(subject),
            "email": email,
            "type": token_type,
            # Unique per token, so two sign-ins in the same second differ
            "jti": secrets.token_urlsafe(16),
            "iat": now,
            "exp": now + expires_delta
        }

        return jwt.encode(
            payload,
            self._keys[self._active_kid],
            algorithm=self._algorithm,
            headers={"kid": self._active_kid}
        )

    def issue_access(self, subject: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
        """
        Creates a JWT access token.

        Args:
            subject: User's ID
            email: User's email
            expires_delta: Token lifetime (default: configured access lifetime)

        Returns:
            JWT access token string
        """
        return self._issue(subject, email, ACCESS, self.access_ttl if expires_delta is None else expires_delta)

    def issue_refresh(self, subject: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
        """Creates a JWT refresh token. Same claims as an access token, longer lifetime."""
        return self._issue(subject, email, REFRESH, self.refresh_ttl if expires_delta is None else expires_delta)

    def issue_pair(self, subject: str, email: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access(subject, email),
            refresh_token=self.issue_refresh(subject, email),
        )

    def verify(self, token: str, expected_type: str = ACCESS) -> TokenClaims:
        """
        Validates signature, expiry and claims.

        Raises:
            MalformedToken: not a JWT, undecodable segments, bad claims, or wrong token type
            InvalidSignature: tampered token, unexpected algorithm or unknown signing key
            TokenExpired: valid signature, past its expiry
        """
        # Structure first, so a signature failure below is only ever a signature failure
        try:
            header = jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise MalformedToken() from exc

        kid = header.get("kid", self._active_kid)
        if not isinstance(kid, str):
            raise MalformedToken("Invalid key id")

        if header.get("alg") != self._algorithm:
            raise InvalidSignature("Unexpected signing algorithm")

        key = self._keys.get(kid)
        if key is None:
            logger.warning("Token signed with unknown key id", extra={"kid": kid})
            raise InvalidSignature("Unknown signing key")

        try:
            payload = jwt.decode(token, key, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except JWTClaimsError as exc:
            # Signature checked out but a registered claim has the wrong shape
            raise MalformedToken("Invalid token claims") from exc
        except JWTError as exc:
            raise InvalidSignature() from exc

        subject = payload.get("sub")
        email = payload.get("email")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        token_type = payload.get("type")
        jti = payload.get("jti")

        if not all([subject, email, issued_at, expires_at, token_type, jti]):
            raise MalformedToken("Invalid token payload")

        if token_type != expected_type:
            raise MalformedToken("Invalid token type")

        return TokenClaims(
            subject=subject,
            email=email,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
            token_type=token_type,
            jti=jti,
        )

from passlib.context import CryptContext
from passlib.exc import UnknownHashError
from core.config import settings

# Bcrypt has a 72-byte limit
BCRYPT_MAX_BYTES = 72


def _truncate(password: str) -> str:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")


class PasswordVerifier:
    """Salted bcrypt hashing. Holds no state beyond the hashing context."""

    def __init__(self, rounds: int = settings.BCRYPT_ROUNDS):
        self._context = CryptContext(schemes=['bcrypt'], deprecated='auto',
                                     bcrypt__default_rounds=rounds)

    def hash(self, plaintext: str) -> str:
        return self._context.hash(_truncate(plaintext))

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Constant-time check. False on mismatch; ValueError if `hashed` is
        not a recognisable hash.
        """
        if not isinstance(hashed, str) or not hashed:
            raise ValueError("Stored password hash is empty")
        try:
            return self._context.verify(_truncate(plaintext), hashed)
        except UnknownHashError as exc:
            raise ValueError("Stored password hash is malformed") from exc

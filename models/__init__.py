from models.users import User, Role
from models.refresh_tokens import RefreshToken
from models.revoked_tokens import RevokedToken

__all__ = ["User", "Role", "RefreshToken", "RevokedToken"]

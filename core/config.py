from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./auth.db"
    SECRET_KEY: str
    SECRET_KEY_ID: str = "primary"
    # Retired signing keys still accepted for verification, keyed by kid
    ADDITIONAL_SECRET_KEYS: dict[str, str] = {}
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    @property
    def signing_keys(self) -> dict[str, str]:
        keys = dict(self.ADDITIONAL_SECRET_KEYS)
        keys[self.SECRET_KEY_ID] = self.SECRET_KEY
        return keys


settings = Settings()

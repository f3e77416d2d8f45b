from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite:///board.db", env="DATABASE_URL")
    api_title: str = Field("Community Board API", env="API_TITLE")
    api_version: str = Field("1.0.0", env="API_VERSION")
    access_token_expire_minutes: int = Field(30, env="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_minutes: int = Field(60 * 24 * 7, env="REFRESH_TOKEN_EXPIRE_MINUTES")
    jwt_secret: str = Field("change-me-community-board-jwt-secret", env="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", env="JWT_ALGORITHM")
    bcrypt_rounds: int = Field(12, env="BCRYPT_ROUNDS")
    auth_rate_limit: str = Field("5/minute", env="AUTH_RATE_LIMIT")
    rate_limit_enabled: bool = Field(True, env="RATE_LIMIT_ENABLED")
    # Re-check that the token's member still exists on every request
    token_identity_lookup: bool = Field(False, env="TOKEN_IDENTITY_LOOKUP")


settings = Settings()

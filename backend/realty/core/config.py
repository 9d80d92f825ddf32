from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # A shared .env may hold keys for the hosted backend's other tools; ignore them.
    model_config = SettingsConfigDict(env_file=(".env", "../.env"), case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "RealtyListings"
    ENVIRONMENT: str = "development"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str = ""
    POSTGRES_SERVER: str = "db"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "realty"

    BACKEND_CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"])
    ALLOWED_HOSTS: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    ENABLE_API_DOCS: bool = False

    # "outer_join" issues one backend query; "two_step" fetches properties with
    # visits first and then everything outside that id set.
    LISTING_FETCH_STRATEGY: Literal["outer_join", "two_step"] = "outer_join"
    # Upper bound on how long a cached listing may be reused within one request.
    LISTING_CACHE_TTL_SECONDS: float = 30.0

    ADDRESS_LOOKUP_URL: str = "https://viacep.com.br/ws/{postal_code}/json/"
    ADDRESS_LOOKUP_TIMEOUT_SECONDS: float = 10.0

    STORAGE_DIR: str = "storage"
    STORAGE_PUBLIC_URL: str = "/storage"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["standard", "json"] = "standard"

    @model_validator(mode="after")
    def _prod_guards(self):
        if self.ENVIRONMENT.lower() == "production":
            if self.ENABLE_API_DOCS:
                raise ValueError("ENABLE_API_DOCS must be false in production")
            if any(h == "*" for h in self.ALLOWED_HOSTS):
                raise ValueError('ALLOWED_HOSTS must not contain "*" in production')
        else:
            if not self.ALLOWED_HOSTS:
                self.ALLOWED_HOSTS = ["*"]
        return self

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()

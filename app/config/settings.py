import json
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_GATEWAY_URLS = [
    "https://gateway.pinata.cloud/ipfs/",
    "https://ipfs.io/ipfs/",
    "https://cloudflare-ipfs.com/ipfs/",
]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "notices"
    db_username: str = "notices"
    db_password: str = "secret"

    gateway_urls: Annotated[list[str], NoDecode] = list(DEFAULT_GATEWAY_URLS)
    gateway_timeout_seconds: float = 10.0

    recovery_item_delay_seconds: float = 1.0
    recovery_batch_limit: int = 10
    recovery_force: bool = False
    recovery_uploaded_by: str = "recovery"
    recovery_ensure_schema: bool = True

    @field_validator("gateway_urls", mode="before")
    @classmethod
    def _split_gateway_urls(cls, value: object) -> object:
        """Accept a comma-separated string or a JSON list from the environment."""
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                return json.loads(stripped)
            return stripped.split(",")
        return value

    @field_validator("gateway_urls")
    @classmethod
    def _normalize_gateway_urls(cls, value: list[str]) -> list[str]:
        urls = [url.strip() for url in value if url.strip()]
        return [url if url.endswith("/") else f"{url}/" for url in urls]

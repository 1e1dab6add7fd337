"""
Client Configuration
====================
Settings and credentials for the LogicMonitor RPC client.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from logicmonitor_rpc.errors import ValidationError


class Settings(BaseSettings):
    """Client settings loaded from LM_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials
    company: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    # Endpoint
    service_domain: str = "logicmonitor.com"
    rpc_path: str = "santaba/rpc"
    timeout: float = Field(default=10.0, gt=0)
    user_agent: str = "logicmonitor-rpc-python/0.1.0"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"
    log_secrets: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@dataclass(frozen=True)
class Credentials:
    """
    Authentication triple sent with every request.

    Attributes:
        tenant: Company (portal) name, also the endpoint subdomain
        username: Account user name
        secret: Account password
    """

    tenant: str
    username: str
    secret: str

    def __post_init__(self) -> None:
        for name in ("tenant", "username", "secret"):
            if not getattr(self, name):
                raise ValidationError(f"'{name}' is required")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Credentials":
        """Build credentials from LM_COMPANY, LM_USERNAME and LM_PASSWORD."""
        settings = settings or get_settings()
        return cls(
            tenant=settings.company or "",
            username=settings.username or "",
            secret=settings.password or "",
        )

    def __repr__(self) -> str:
        return f"Credentials(tenant={self.tenant!r}, username={self.username!r}, secret='***')"

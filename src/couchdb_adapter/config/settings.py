"""Centralized configuration settings for the CouchDB adapter."""

from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration settings loaded from environment variables."""

    # CouchDB Server
    couchdb_url: str = Field(
        default="http://localhost:5984",
        description="Server URL used when the adapter is built without a URI",
        validation_alias="COUCHDB_URL",
    )
    couchdb_user: Optional[str] = Field(
        default=None,
        description="User for HTTP basic auth",
        validation_alias="COUCHDB_USER",
    )
    couchdb_password: Optional[str] = Field(
        default=None,
        description="Password for COUCHDB_USER",
        validation_alias="COUCHDB_PASSWORD",
    )

    # Driver Behaviour
    couchdb_timeout: float = Field(
        default=30.0,
        description="Total HTTP request timeout in seconds",
        validation_alias="COUCHDB_TIMEOUT",
    )
    couchdb_page_size: int = Field(
        default=200,
        description="Documents per _find page when no limit is given",
        validation_alias="COUCHDB_PAGE_SIZE",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def has_credentials(self) -> bool:
        """Check if basic auth credentials are configured."""
        return bool(self.couchdb_user and self.couchdb_password)

    def driver_options(self) -> Dict[str, Any]:
        """Keyword options for the CouchDB driver constructor."""
        opts: Dict[str, Any] = {"timeout": self.couchdb_timeout}
        if self.has_credentials():
            opts["user"] = self.couchdb_user
            opts["password"] = self.couchdb_password
        return opts


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()  # type: ignore[call-arg]

"""Configuration management for the flood notice notifier."""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so BaseSettings can pick values up seamlessly.
load_dotenv()

DEFAULT_CATALOG_ENDPOINT = (
    "https://datacenter.disaster.go.th/apiv1/apps/minisite_datacenter/203/sitedownload/10971/23149"
)
DEFAULT_CARD_TITLE = "[New] การประกาศเขตอุทกภัย"


class Settings(BaseSettings):
    """App configuration derived from environment variables."""

    catalog_endpoint: str = Field(DEFAULT_CATALOG_ENDPOINT, alias="CATALOG_ENDPOINT")
    authority_host: str = Field("https://login.microsoftonline.com", alias="AUTHORITY_HOST")
    graph_base_url: str = Field("https://graph.microsoft.com/v1.0", alias="GRAPH_BASE_URL")

    registry_db: Path = Field(Path("sqlite.db"), alias="REGISTRY_DB")
    secrets_file: Path = Field(Path("secrets.json"), alias="SECRETS_FILE")
    credentials_file: Path = Field(Path("credentials.json"), alias="CREDENTIALS_FILE")

    http_timeout_seconds: float = Field(30.0, alias="HTTP_TIMEOUT_SECONDS")
    notification_card_title: str = Field(DEFAULT_CARD_TITLE, alias="NOTIFICATION_CARD_TITLE")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: Path | None = Field(Path("app.log"), alias="LOG_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("catalog_endpoint", "authority_host", "graph_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value):
        if isinstance(value, str):
            stripped = value.strip().rstrip("/")
            if not stripped:
                raise ValueError("URL settings must not be empty.")
            return stripped
        return value

    @field_validator("http_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be positive.")
        return value

    def token_url(self, tenant_id: str) -> str:
        """Token endpoint of the identity provider for one tenant."""
        return f"{self.authority_host}/{tenant_id}/oauth2/v2.0/token"

    def chat_messages_url(self, chat_id: str) -> str:
        return f"{self.graph_base_url}/chats/{chat_id}/messages"

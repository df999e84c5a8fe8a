"""Configuration module using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

class DynamoConfig(BaseModel):
    # Table layout
    table_name: str = Field(default="merchant-ledger", description="DynamoDB table name")
    settlement_index_name: str = Field(
        default="settlement-index", description="GSI keyed by settlement merchant id"
    )
    # Client
    region_name: str = Field(default="eu-west-1", description="AWS region")
    endpoint_url: str | None = Field(
        default=None, description="Override endpoint (e.g. DynamoDB Local)"
    )
    connect_timeout: float = Field(default=2.0, description="Connect timeout in seconds")
    read_timeout: float = Field(default=5.0, description="Read timeout in seconds")

class PagingConfig(BaseModel):
    default_page_size: int = Field(
        default=10, description="Page size used when the caller gives no limit"
    )
    max_page_size: int = Field(
        default=100, description="Largest page a caller may request"
    )

class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Record store
    store_backend: Literal["memory", "dynamodb"] = Field(
        default="memory", description="Record store backend (memory or dynamodb)"
    )

    dynamodb: DynamoConfig = DynamoConfig()

    paging: PagingConfig = PagingConfig()

    # Paths
    data_dir: Path = Field(default=Path("data"), description="Directory for data files")
    audit_log_dir: Path = Field(default=Path("logs"), description="Directory for audit logs")
    log_level: str = Field(default="INFO", description="Logging level")


# Global settings instance
settings = Settings()

"""
Configuration management for the developer-portal customer lifecycle engine.

Uses Pydantic Settings for type-safe configuration with multiple sources:
- Environment variables (highest priority)
- .env file
- Defaults (lowest priority)

The customer table options keep the environment names the portal backend has
always used (UserPoolId, PreLoginAccountsTableName, CustomersTableName).
"""

import logging
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomerTablesConfig(BaseSettings):
    """Identity pool and table names consumed by the customer workflows."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    user_pool_id: str = Field(
        default="",
        validation_alias=AliasChoices("UserPoolId", "user_pool_id"),
        description="Cognito user pool holding portal users",
    )
    pre_login_accounts_table_name: str = Field(
        default="",
        validation_alias=AliasChoices("PreLoginAccountsTableName", "pre_login_accounts_table_name"),
        description="Legacy staging table keyed by UserId",
    )
    customers_table_name: str = Field(
        default="",
        validation_alias=AliasChoices("CustomersTableName", "customers_table_name"),
        description="Canonical customer table keyed by Id",
    )

    @property
    def missing_options(self) -> list[str]:
        """Environment names of options that are still unset."""
        missing = []
        if not self.user_pool_id:
            missing.append("UserPoolId")
        if not self.pre_login_accounts_table_name:
            missing.append("PreLoginAccountsTableName")
        if not self.customers_table_name:
            missing.append("CustomersTableName")
        return missing


class AWSConfig(BaseSettings):
    """boto3 client configuration shared by DynamoDB, Cognito and API Gateway."""

    model_config = SettingsConfigDict(env_prefix="AWS_", env_file=".env", env_file_encoding="utf-8")

    region: str = Field(default="us-east-1", description="AWS region for all clients")
    endpoint_url: str | None = Field(
        default=None, description="Override endpoint (LocalStack, DynamoDB Local)"
    )

    # Timeouts and retries belong to the client, not the workflows
    max_attempts: int = Field(default=3, ge=1, le=10)
    connect_timeout_seconds: int = Field(default=5, ge=1)
    read_timeout_seconds: int = Field(default=10, ge=1)


class LoggingConfig(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_")

    # Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Output format
    json_output: bool = Field(
        default=True, description="Use JSON output (True for production, False for development)"
    )

    # Console colorization (only for non-JSON output)
    colorized: bool = Field(
        default=False, description="Colorize console output (only for development)"
    )

    # Service metadata (injected into all logs)
    service_name: str = Field(
        default="devportal-customers", description="Service name for log aggregation"
    )
    service_version: str = Field(default="0.1.0", description="Service version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Deployment environment"
    )


class Settings(BaseSettings):
    """Root configuration for the customer lifecycle engine."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    tables: CustomerTablesConfig = Field(default_factory=CustomerTablesConfig)
    aws: AWSConfig = Field(default_factory=AWSConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def validate_configuration(self) -> None:
        """
        Validate cross-field constraints and log warnings.
        Called at application startup.
        """
        missing = self.tables.missing_options
        if missing:
            logging.warning(
                f"Customer lifecycle options not configured: {', '.join(missing)}"
            )

        if (
            self.tables.customers_table_name
            and self.tables.customers_table_name == self.tables.pre_login_accounts_table_name
        ):
            logging.warning(
                "CustomersTableName and PreLoginAccountsTableName point at the same table"
            )


# Global settings instance (lazy-loaded)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get global settings instance (singleton pattern).

    Returns:
        Settings: Application configuration
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.validate_configuration()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None

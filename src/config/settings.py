"""
Module: settings.py
Description: Broker configuration using pydantic-settings.

Configures all broker settings from environment variables with
validation and defaults. Supports .env files for local development.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Broker settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="SQS Service Broker", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    # AWS settings
    aws_region: str = Field(default="eu-west-2", description="AWS region")
    stage: str = Field(default="dev", description="Deployment stage")
    control_plane_timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Connect/read timeout in seconds for CloudFormation calls"
    )

    # Stack settings
    resource_prefix: str = Field(
        default="paas-sqs-broker-",
        description="Prefix prepended to the instance ID to form the stack name"
    )
    deploy_env: str = Field(
        default="dev",
        description="Value of the Environment tag on provisioned queues"
    )

    # Broker API settings
    broker_username: str = Field(default="broker", description="Basic auth username")
    broker_password: str = Field(default="", description="Basic auth password")

    # Catalog settings
    service_id: str = Field(
        default="uuid-1",
        description="Catalog ID of the SQS service"
    )
    standard_plan_id: str = Field(
        default="uuid-2",
        description="Catalog ID of the standard queue plan"
    )
    fifo_plan_id: str = Field(
        default="uuid-3",
        description="Catalog ID of the FIFO queue plan"
    )

    @field_validator('resource_prefix')
    @classmethod
    def validate_resource_prefix(cls, v: str) -> str:
        """Validate the prefix can start a CloudFormation stack name."""
        if not v or not isinstance(v, str):
            raise ValueError("resource_prefix must be a non-empty string")

        # Stack names start with a letter and contain only letters, digits and hyphens
        if not re.match(r'^[a-zA-Z][a-zA-Z0-9-]*$', v):
            raise ValueError(
                "resource_prefix must start with a letter and contain only letters, numbers, and hyphens"
            )

        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()


# Global settings instance
settings = Settings()

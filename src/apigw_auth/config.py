"""
Settings for the annotation pass, read from environment variables.

Values come from ``APIGW_AUTH_*`` variables and an optional ``.env`` file.
Defaults are the literals the API Gateway integration expects, so
``Settings()`` works without any environment at all.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("apigw_auth.config")

AWS_IAM = "AWS_IAM"
CALLER_CREDENTIALS_ARN = "arn:aws:iam::*:user/*"


class Settings(BaseSettings):
    """Annotation literals and logging level.

    E.g. ``caller_credentials_arn`` reads from APIGW_AUTH_CALLER_CREDENTIALS_ARN.
    """

    model_config = SettingsConfigDict(
        env_prefix="APIGW_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    authorization_type: str = AWS_IAM
    caller_credentials_arn: str = CALLER_CREDENTIALS_ARN
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v!r}")
        return level


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    if settings.authorization_type != AWS_IAM:
        logger.warning("AuthorizationType overridden to %r", settings.authorization_type)
    return settings

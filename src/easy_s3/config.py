"""
Config for easy_s3.

This module creates a single instance of the S3Settings class,
which other modules can import directly to access configuration settings.

The settings are defined by environment variables, the defaults are only placeholders
so a missing value is easy to spot.
"""

import os
from dataclasses import dataclass

from pydantic import SecretStr

from easy_s3.constants import DEFAULT_MAX_DOWNLOAD_WORKERS

ACCESS_KEY_ENV_NAME = "EASY_S3_ACCESS_KEY"
SECRET_KEY_ENV_NAME = "EASY_S3_SECRET_KEY"
BUCKET_NAME_ENV_NAME = "EASY_S3_BUCKET_NAME"


@dataclass
class S3Settings:
    """
    S3 configuration settings.

    NOTE: Do not create an instance of this class yourself,
    import the 'settings' instance created at this module's load time.
    """

    endpoint_url: str = os.getenv("EASY_S3_ENDPOINT_URL", "NOT_SET")
    access_key: SecretStr = SecretStr(os.getenv(ACCESS_KEY_ENV_NAME, "NOT_SET"))
    secret_key: SecretStr = SecretStr(os.getenv(SECRET_KEY_ENV_NAME, "NOT_SET"))
    bucket_name: str = os.getenv(BUCKET_NAME_ENV_NAME, "NOT_SET")
    max_download_workers: int = int(os.getenv("EASY_S3_MAX_DOWNLOAD_WORKERS", DEFAULT_MAX_DOWNLOAD_WORKERS))
    log_level: str = os.getenv("EASY_S3_LOG_LEVEL", "INFO").upper()

    def __post_init__(self):
        if self.max_download_workers < 1:
            raise ValueError(
                f"EASY_S3_MAX_DOWNLOAD_WORKERS must be at least 1, got: {self.max_download_workers}"
            )


settings = S3Settings()

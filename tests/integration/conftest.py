"""
Spins up the MinIO container for the duration of the integration test session, and tears it down afterwards.
"""

import pytest

from easy_s3.service import S3Service
from tests.helpers.minio_setup import (
    MINIO_FAKE_ACCESS_KEY,
    MINIO_FAKE_SECRET_KEY,
    MINIO_URL,
    setup_minio_data,
    start_minio,
    stop_minio,
)


@pytest.fixture(scope="session", autouse=True)
def minio():
    start_minio()
    setup_minio_data()
    yield
    stop_minio()


@pytest.fixture(scope="session")
def CONSTANTS():
    return {
        "MINIO_URL": MINIO_URL,
        "ACCESS_KEY": MINIO_FAKE_ACCESS_KEY,
        "SECRET_KEY": MINIO_FAKE_SECRET_KEY,
        "BUCKET": "bucket1",
        "EMPTY_BUCKET": "empty-bucket",
    }


@pytest.fixture
def s3_service(CONSTANTS) -> S3Service:
    return S3Service.connect(
        url=CONSTANTS["MINIO_URL"],
        access_key=CONSTANTS["ACCESS_KEY"],
        secret_key=CONSTANTS["SECRET_KEY"],
        bucket_name=CONSTANTS["BUCKET"],
    )

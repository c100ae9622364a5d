"""
Top-level pytest configuration for easy_s3.

Collects the fixtures needed across multiple test modules.
The S3FileManager is replaced by a mock backed by a FakeBucket,
so the unit tests never talk to S3.
"""

from unittest.mock import MagicMock

import pytest
import stamina

from easy_s3.s3_client import S3FileManager
from easy_s3.session import BucketSession
from tests.helpers.fake_bucket import BUCKET_NAME, FakeBucket


@pytest.fixture(autouse=True)
def no_retry_waits():
    """Retries with stamina happen straight away in tests."""
    stamina.set_testing(True, attempts=3)
    yield
    stamina.set_testing(False)


@pytest.fixture
def fake_bucket() -> FakeBucket:
    return FakeBucket(
        objects={
            "reports/2024/": b"",
            "reports/2024/a.json": b'{"name": "a"}',
            "reports/2024/b.json": b'{"name": "b"}',
            "reports/2023/old.json": b'{"name": "old"}',
        }
    )


@pytest.fixture
def mock_file_manager(fake_bucket: FakeBucket) -> MagicMock:
    file_manager = MagicMock(spec=S3FileManager)
    file_manager.url = "http://localhost:9000"
    file_manager.list_objects.side_effect = fake_bucket.list_objects
    file_manager.download_file.side_effect = fake_bucket.download_file
    return file_manager


@pytest.fixture
def session(mock_file_manager: MagicMock) -> BucketSession:
    return BucketSession(file_manager=mock_file_manager, bucket_name=BUCKET_NAME)

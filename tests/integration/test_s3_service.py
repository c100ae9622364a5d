"""
Tests of the S3Service against a real MinIO instance.
"""

import json
from datetime import timedelta
from io import BytesIO
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import boto3
import pytest

from easy_s3.exceptions import BucketDoesNotExistError, DirectoryDownloadError, S3ConnectionError
from easy_s3.service import S3Service


@pytest.mark.integration
def test_connect_to_missing_bucket(CONSTANTS):
    with pytest.raises(BucketDoesNotExistError):
        S3Service.connect(
            url=CONSTANTS["MINIO_URL"],
            access_key=CONSTANTS["ACCESS_KEY"],
            secret_key=CONSTANTS["SECRET_KEY"],
            bucket_name="this-bucket-does-not-exist",
        )


@pytest.mark.integration
def test_connect_with_bad_credentials(CONSTANTS):
    with pytest.raises(S3ConnectionError):
        S3Service.connect(
            url=CONSTANTS["MINIO_URL"],
            access_key="wrong",
            secret_key="wronger",
            bucket_name=CONSTANTS["BUCKET"],
        )


@pytest.mark.integration
def test_download_directory(s3_service: S3Service, tmp_path: Path):
    results = s3_service.download_directory(path="reports/2024", local_path=tmp_path, verify_checksums=True)

    assert len(results) == 3
    assert (tmp_path / "a.json").read_bytes() == b'{"name": "a"}'
    assert (tmp_path / "b.json").read_bytes() == b'{"name": "b"}'
    assert (tmp_path / "q1" / "jan" / "c.json").read_bytes() == b'{"name": "c"}'
    assert not (tmp_path / "old.json").exists()


@pytest.mark.integration
def test_download_directory_with_unwritable_destination(s3_service: S3Service, tmp_path: Path):
    """A file sitting where the 'q1' directory has to go makes only that download fail."""
    (tmp_path / "q1").write_text("in the way")

    with pytest.raises(DirectoryDownloadError) as exc_info:
        s3_service.download_directory(path="reports/2024", local_path=tmp_path)

    assert exc_info.value.failed_object_names == ["reports/2024/q1/jan/c.json"]
    assert (tmp_path / "a.json").exists()
    assert (tmp_path / "b.json").exists()


@pytest.mark.integration
def test_upload_json_file_with_link(s3_service: S3Service, tmp_path: Path):
    body = json.dumps({"uploaded": True}).encode()

    url = s3_service.upload_json_file_with_link(path="uploads/new.json", data=BytesIO(body))

    query = parse_qs(urlparse(url).query)
    assert query["response-content-disposition"] == ["inline"]
    assert query["X-Amz-Expires"] == [str(int(timedelta(hours=24).total_seconds()))]

    downloaded = s3_service.download_file(path="uploads/new.json", local_path=tmp_path / "new.json")
    assert json.loads(downloaded.read_text()) == {"uploaded": True}


@pytest.mark.integration
def test_add_lifecycle_rule(s3_service: S3Service, CONSTANTS):
    s3_service.add_lifecycle_rule(rule_id="expire-logs", folder_path="logs", days_to_expiry=30)

    s3_client = boto3.client(
        "s3",
        endpoint_url=CONSTANTS["MINIO_URL"],
        aws_access_key_id=CONSTANTS["ACCESS_KEY"],
        aws_secret_access_key=CONSTANTS["SECRET_KEY"],
    )
    rules = s3_client.get_bucket_lifecycle_configuration(Bucket=CONSTANTS["BUCKET"])["Rules"]
    assert len(rules) == 1
    assert rules[0]["ID"] == "expire-logs"
    assert rules[0]["Filter"]["Prefix"] == "logs/"
    assert rules[0]["Expiration"]["Days"] == 30

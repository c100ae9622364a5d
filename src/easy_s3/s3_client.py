"""
An S3FileManager object that lets you do basic operations with a bucket.

This class is a wrapper around the boto3 S3 client, it is the only place in the package talking to S3.
boto3 clients are thread safe, so a single S3FileManager can be shared between the download workers.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import BinaryIO, Iterator

import boto3
import stamina
from boto3.s3.transfer import TransferConfig
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from easy_s3.config import ACCESS_KEY_ENV_NAME, SECRET_KEY_ENV_NAME, settings
from easy_s3.constants import (
    CHECKSUM_MISMATCH_ATTEMPTS,
    DEFAULT_CONTENT_TYPE,
    MAX_PRESIGNED_URL_EXPIRATION,
    MIN_PRESIGNED_URL_EXPIRATION,
    S3_MULTIPART_CHUNK_SIZE,
    S3_MULTIPART_UPLOAD_THRESHOLD,
    S3_SEPARATOR,
    TRANSFER_MAX_CONCURRENCY,
)
from easy_s3.exceptions import (
    ChecksumVerificationError,
    DownloadedFileChecksumMismatchError,
    ListObjectsError,
    ObjectDoesNotExistError,
    S3CredentialsNotFoundError,
)
from easy_s3.lifecycle import LifecycleRule
from easy_s3.s3_checksums import verify_downloaded_checksum

logger = logging.getLogger(__name__)

NOT_FOUND_ERROR_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}


def retry_on_retriable_checksum_errors(exception: Exception) -> bool:
    """
    Retry condition function for stamina decorators to only retry on checksum verification errors.

    (We don't need retry logic for other S3 errors as boto3 has inbuilt retry logic for these.)
    """
    return isinstance(exception, DownloadedFileChecksumMismatchError)


def is_not_found_error(err: ClientError) -> bool:
    return err.response.get("Error", {}).get("Code") in NOT_FOUND_ERROR_CODES


@dataclass(frozen=True)
class ObjectInfo:
    """An object returned when listing a bucket."""

    key: str
    size: int = 0
    etag: str | None = None
    last_modified: datetime | None = None

    @property
    def is_dir(self) -> bool:
        """Zero byte objects ending with the separator are used by convention as (empty) directories."""
        return self.key.endswith(S3_SEPARATOR)


class S3FileManager:
    """An S3 client wrapper to do basic S3 operations."""

    def __init__(self, url: str | None, access_key: str, secret_key: str):
        self.url = url
        self.s3_client = boto3.client(
            "s3",
            endpoint_url=url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(
                retries={
                    "max_attempts": 5,
                    "mode": "adaptive",
                }
            ),
        )
        # multipart up/download config
        self.transfer_config = TransferConfig(
            multipart_threshold=S3_MULTIPART_UPLOAD_THRESHOLD,
            multipart_chunksize=S3_MULTIPART_CHUNK_SIZE,
            max_concurrency=TRANSFER_MAX_CONCURRENCY,
            use_threads=True,
        )

    def bucket_exists(self, bucket_name: str) -> bool:
        """
        Check if the bucket exists.
        Any error other than 'not found' (e.g. access denied) is raised.
        """
        try:
            self.s3_client.head_bucket(Bucket=bucket_name)
        except ClientError as err:
            if is_not_found_error(err):
                return False
            raise
        return True

    def set_bucket_lifecycle(self, bucket_name: str, rule: LifecycleRule) -> None:
        """Replace the lifecycle configuration of the bucket with the single rule given."""
        logger.debug(f"Setting lifecycle configuration of bucket '{bucket_name}' to: {rule.to_xml()}")
        self.s3_client.put_bucket_lifecycle_configuration(
            Bucket=bucket_name,
            LifecycleConfiguration=rule.to_boto3(),
        )

    def upload_fileobj(
        self, key: str, data: BinaryIO, bucket_name: str, content_type: str = DEFAULT_CONTENT_TYPE
    ) -> None:
        """
        Upload the contents of a binary stream as an object.

        The size of the stream does not need to be known up front,
        boto3 reads it in chunks and swaps to a multipart upload for large streams.
        """
        self.s3_client.upload_fileobj(
            Fileobj=data,
            Bucket=bucket_name,
            Key=key,
            ExtraArgs={"ContentType": content_type},
            Config=self.transfer_config,
        )

    def presigned_get_object(
        self, key: str, bucket_name: str, expiration: timedelta, response_params: dict[str, str] | None = None
    ) -> str:
        """
        Generate a presigned URL to GET the object.

        response_params are extra parameters of the get_object call which override the headers
        of the response, e.g. {"ResponseContentDisposition": "inline"}.
        """
        if not MIN_PRESIGNED_URL_EXPIRATION <= expiration <= MAX_PRESIGNED_URL_EXPIRATION:
            raise ValueError(
                f"The expiration of a presigned URL must be between {MIN_PRESIGNED_URL_EXPIRATION} "
                f"and {MAX_PRESIGNED_URL_EXPIRATION}, got: {expiration}"
            )

        return self.s3_client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": bucket_name, "Key": key, **(response_params or {})},
            ExpiresIn=int(expiration.total_seconds()),
        )

    def list_objects(self, bucket_name: str, prefix: str = "") -> Iterator[ObjectInfo]:
        """
        Lazily list all objects under the prefix, including those in "sub directories".

        Pages are only requested from S3 as the previous page is used up.
        Closing the generator stops any further requests.
        Raises ListObjectsError if a page can not be fetched.
        """
        paginator = self.s3_client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=bucket_name, Prefix=prefix):
                for obj in page.get("Contents", []):
                    yield ObjectInfo(
                        key=obj["Key"],
                        size=obj.get("Size", 0),
                        etag=obj.get("ETag", "").strip('"') or None,
                        last_modified=obj.get("LastModified"),
                    )
        except (BotoCoreError, ClientError) as err:
            raise ListObjectsError(prefix=prefix, bucket_name=bucket_name, reason=str(err)) from err

    def download_file(self, key: str, dest: Path, bucket_name: str, verify_checksum: bool = False) -> Path:
        """
        Download an object to a local path, streaming it straight to disk.
        Missing parent directories of the local path are created.

        If verify_checksum, the downloaded file is checked against the object's ETag,
        and the download retried if they don't match.
        """
        dest.parent.mkdir(parents=True, exist_ok=True)
        if verify_checksum:
            self._download_verified_file(key=key, dest=dest, bucket_name=bucket_name)
        else:
            self._download_single_file(key=key, dest=dest, bucket_name=bucket_name)
        return dest

    def _download_single_file(self, key: str, dest: Path, bucket_name: str) -> None:
        try:
            self.s3_client.download_file(
                Bucket=bucket_name,
                Key=key,
                Filename=str(dest),
                Config=self.transfer_config,
            )
        except ClientError as err:
            if is_not_found_error(err):
                raise ObjectDoesNotExistError(key=key, bucket_name=bucket_name) from err
            raise

    @stamina.retry(on=retry_on_retriable_checksum_errors, attempts=CHECKSUM_MISMATCH_ATTEMPTS)
    def _download_verified_file(self, key: str, dest: Path, bucket_name: str) -> None:
        """
        A failed checksum verification will raise a DownloadedFileChecksumMismatchError, which will trigger a retry with stamina.
        boto3 has its own retry logic for other S3 errors.
        """
        self._download_single_file(key=key, dest=dest, bucket_name=bucket_name)

        expected_checksum = self.get_object_checksum_if_exists(bucket_name=bucket_name, object_name=key)
        if not expected_checksum:
            raise ObjectDoesNotExistError(key=key, bucket_name=bucket_name)

        try:
            verify_downloaded_checksum(file_path=dest, expected_checksum=expected_checksum)
        except ChecksumVerificationError as err:
            dest.unlink()  # delete the invalid file as will try again instead.
            logger.warning(
                f"Checksum verification failed for downloaded file '{dest}'. "
                f"Expected: {err.expected_checksum}, Calculated: {err.calculated_checksum}.  Retrying download..."
            )
            raise DownloadedFileChecksumMismatchError(
                file_path=dest,
                expected_checksum=err.expected_checksum,
                calculated_checksum=err.calculated_checksum,
            ) from None

    def get_object_checksum_if_exists(self, bucket_name: str, object_name: str) -> str | None:
        """
        Get the ETag (MD5 or composite MD5 checksum) of an object in the bucket, if it exists.
        Returns None if the object does not exist.
        """
        try:
            response = self.s3_client.head_object(Bucket=bucket_name, Key=object_name)
        except ClientError as err:
            if is_not_found_error(err):
                return None
            raise
        return response.get("ETag", "").strip('"') or None


def create_s3_file_manager(url: str | None = None) -> S3FileManager:
    """Helper function to create an S3FileManager instance using the credentials from the environment variables"""
    access_key = settings.access_key.get_secret_value()
    secret_key = settings.secret_key.get_secret_value()

    if "NOT_SET" in (access_key, secret_key):
        raise S3CredentialsNotFoundError(access_key_name=ACCESS_KEY_ENV_NAME, secret_key_name=SECRET_KEY_ENV_NAME)

    if url is None and settings.endpoint_url != "NOT_SET":
        url = settings.endpoint_url

    return S3FileManager(url=url, access_key=access_key, secret_key=secret_key)

"""
Custom exceptions for the easy_s3 package.

These are raised by lower-level functions/methods which understand the context of the error.

Note: By adding the `__str__` method to each exception,
we ensure that when you manually raise a specific exception the error message looks good
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from easy_s3.directory_download import FailedDownload, SuccessfulDownload


class S3ConnectionError(ConnectionError):
    """Raised when the S3 endpoint can not be reached or rejects the credentials provided."""

    def __init__(self, url: str | None, reason: str):
        error_message = f"Could not connect to the S3 endpoint '{url}': {reason}"
        super().__init__(error_message)
        self.url = url
        self.reason = reason
        self.error_message = error_message

    def __str__(self):
        return self.error_message


class BucketDoesNotExistError(LookupError):
    """Raised when the bucket the service was created for does not exist."""

    def __init__(self, bucket_name: str):
        error_message = f"The s3 bucket '{bucket_name}' does not exist."
        super().__init__(error_message)
        self.bucket_name = bucket_name
        self.error_message = error_message

    def __str__(self):
        return self.error_message


class S3CredentialsNotFoundError(Exception):
    """
    Raised when the access and/or secret key, which are stored as environment variables, are not found.
    """

    def __init__(self, access_key_name: str, secret_key_name: str):
        error_message = (
            "\n"
            "Either your S3 access and/or secret key was not found in your environment variables.\n"
            f"Please ensure that the environment variables '{access_key_name}' and '{secret_key_name}' are set.\n"
        )
        super().__init__(error_message)
        self.access_key_name = access_key_name
        self.secret_key_name = secret_key_name
        self.error_message = error_message

    def __str__(self):
        return self.error_message


class BucketNameNotSpecifiedError(Exception):
    """Raised when no bucket name was passed and none is set in the environment variables."""

    def __init__(self, bucket_name_env_name: str):
        error_message = (
            "\n"
            "No S3 bucket name was given.\n"
            f"Please either set the environment variable '{bucket_name_env_name}' or pass the bucket_name.\n"
        )
        super().__init__(error_message)
        self.bucket_name_env_name = bucket_name_env_name
        self.error_message = error_message

    def __str__(self):
        return self.error_message


class ObjectDoesNotExistError(FileNotFoundError):
    """Raised when an S3 object/key does not exist in the bucket."""

    def __init__(self, key: str, bucket_name: str):
        error_message = f"The file/object '{key}' does not exist in the bucket '{bucket_name}'. "
        super().__init__(error_message)
        self.key = key
        self.bucket = bucket_name
        self.error_message = error_message

    def __str__(self):
        return self.error_message


class ListObjectsError(Exception):
    """
    Raised when listing the objects under a prefix fails part way through.

    This aborts a directory download straight away, before/without trying any further downloads.
    """

    def __init__(self, prefix: str, bucket_name: str, reason: str):
        error_message = f"Failed to list the objects under the prefix '{prefix}' in the bucket '{bucket_name}': {reason}"
        super().__init__(error_message)
        self.prefix = prefix
        self.bucket_name = bucket_name
        self.reason = reason
        self.error_message = error_message

    def __str__(self):
        return self.error_message


class UnsafeObjectKeyError(ValueError):
    """Raised when an object's key would be written outside of the local download directory."""

    def __init__(self, key: str, local_root: Path):
        error_message = f"The object '{key}' can not be safely downloaded inside of '{local_root}'."
        super().__init__(error_message)
        self.key = key
        self.local_root = local_root
        self.error_message = error_message

    def __str__(self):
        return self.error_message


class ChecksumVerificationError(Exception):
    """Raised when a calculated file's checksum does not match the expected value."""

    def __init__(self, expected_checksum: str, calculated_checksum: str):
        self.expected_checksum = expected_checksum
        self.calculated_checksum = calculated_checksum

        message = f"Checksum verification failed. Expected: {expected_checksum}, Calculated: {calculated_checksum}"
        super().__init__(message)


class DownloadedFileChecksumMismatchError(Exception):
    """Raised when the checksum of a downloaded file does not match the ETag of the object in the bucket."""

    def __init__(self, file_path: Path, expected_checksum: str, calculated_checksum: str):
        error_message = (
            f"The downloaded file '{file_path}' has the checksum '{calculated_checksum}', "
            f"but the object in the bucket has the checksum '{expected_checksum}'."
        )
        super().__init__(error_message)
        self.file_path = file_path
        self.expected_checksum = expected_checksum
        self.calculated_checksum = calculated_checksum
        self.error_message = error_message

    def __str__(self):
        return self.error_message


class DirectoryDownloadError(Exception):
    """
    Raised after a directory download where one or more objects failed to download.

    All downloads were attempted before this is raised.
    'failed' holds every failure in the order the workers finished,
    'successful' holds the downloads that did work, so a caller can retry just the failed objects.
    """

    def __init__(self, prefix: str, failed: list[FailedDownload], successful: list[SuccessfulDownload]):
        failures_str = "\n".join(f"- '{failure.object_name}': {failure.exception}" for failure in failed)
        error_message = (
            f"Failed to download {len(failed)} of {len(failed) + len(successful)} files "
            f"from the prefix '{prefix}':\n"
            f"{failures_str}"
        )
        super().__init__(error_message)
        self.prefix = prefix
        self.failed = failed
        self.successful = successful
        self.error_message = error_message

    @property
    def failed_object_names(self) -> list[str]:
        return [failure.object_name for failure in self.failed]

    def __str__(self):
        return self.error_message

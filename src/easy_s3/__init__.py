from easy_s3.directory_download import FailedDownload, SuccessfulDownload, download_directory
from easy_s3.exceptions import (
    BucketDoesNotExistError,
    BucketNameNotSpecifiedError,
    DirectoryDownloadError,
    ListObjectsError,
    ObjectDoesNotExistError,
    S3ConnectionError,
    S3CredentialsNotFoundError,
)
from easy_s3.lifecycle import LifecycleRule
from easy_s3.s3_client import ObjectInfo, S3FileManager
from easy_s3.service import S3Service, create_s3_service
from easy_s3.session import BucketSession

__version__ = "0.1.0"

__all__ = [
    "BucketDoesNotExistError",
    "BucketNameNotSpecifiedError",
    "BucketSession",
    "DirectoryDownloadError",
    "FailedDownload",
    "LifecycleRule",
    "ListObjectsError",
    "ObjectDoesNotExistError",
    "ObjectInfo",
    "S3ConnectionError",
    "S3CredentialsNotFoundError",
    "S3FileManager",
    "S3Service",
    "SuccessfulDownload",
    "create_s3_service",
    "download_directory",
]

"""
S3Service, the entry point of the package.

Wraps one bucket: upload files, hand out time limited links to them,
expire folders with a lifecycle rule and download single files or whole "directories".
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO

from botocore.exceptions import BotoCoreError, ClientError

from easy_s3 import directory_download
from easy_s3.config import BUCKET_NAME_ENV_NAME, settings
from easy_s3.constants import DEFAULT_CONTENT_TYPE, DEFAULT_UPLOAD_LINK_EXPIRATION, JSON_CONTENT_TYPE
from easy_s3.directory_download import SuccessfulDownload
from easy_s3.exceptions import BucketDoesNotExistError, BucketNameNotSpecifiedError, S3ConnectionError
from easy_s3.lifecycle import LifecycleRule
from easy_s3.s3_client import S3FileManager, create_s3_file_manager
from easy_s3.session import BucketSession

logger = logging.getLogger(__name__)


class S3Service:
    """
    Service to easily work with a single S3 bucket.

    Use S3Service.connect (or create_s3_service) to create one, which checks that the bucket exists,
    raising BucketDoesNotExistError if not and S3ConnectionError if S3 could not be reached.
    """

    def __init__(self, session: BucketSession):
        self.session = session

    @classmethod
    def connect(cls, url: str | None, access_key: str, secret_key: str, bucket_name: str) -> "S3Service":
        file_manager = S3FileManager(url=url, access_key=access_key, secret_key=secret_key)
        return cls(session=connect_to_bucket(file_manager=file_manager, bucket_name=bucket_name))

    @property
    def bucket_name(self) -> str:
        return self.session.bucket_name

    def add_lifecycle_rule(self, rule_id: str, folder_path: str, days_to_expiry: int) -> None:
        """
        Have the objects under folder_path be deleted by S3 after days_to_expiry days.

        NOTE: rule_id must be unique, S3 rejects the rule otherwise.
        """
        rule = LifecycleRule.for_folder(rule_id=rule_id, folder_path=folder_path, days_to_expiry=days_to_expiry)
        self.session.file_manager.set_bucket_lifecycle(bucket_name=self.bucket_name, rule=rule)
        logger.info(f"Added lifecycle rule '{rule_id}' expiring '{rule.prefix}' after {days_to_expiry} days")

    def upload_file(self, path: str, data: BinaryIO, content_type: str = DEFAULT_CONTENT_TYPE) -> None:
        """Upload the contents of the stream to the given path in the bucket."""
        self.session.file_manager.upload_fileobj(
            key=path, data=data, bucket_name=self.bucket_name, content_type=content_type
        )

    def upload_json_file(self, path: str, data: BinaryIO) -> None:
        """Uploads a json file from the stream to the specified path"""
        self.upload_file(path=path, data=data, content_type=JSON_CONTENT_TYPE)

    def upload_json_file_with_link(
        self, path: str, data: BinaryIO, expiration: timedelta = DEFAULT_UPLOAD_LINK_EXPIRATION
    ) -> str:
        """
        Uploads a json file and returns a link to the file that expires after the specified duration.
        No link is created if the upload fails.
        """
        self.upload_json_file(path=path, data=data)
        return self.get_file_url(path=path, expiration=expiration)

    def get_file_url(self, path: str, expiration: timedelta) -> str:
        """
        Generates a link to the file at the given path, which expires after the specified duration.
        The file is shown inline by the browser, rather than downloaded.
        """
        return self.session.file_manager.presigned_get_object(
            key=path,
            bucket_name=self.bucket_name,
            expiration=expiration,
            response_params=dict(self.session.url_params),
        )

    def download_file(self, path: str, local_path: Path | str) -> Path:
        """Downloads the file at path to the specified local path"""
        return self.session.file_manager.download_file(key=path, dest=Path(local_path), bucket_name=self.bucket_name)

    def download_directory(
        self,
        path: str,
        local_path: Path | str,
        max_workers: int | None = None,
        verify_checksums: bool = False,
    ) -> list[SuccessfulDownload]:
        """
        Concurrently downloads the remote directory path to the local file system at the specified location.
        See directory_download.download_directory for how errors are reported.
        """
        return directory_download.download_directory(
            session=self.session,
            remote_prefix=path,
            local_root=local_path,
            max_workers=max_workers,
            verify_checksums=verify_checksums,
        )


def connect_to_bucket(file_manager: S3FileManager, bucket_name: str) -> BucketSession:
    """Check the bucket can be reached and exists, returning the session to work with it."""
    try:
        exists = file_manager.bucket_exists(bucket_name)
    except (BotoCoreError, ClientError) as err:
        raise S3ConnectionError(url=file_manager.url, reason=str(err)) from err

    if not exists:
        raise BucketDoesNotExistError(bucket_name=bucket_name)

    logger.debug(f"Connected to bucket '{bucket_name}' at '{file_manager.url}'")
    return BucketSession(file_manager=file_manager, bucket_name=bucket_name)


def create_s3_service(bucket_name: str | None = None, url: str | None = None) -> S3Service:
    """
    Helper function to create an S3Service using the settings from the environment variables.
    The bucket name and url can be overridden.
    """
    bucket_name = bucket_name or settings.bucket_name
    if not bucket_name or bucket_name == "NOT_SET":
        raise BucketNameNotSpecifiedError(bucket_name_env_name=BUCKET_NAME_ENV_NAME)

    session = connect_to_bucket(file_manager=create_s3_file_manager(url=url), bucket_name=bucket_name)
    return S3Service(session=session)

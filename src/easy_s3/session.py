from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from easy_s3.constants import INLINE_CONTENT_DISPOSITION
from easy_s3.s3_client import S3FileManager


def _default_url_params() -> Mapping[str, str]:
    return MappingProxyType({"ResponseContentDisposition": INLINE_CONTENT_DISPOSITION})


@dataclass(frozen=True)
class BucketSession:
    """
    A validated connection to one bucket.

    Created once by S3Service after checking the bucket exists and never changed afterwards,
    so it can be read from any number of download workers at the same time.
    url_params are added to every presigned GET URL created for the bucket.
    """

    file_manager: S3FileManager
    bucket_name: str
    url_params: Mapping[str, str] = field(default_factory=_default_url_params)

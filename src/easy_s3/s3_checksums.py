"""
Validation of downloaded files against the ETag of the S3 object they came from.

For objects uploaded in a single part the ETag is the hex encoded MD5 checksum of the object.
For objects uploaded in multiple parts the ETag is a composite checksum ("<md5 of part md5s>-<number of parts>"),
which can only be reproduced if the part size used for the upload is known.
"""

import hashlib
import logging
from pathlib import Path
from typing import Iterator

from easy_s3.constants import S3_MULTIPART_CHUNK_SIZE
from easy_s3.exceptions import ChecksumVerificationError

logger = logging.getLogger(__name__)


def verify_downloaded_checksum(file_path: Path, expected_checksum: str) -> None:
    """
    Verify a downloaded file against it's S3's ETag.
    Raises ChecksumVerificationError if they do not match.
    """
    if "-" in expected_checksum:
        calculated_checksum = calculate_composite_md5_s3_etag(file_path)
    else:
        calculated_checksum = calculate_md5_checksum(file_path=file_path)

    if calculated_checksum != expected_checksum:
        raise ChecksumVerificationError(expected_checksum=expected_checksum, calculated_checksum=calculated_checksum)


def _read_file_chunks(file_path: Path, chunk_size: int) -> Iterator[bytes]:
    with file_path.open(mode="rb") as infile:
        yield from iter(lambda: infile.read(chunk_size), b"")


def calculate_md5_checksum(file_path: Path, chunk_size: int = S3_MULTIPART_CHUNK_SIZE) -> str:
    """Calculate the hex-encoded (lowercase) MD5 checksum of a file."""
    md5_hash = hashlib.md5()
    for chunk in _read_file_chunks(file_path=file_path, chunk_size=chunk_size):
        md5_hash.update(chunk)
    return md5_hash.hexdigest()


def calculate_composite_md5_s3_etag(file_path: Path, chunk_size: int = S3_MULTIPART_CHUNK_SIZE) -> str:
    """
    Calculate the composite ETag for a file that was uploaded via multipart upload to S3.

    The MD5 hash of each part is calculated, then these are combined and hashed again.
    So the part size used here must match the part size used during upload.
    """
    md5_digests = [hashlib.md5(chunk).digest() for chunk in _read_file_chunks(file_path, chunk_size)]
    composite_hash = hashlib.md5(b"".join(md5_digests))
    return f"{composite_hash.hexdigest()}-{len(md5_digests)}"

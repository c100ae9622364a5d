"""
Fixed values used across the easy_s3 package.
"""

from datetime import timedelta

ONE_MiB = 1024 * 1024

# S3 has a flat namespace, "directories" are just a key convention.
S3_SEPARATOR = "/"

JSON_CONTENT_TYPE = "application/json"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Every presigned GET link is rendered in the browser rather than downloaded.
INLINE_CONTENT_DISPOSITION = "inline"

# Lifetime of the link returned after an upload.
DEFAULT_UPLOAD_LINK_EXPIRATION = timedelta(hours=24)

# S3 (and MinIO) reject presigned URLs outside of these bounds.
MIN_PRESIGNED_URL_EXPIRATION = timedelta(seconds=1)
MAX_PRESIGNED_URL_EXPIRATION = timedelta(days=7)

# Streams of unknown size are uploaded in parts above this threshold.
# Composite ETags of those objects can only be verified if the same chunk size is used.
S3_MULTIPART_UPLOAD_THRESHOLD = 96 * ONE_MiB
S3_MULTIPART_CHUNK_SIZE = 32 * ONE_MiB

# Concurrency used inside boto3's transfer manager for a single object.
TRANSFER_MAX_CONCURRENCY = 10

DEFAULT_MAX_DOWNLOAD_WORKERS = 10

# How many times a download is attempted when the checksum does not match
CHECKSUM_MISMATCH_ATTEMPTS = 3

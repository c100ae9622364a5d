"""
Concurrent download of a "directory" (all objects under a prefix) from S3 to the local file system.

The objects under the prefix are listed lazily and each (non directory) object is handed to a worker thread,
which streams it to the matching path under the local directory.

Two kinds of errors are handled differently:
- If listing the objects fails, nothing more is dispatched and the ListObjectsError is raised
  once the workers already running have finished.
- If downloading an object fails, all other objects are still downloaded.
  Once every worker is done, a DirectoryDownloadError holding all the failures is raised.
"""

import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import closing
from dataclasses import dataclass
from functools import partial
from pathlib import Path, PurePath, PureWindowsPath

from easy_s3.config import settings
from easy_s3.constants import S3_SEPARATOR
from easy_s3.exceptions import DirectoryDownloadError, UnsafeObjectKeyError
from easy_s3.session import BucketSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadTask:
    """One object to download and where to put it."""

    object_name: str
    file_path: Path


@dataclass
class SuccessfulDownload:
    """Represents a successfully downloaded file."""

    file_path: Path
    object_name: str


@dataclass
class FailedDownload:
    """Represents a failed download attempt."""

    object_name: str
    file_path: Path | None
    exception: Exception


DownloadResult = SuccessfulDownload | FailedDownload


def as_directory_prefix(remote_prefix: str) -> str:
    """
    'reports/2024', 'reports/2024/' -> 'reports/2024/'

    Listing with the separator at the end stops 'reports/2024' also matching 'reports/2024-old/...'.
    An empty prefix is the whole bucket.
    """
    stripped = remote_prefix.rstrip(S3_SEPARATOR)
    return f"{stripped}{S3_SEPARATOR}" if stripped else ""


def local_path_for(key: str, prefix: str, local_root: PurePath) -> PurePath:
    """
    Map an object key to its path under local_root by removing the prefix.

    Empty, '.' and '..' path segments are refused, they would either escape local_root
    or make two different keys end up at the same path.
    So are segments holding a backslash or a drive, which Windows reads as separators or roots.
    """
    relative = key.removeprefix(prefix)
    parts = relative.split(S3_SEPARATOR)
    if any(_is_unsafe_segment(part) for part in parts):
        raise UnsafeObjectKeyError(key=key, local_root=local_root)

    target = local_root.joinpath(*parts)
    if not target.is_relative_to(local_root):
        raise UnsafeObjectKeyError(key=key, local_root=local_root)
    return target


def _is_unsafe_segment(part: str) -> bool:
    if part in ("", ".", ".."):
        return True
    return "\\" in part or PureWindowsPath(part).anchor != ""


def download_directory(
    session: BucketSession,
    remote_prefix: str,
    local_root: Path | str,
    max_workers: int | None = None,
    verify_checksums: bool = False,
) -> list[SuccessfulDownload]:
    """
    Download every object under remote_prefix to local_root, keeping the "directory" structure below the prefix.

    At most max_workers downloads run (or wait to run) at once,
    listing pauses until a worker is free so a huge prefix is never held in memory.

    Returns the successful downloads if every object was downloaded.
    Raises ListObjectsError if the objects could not be listed (fatal, no further downloads are started).
    Raises DirectoryDownloadError if any object failed to download, after all objects were attempted.
    Raises ValueError if max_workers is less than 1.
    """
    if max_workers is None:
        max_workers = settings.max_download_workers
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got: {max_workers}")

    prefix = as_directory_prefix(remote_prefix)
    local_root = Path(local_root)

    # Only ever written to by the workers (and the unsafe key check),
    # read after every worker has finished.
    outcomes: queue.SimpleQueue[DownloadResult] = queue.SimpleQueue()
    in_flight = threading.BoundedSemaphore(max_workers)

    logger.info(f"Downloading '{prefix}' from bucket '{session.bucket_name}' to '{local_root}'")

    # Leaving the executor block waits for every dispatched worker, also when listing raised.
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="easy-s3-download") as executor:
        with closing(session.file_manager.list_objects(bucket_name=session.bucket_name, prefix=prefix)) as objects:
            for obj in objects:
                if obj.is_dir:
                    continue

                try:
                    task = DownloadTask(object_name=obj.key, file_path=local_path_for(obj.key, prefix, local_root))
                except UnsafeObjectKeyError as err:
                    logger.warning(f"Not downloading '{obj.key}': {err}")
                    outcomes.put(FailedDownload(object_name=obj.key, file_path=None, exception=err))
                    continue

                in_flight.acquire()
                future = executor.submit(_download_task, session, task, verify_checksums)
                future.add_done_callback(partial(_collect_outcome, task=task, outcomes=outcomes, in_flight=in_flight))

    successful, failed = [], []
    while not outcomes.empty():
        result = outcomes.get_nowait()
        if isinstance(result, SuccessfulDownload):
            successful.append(result)
        else:
            failed.append(result)

    if failed:
        logger.error(f"{len(failed)} of {len(successful) + len(failed)} files under '{prefix}' failed to download")
        raise DirectoryDownloadError(prefix=prefix, failed=failed, successful=successful)

    logger.info(f"Downloaded {len(successful)} files from '{prefix}' to '{local_root}'")
    return successful


def _download_task(session: BucketSession, task: DownloadTask, verify_checksums: bool) -> SuccessfulDownload:
    """Runs in a worker thread. Helper function, do not call directly from outside this module."""
    session.file_manager.download_file(
        key=task.object_name,
        dest=task.file_path,
        bucket_name=session.bucket_name,
        verify_checksum=verify_checksums,
    )
    return SuccessfulDownload(file_path=task.file_path, object_name=task.object_name)


def _collect_outcome(
    future: Future, task: DownloadTask, outcomes: queue.SimpleQueue, in_flight: threading.BoundedSemaphore
) -> None:
    """Done callback of every worker, records the outcome and frees the worker's slot."""
    try:
        exception = future.exception()
        if exception is None:
            outcomes.put(future.result())
        else:
            logger.warning(f"Failed to download '{task.object_name}' to '{task.file_path}': {exception}")
            outcomes.put(FailedDownload(object_name=task.object_name, file_path=task.file_path, exception=exception))
    finally:
        in_flight.release()

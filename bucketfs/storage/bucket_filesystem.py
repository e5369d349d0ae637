"""Hierarchical file system view over a flat object storage bucket."""

from __future__ import annotations

import io
import logging
import posixpath
from datetime import datetime, timezone
from typing import BinaryIO, Callable, List, Optional, Tuple, TypeVar, Union

from bucketfs.core.errors import ObjectNotFoundError
from bucketfs.storage.adapter import FileSystem
from bucketfs.storage.client import ClientFactory, StorageClient, execute_request
from bucketfs.storage.deletion import MAX_BATCH_SIZE, BatchDeleter
from bucketfs.storage.listing import PaginatedLister
from bucketfs.storage.models import DELIMITER, BucketIdentity, ListingRequest
from bucketfs.storage.paths import PathResolver

T = TypeVar("T")

logger = logging.getLogger("bucketfs.filesystem")

MIN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)
DEFAULT_FILTER = "*.*"


def split_filter(filter: Optional[str]) -> Tuple[str, str]:
    """
    Split a file filter into a name prefix and an extension suffix.

    "report*.csv" -> ("report", ".csv"), "*.*" -> ("", ""). A trailing "*" is
    dropped from the name; an extension containing "*" matches anything.
    """
    filter = (filter or DEFAULT_FILTER).replace("\\", DELIMITER)
    name, extension = posixpath.splitext(posixpath.basename(filter))
    if name.endswith("*"):
        name = name[:-1]
    if "*" in extension:
        extension = ""
    return name, extension


class BucketFileSystem(FileSystem):
    """
    File system backed by one bucket, with directories as key prefixes.

    Holds no state beyond the bucket identity; every call goes to the live
    store through a client obtained from ``client_factory``.
    """

    def __init__(
        self,
        identity: BucketIdentity,
        client_factory: ClientFactory,
        delete_batch_size: int = MAX_BATCH_SIZE,
    ):
        self.identity = identity
        self.bucket_name = identity.bucket_name
        self.client_factory = client_factory
        self.resolver = PathResolver(identity)
        self.lister = PaginatedLister(client_factory)
        self.deleter = BatchDeleter(client_factory, batch_size=delete_batch_size)

    def _execute(self, request: Callable[[StorageClient], T], operation: str, key: str) -> T:
        return execute_request(self.client_factory, request, operation=operation, key=key)

    def add_file(self, path: str, stream: Union[bytes, BinaryIO], overwrite: bool = True) -> None:
        if isinstance(stream, (bytes, bytearray, memoryview)):
            data = bytes(stream)
        else:
            data = stream.read()

        key = self.resolver.resolve(path)
        logger.debug(f"Uploading {len(data)} bytes", extra={"operation": "put", "key": key})
        # The put replaces existing objects whatever ``overwrite`` says
        self._execute(lambda client: client.put(self.bucket_name, key, data), "put", key)

    def delete_file(self, path: str) -> None:
        key = self.resolver.resolve(path)
        self.deleter.delete(self.bucket_name, [key])
        logger.info(f"Deleted file {key}", extra={"operation": "delete", "key": key})

    def delete_directory(self, path: str, recursive: bool = False) -> None:
        prefix = self.resolver.resolve(path, is_directory=True)
        request = ListingRequest(bucket=self.bucket_name, prefix=prefix)
        keys = [summary.key for summary in self.lister.object_summaries(request)]

        deleted = self.deleter.delete(self.bucket_name, keys)
        logger.info(
            f"Deleted directory {prefix} ({deleted} objects)",
            extra={"operation": "delete", "key": prefix},
        )

    def file_exists(self, path: str) -> bool:
        key = self.resolver.resolve(path)
        try:
            self._execute(lambda client: client.stat(self.bucket_name, key), "stat", key)
            return True
        except ObjectNotFoundError:
            return False

    def directory_exists(self, path: str) -> bool:
        prefix = self.resolver.resolve(path, is_directory=True)
        request = ListingRequest(bucket=self.bucket_name, prefix=prefix, max_keys=1)
        page = self._execute(lambda client: client.list(request), "list", prefix)
        return len(page.object_summaries) > 0

    def get_files(self, path: str, filter: Optional[str] = DEFAULT_FILTER) -> List[str]:
        directory = self.resolver.resolve(path, is_directory=True)
        name_prefix, extension = split_filter(filter)
        request = ListingRequest(
            bucket=self.bucket_name,
            prefix=f"{directory}{name_prefix}",
            delimiter=DELIMITER,
        )

        files = []
        for summary in self.lister.object_summaries(request):
            # Directory marker objects
            if summary.key.endswith(DELIMITER):
                continue
            name = self.resolver.strip_prefix(summary.key)
            if name and name.endswith(extension):
                files.append(name)
        return files

    def get_directories(self, path: Optional[str]) -> List[str]:
        directory = self.resolver.resolve(path or DELIMITER, is_directory=True)
        request = ListingRequest(bucket=self.bucket_name, prefix=directory, delimiter=DELIMITER)
        return list(self.lister.common_prefixes(request))

    def get_last_modified(self, path: str) -> datetime:
        key = self.resolver.resolve(path)
        try:
            metadata = self._execute(lambda client: client.stat(self.bucket_name, key), "stat", key)
        except ObjectNotFoundError:
            return MIN_TIMESTAMP
        return metadata.last_modified or MIN_TIMESTAMP

    def get_created(self, path: str) -> datetime:
        # Object stores keep no separate creation time
        return self.get_last_modified(path)

    def get_url(self, path: str) -> str:
        return f"{self.resolver.host_url}{self.resolver.resolve(path)}"

    def get_relative_path(self, full_path_or_url: str) -> str:
        return self.resolver.relative_path(full_path_or_url)

    def get_full_path(self, path: str) -> str:
        return path

    def open_file(self, path: str) -> BinaryIO:
        key = self.resolver.resolve(path)
        stored = self._execute(lambda client: client.get(self.bucket_name, key), "get", key)
        stream = io.BytesIO(stored.data)
        stream.seek(0)
        return stream

"""Object storage backed file system for the content-management host."""

from bucketfs.storage.adapter import FileSystem
from bucketfs.storage.bucket_filesystem import MIN_TIMESTAMP, BucketFileSystem
from bucketfs.storage.client import Boto3StorageClient, StorageClient
from bucketfs.storage.deletion import BatchDeleter
from bucketfs.storage.listing import PaginatedLister
from bucketfs.storage.models import BucketIdentity, ListingPage, ListingRequest
from bucketfs.storage.paths import PathResolver

__all__ = [
    "FileSystem",
    "BucketFileSystem",
    "MIN_TIMESTAMP",
    "StorageClient",
    "Boto3StorageClient",
    "BatchDeleter",
    "PaginatedLister",
    "BucketIdentity",
    "ListingPage",
    "ListingRequest",
    "PathResolver",
]

"""Storage client boundary and its boto3 implementation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from bucketfs.core.errors import (
    BatchDeleteError,
    ObjectNotFoundError,
    describe_client_error,
    is_not_found,
)
from bucketfs.storage.models import (
    ListingPage,
    ListingRequest,
    ObjectMetadata,
    ObjectSummary,
    StoredObject,
)

T = TypeVar("T")

logger = logging.getLogger("bucketfs.client")


class StorageClient(ABC):
    """Abstract interface for the flat key/value object store."""

    @abstractmethod
    def put(self, bucket: str, key: str, data: bytes) -> None:
        """
        Store an object, replacing any existing object under the same key.

        Args:
            bucket: Bucket name
            key: Full object key (e.g., "media/docs/a.txt")
            data: Object content
        """
        pass

    @abstractmethod
    def get(self, bucket: str, key: str) -> StoredObject:
        """
        Fetch object content and metadata.

        Raises:
            ObjectNotFoundError: If no object exists under the key
        """
        pass

    @abstractmethod
    def stat(self, bucket: str, key: str) -> ObjectMetadata:
        """
        Fetch object metadata without the content.

        Raises:
            ObjectNotFoundError: If no object exists under the key
        """
        pass

    @abstractmethod
    def list(self, request: ListingRequest) -> ListingPage:
        """
        Issue a single listing call.

        Args:
            request: Bucket, prefix and optional delimiter, marker and max keys

        Returns:
            One page of results; ``is_truncated`` tells whether more follow
        """
        pass

    @abstractmethod
    def delete_many(self, bucket: str, keys: List[str]) -> None:
        """
        Delete a batch of objects in one call.

        Raises:
            BatchDeleteError: If the service reports any key as not deleted
        """
        pass


ClientFactory = Callable[[], StorageClient]


def execute_request(
    client_factory: ClientFactory,
    request: Callable[[StorageClient], T],
    operation: str,
    key: Optional[str] = None,
) -> T:
    """Run one request against a fresh client, logging failures before re-raising them."""
    client = client_factory()
    try:
        return request(client)
    except Exception as exc:
        if is_not_found(exc):
            logger.debug(f"{operation} found nothing at {key}", extra={"operation": operation, "key": key})
            raise
        details = describe_client_error(exc)
        logger.error(
            f"{operation} failed with error code: {details['code']}; error info: {details['message']}; "
            f"request id: {details['request_id']}; host id: {details['host_id']}",
            extra={"operation": operation, "key": key},
        )
        raise


class Boto3StorageClient(StorageClient):
    """Storage client for S3-compatible services (AWS S3, OSS, MinIO, R2)."""

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        region: str = "us-east-1",
        addressing_style: str = "virtual",
        s3_client: Any = None,
    ):
        """
        Initialize the boto3 client.

        Args:
            endpoint_url: Service endpoint; None uses the AWS default
            access_key_id: Access key ID; None defers to the boto3 credential chain
            secret_access_key: Secret access key
            region: Region name
            addressing_style: "virtual" or "path" bucket addressing
            s3_client: Pre-built boto3 S3 client, used instead of building one
        """
        if s3_client is None:
            s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                region_name=region,
                config=BotoConfig(s3={"addressing_style": addressing_style}),
            )
        self.s3_client = s3_client

    def put(self, bucket: str, key: str, data: bytes) -> None:
        self.s3_client.put_object(Bucket=bucket, Key=key, Body=data)

    def get(self, bucket: str, key: str) -> StoredObject:
        try:
            response = self.s3_client.get_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            if is_not_found(exc):
                raise ObjectNotFoundError(key) from exc
            raise

        body = response["Body"]
        try:
            data = body.read()
        finally:
            body.close()
        return StoredObject(data=data, metadata=_metadata_from_response(key, response))

    def stat(self, bucket: str, key: str) -> ObjectMetadata:
        try:
            response = self.s3_client.head_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            if is_not_found(exc):
                raise ObjectNotFoundError(key) from exc
            raise
        return _metadata_from_response(key, response)

    def list(self, request: ListingRequest) -> ListingPage:
        params: Dict[str, Any] = {"Bucket": request.bucket, "Prefix": request.prefix}
        if request.delimiter:
            params["Delimiter"] = request.delimiter
        if request.marker:
            params["Marker"] = request.marker
        if request.max_keys:
            params["MaxKeys"] = request.max_keys

        response = self.s3_client.list_objects(**params)

        summaries = [
            ObjectSummary(
                key=obj["Key"],
                size=obj.get("Size", 0),
                last_modified=obj.get("LastModified"),
                etag=obj.get("ETag"),
            )
            for obj in response.get("Contents", []) or []
        ]
        prefixes = [entry["Prefix"] for entry in response.get("CommonPrefixes", []) or []]
        is_truncated = bool(response.get("IsTruncated"))

        next_marker = response.get("NextMarker")
        if is_truncated and not next_marker:
            # S3 only returns NextMarker for delimited listings
            next_marker = _last_listed(summaries, prefixes)

        return ListingPage(
            object_summaries=summaries,
            common_prefixes=prefixes,
            is_truncated=is_truncated,
            next_marker=next_marker,
        )

    def delete_many(self, bucket: str, keys: List[str]) -> None:
        response = self.s3_client.delete_objects(
            Bucket=bucket,
            Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
        )
        errors = response.get("Errors") or []
        if errors:
            raise BatchDeleteError(
                [(error.get("Key", ""), error.get("Code", ""), error.get("Message", "")) for error in errors]
            )


def _metadata_from_response(key: str, response: Dict[str, Any]) -> ObjectMetadata:
    return ObjectMetadata(
        key=key,
        size=response.get("ContentLength", 0),
        last_modified=response.get("LastModified"),
        content_type=response.get("ContentType"),
        etag=response.get("ETag"),
    )


def _last_listed(summaries: Iterable[ObjectSummary], prefixes: Iterable[str]) -> Optional[str]:
    candidates = [summary.key for summary in summaries] + list(prefixes)
    return max(candidates) if candidates else None

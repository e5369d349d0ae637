"""Value types exchanged between the file system and the storage client."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

DELIMITER = "/"


@dataclass(frozen=True)
class BucketIdentity:
    """Fixed bucket coordinates for the lifetime of a file system."""

    bucket_name: str
    host_name: str
    key_prefix: str = ""

    @property
    def bucket_prefix(self) -> str:
        # "media" -> "media/"; no configured prefix means keys live at the bucket root
        prefix = self.key_prefix.strip(DELIMITER)
        return f"{prefix}{DELIMITER}" if prefix else ""

    @property
    def host_url(self) -> str:
        return f"https://{self.host_name.strip(DELIMITER)}{DELIMITER}"


@dataclass(frozen=True)
class ObjectSummary:
    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None


@dataclass(frozen=True)
class ObjectMetadata:
    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None
    etag: Optional[str] = None


@dataclass(frozen=True)
class StoredObject:
    data: bytes
    metadata: ObjectMetadata


@dataclass
class ListingRequest:
    """
    Parameters of a single listing call.

    Pagination advances ``marker`` in place between pages.
    """

    bucket: str
    prefix: str = ""
    delimiter: Optional[str] = None
    marker: Optional[str] = None
    max_keys: Optional[int] = None


@dataclass
class ListingPage:
    object_summaries: List[ObjectSummary] = field(default_factory=list)
    common_prefixes: List[str] = field(default_factory=list)
    is_truncated: bool = False
    next_marker: Optional[str] = None

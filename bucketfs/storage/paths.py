"""Mapping between host virtual paths and object keys under the bucket prefix."""

from __future__ import annotations

import os
import re
from typing import Optional

from bucketfs.storage.models import DELIMITER, BucketIdentity

_REPEATED_DELIMITERS = re.compile(r"/{2,}")


def _startswith_ignore_case(value: str, prefix: str) -> bool:
    return bool(prefix) and value[: len(prefix)].lower() == prefix.lower()


class PathResolver:
    """
    Translate virtual paths to object keys and back.

    This is the only place the bucket prefix is added or removed. Every key it
    produces starts with the bucket prefix, and one redundant copy of the prefix
    on input is dropped. Directory keys end with exactly one delimiter.
    """

    def __init__(self, identity: BucketIdentity):
        self.identity = identity
        self.bucket_prefix = identity.bucket_prefix
        self.host_name = identity.host_name.strip(DELIMITER)
        self.host_url = identity.host_url

    def resolve(self, path: Optional[str], is_directory: bool = False) -> str:
        """
        Resolve a virtual path to an object key.

        Args:
            path: Virtual path, relative or absolute, with "/" or platform
                separators, optionally carrying the host name or bucket prefix
            is_directory: Resolve to a directory key ending with the delimiter

        Returns:
            Object key beginning with the bucket prefix
        """
        if not path:
            return self.bucket_prefix

        if path != DELIMITER:
            path = self._strip_host(path)

        path = self._normalize_separators(path)
        if path == DELIMITER:
            return self.bucket_prefix

        if path.startswith(DELIMITER):
            path = path[len(DELIMITER):]

        # Keys passed back in by the host may already carry the prefix, once
        if _startswith_ignore_case(path, self.bucket_prefix):
            path = path[len(self.bucket_prefix):]

        path = path.rstrip(DELIMITER)
        if is_directory and path:
            path = f"{path}{DELIMITER}"

        return f"{self.bucket_prefix}{path}"

    def strip_prefix(self, key: str) -> str:
        """Turn an object key back into a virtual path relative to the bucket prefix."""
        if self.bucket_prefix and key.startswith(self.bucket_prefix):
            key = key[len(self.bucket_prefix):]

        if key.endswith(DELIMITER):
            key = key[: -len(DELIMITER)]
        return key

    def relative_path(self, full_path_or_url: Optional[str]) -> str:
        """
        Recover the relative path from a public URL or a prefixed key.

        The host URL is tried first and the bucket prefix second; only the
        first one that matches is removed.
        """
        if not full_path_or_url:
            return ""

        value = full_path_or_url
        if value.startswith(DELIMITER):
            value = value[len(DELIMITER):]

        if _startswith_ignore_case(value, self.host_url):
            return value[len(self.host_url):]

        if _startswith_ignore_case(value, self.bucket_prefix):
            return value[len(self.bucket_prefix):]

        return value

    def _strip_host(self, path: str) -> str:
        for host in (self.host_url, self.host_name):
            if _startswith_ignore_case(path, host):
                return path[len(host):]
        return path

    @staticmethod
    def _normalize_separators(path: str) -> str:
        path = path.replace("\\", DELIMITER)
        if os.sep != DELIMITER:
            path = path.replace(os.sep, DELIMITER)
        return _REPEATED_DELIMITERS.sub(DELIMITER, path)

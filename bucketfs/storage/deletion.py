"""Batched deletion within the storage service's per-request key limit."""

from __future__ import annotations

import logging
from itertools import islice
from typing import Iterable, Iterator, List

from bucketfs.storage.client import ClientFactory, execute_request

logger = logging.getLogger("bucketfs.deletion")

MAX_BATCH_SIZE = 1000


def chunked(keys: Iterable[str], size: int) -> Iterator[List[str]]:
    iterator = iter(keys)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


class BatchDeleter:
    """Deletes keys in consecutive groups of at most ``batch_size``."""

    def __init__(self, client_factory: ClientFactory, batch_size: int = MAX_BATCH_SIZE):
        if batch_size < 1 or batch_size > MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}")
        self.client_factory = client_factory
        self.batch_size = batch_size

    def delete(self, bucket: str, keys: Iterable[str]) -> int:
        """
        Delete every key, one delete call per group.

        The first failing group stops the operation and its error propagates;
        groups already sent are not rolled back. No call is made for an empty
        key sequence.

        Returns:
            Number of keys deleted
        """
        deleted = 0
        for batch_number, batch in enumerate(chunked(keys, self.batch_size), start=1):
            logger.debug(
                f"Deleting batch {batch_number} ({len(batch)} keys) from {bucket}",
                extra={"operation": "delete"},
            )
            execute_request(
                self.client_factory,
                lambda client, batch=batch: client.delete_many(bucket, batch),
                operation="delete",
                key=batch[0],
            )
            deleted += len(batch)
        return deleted

"""Continuation-marker pagination over listing calls."""

from __future__ import annotations

import logging
from typing import Iterator

from bucketfs.core.errors import BucketFileSystemError
from bucketfs.storage.client import ClientFactory, execute_request
from bucketfs.storage.models import ListingPage, ListingRequest, ObjectSummary

logger = logging.getLogger("bucketfs.listing")


class PaginatedLister:
    """Follows continuation markers so callers see one lazy sequence of pages."""

    def __init__(self, client_factory: ClientFactory):
        self.client_factory = client_factory

    def pages(self, request: ListingRequest) -> Iterator[ListingPage]:
        """
        Yield listing pages for ``request``, fetching each only when asked for.

        The request's ``marker`` is advanced in place. The generator is single
        use; listing again needs a fresh call.
        """
        page_number = 1
        response = self._fetch(request, page_number)
        yield response

        while response.is_truncated:
            if not response.next_marker:
                raise BucketFileSystemError(
                    f"Truncated listing of {request.bucket}/{request.prefix} returned no continuation marker"
                )
            request.marker = response.next_marker
            page_number += 1
            response = self._fetch(request, page_number)
            yield response

    def object_summaries(self, request: ListingRequest) -> Iterator[ObjectSummary]:
        for page in self.pages(request):
            yield from page.object_summaries

    def common_prefixes(self, request: ListingRequest) -> Iterator[str]:
        for page in self.pages(request):
            yield from page.common_prefixes

    def _fetch(self, request: ListingRequest, page_number: int) -> ListingPage:
        logger.debug(
            f"Listing page {page_number} of {request.bucket}/{request.prefix} (marker={request.marker})",
            extra={"operation": "list", "key": request.prefix},
        )
        return execute_request(
            self.client_factory,
            lambda client: client.list(request),
            operation="list",
            key=request.prefix,
        )

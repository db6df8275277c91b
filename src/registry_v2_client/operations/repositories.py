"""Repository, tag and image listing."""

from typing import Optional

from ..transport.base import Transport
from .pagination import iterate_pages, walk_pages


async def list_repositories(
    transport: Transport, catalog_url: str, max_pages: Optional[int] = None
) -> list[str]:
    """List repository names from ``/v2/_catalog``, following all pages."""
    return await walk_pages(transport, catalog_url, "repositories", max_pages)


async def list_tags(
    transport: Transport, tags_url: str, max_pages: Optional[int] = None
) -> list[str]:
    """List tag names from ``/v2/<name>/tags/list``, following all pages."""
    return await walk_pages(transport, tags_url, "tags", max_pages)


async def list_image_digests(
    transport: Transport, tags_url: str, max_pages: Optional[int] = None
) -> list[str]:
    """List image digests from the ``manifest`` map of a tags listing.

    Only some registries (e.g. Google Container Registry) include the map;
    others yield an empty list.
    """
    digests: list[str] = []
    async for page in iterate_pages(transport, tags_url, max_pages):
        if isinstance(page, dict):
            digests.extend(page.get("manifest") or {})
    return digests

"""
Link Service

Business logic for creating, reading and deleting short links. Endpoints
validate and authorize; this service only ever receives values that already
passed shortbox.core validation.

Record format (stored as the value under the slug key):
    {url, slug, ip, userAgent, country, createdAt}
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from shortbox.core.exceptions import ShortboxException
from shortbox.services.link_store import LinkStore
from shortbox.services.slug_generator import generate_unique_slug

logger = logging.getLogger(__name__)

MAX_USER_AGENT_LENGTH = 512


class SlugTakenError(ShortboxException):
    """Raised when a custom slug is already in use."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Slug '{slug}' is already taken")


class ClientInfo(NamedTuple):
    """Request metadata recorded alongside a link."""
    ip: str
    user_agent: str
    country: str


def format_record(record: Dict[str, Any], base_url: str, include_private: bool) -> Dict[str, Any]:
    """
    Shape a stored record for API output.

    Args:
        record: Stored link record
        base_url: Origin used to build shortUrl
        include_private: Add ip and userAgent (admin callers only)
    """
    output = {
        "slug": record.get("slug"),
        "shortUrl": f"{base_url}/{record.get('slug')}",
        "url": record.get("url"),
        "createdAt": record.get("createdAt"),
        "country": record.get("country") or None,
    }
    if include_private:
        output["ip"] = record.get("ip") or None
        output["userAgent"] = record.get("userAgent") or None
    return output


class LinkService:
    """Create, look up, list and delete links in a LinkStore."""

    def __init__(self, store: LinkStore, code_length: int = 4, max_retries: int = 8):
        """
        Args:
            store: Key-value store for link records
            code_length: Base length of generated slugs
            max_retries: Collision-checked attempts for generated slugs
        """
        self.store = store
        self.code_length = code_length
        self.max_retries = max_retries

    async def shorten(
        self,
        url: str,
        client: ClientInfo,
        custom_slug: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Store a new link.

        Args:
            url: Canonical URL from validate_url
            client: Request metadata to record
            custom_slug: Slug from validate_assigned_slug, or None to generate one

        Returns:
            The stored record

        Raises:
            SlugTakenError: If custom_slug is already in use
            DatabaseError: If the store fails
        """
        if custom_slug is not None:
            if await self.store.exists(custom_slug):
                raise SlugTakenError(custom_slug)
            slug = custom_slug
        else:
            slug = await generate_unique_slug(self.store, self.code_length, self.max_retries)

        record = {
            "url": url,
            "slug": slug,
            "ip": client.ip,
            "userAgent": client.user_agent[:MAX_USER_AGENT_LENGTH],
            "country": client.country,
            "createdAt": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        }
        await self.store.put(slug, record)
        logger.info(f"Created link {slug}")
        return record

    async def lookup(self, slug: str) -> Optional[Dict[str, Any]]:
        return await self.store.get(slug)

    async def lookup_many(self, slugs: List[str]) -> Tuple[List[Dict[str, Any]], List[str]]:
        """
        Look up several slugs, preserving input order.

        Returns:
            (records found, slugs not found)
        """
        found = []
        not_found = []
        for slug in slugs:
            record = await self.store.get(slug)
            if record is not None:
                found.append(record)
            else:
                not_found.append(slug)
        return found, not_found

    async def list_all(self) -> List[Dict[str, Any]]:
        """Every stored record, walking the store page by page."""
        links = []
        cursor = None
        while True:
            page = await self.store.list(cursor=cursor)
            for key in page.keys:
                record = await self.store.get(key)
                if record is not None:
                    links.append(record)
            if page.list_complete or page.cursor is None:
                break
            cursor = page.cursor
        return links

    async def delete(self, slug: str) -> None:
        await self.store.delete(slug)
        logger.info(f"Deleted link {slug}")

    async def purge(self) -> int:
        """
        Delete every key.

        Returns:
            Number of keys deleted
        """
        deleted = 0
        cursor = None
        while True:
            page = await self.store.list(cursor=cursor)
            for key in page.keys:
                await self.store.delete(key)
            deleted += len(page.keys)
            if page.list_complete or page.cursor is None:
                break
            cursor = page.cursor
        logger.warning(f"Purged {deleted} links")
        return deleted

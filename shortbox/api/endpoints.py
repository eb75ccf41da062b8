"""
FastAPI Endpoints for the Link Shortener

Endpoints are thin. Each one:
- Reads the body through bounded JSON ingestion
- Validates fields with the shortbox.core validators
- Checks the admin bearer token where required
- Delegates to LinkService only after all of the above passed

Errors are raised as APIError and rendered as {"error": ...} JSON by the
handlers registered in shortbox.main.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shortbox.api.schemas import (
    AdminListResponse,
    BatchLookupResponse,
    DeleteResponse,
    PurgeResponse,
    ShortenResponse,
)
from shortbox.core.auth import check_bearer_auth
from shortbox.core.body import ingest_json_body
from shortbox.core.exceptions import APIError, DatabaseError
from shortbox.core.setting import settings
from shortbox.core.slugs import ROUTE_PREFIX, validate_assigned_slug, validate_lookup_slug
from shortbox.core.url_validator import validate_url
from shortbox.db.session import get_session
from shortbox.middleware.logging import get_client_ip
from shortbox.services.link_service import ClientInfo, LinkService, SlugTakenError, format_record
from shortbox.services.link_store import LinkStore

logger = logging.getLogger(__name__)

router = APIRouter()

# Validation failures on individual payload fields
UNPROCESSABLE_ENTITY = 422


def get_link_service(session: AsyncSession = Depends(get_session)) -> LinkService:
    """Dependency: a LinkService bound to this request's session."""
    return LinkService(
        LinkStore(session),
        code_length=settings.SHORT_CODE_LENGTH,
        max_retries=settings.MAX_SLUG_RETRIES,
    )


def get_base_url(request: Request) -> str:
    """Origin for short URLs: BASE_URL if configured, else the request's own."""
    if settings.BASE_URL:
        return settings.BASE_URL.rstrip("/")
    return f"{request.url.scheme}://{request.url.netloc}"


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip=get_client_ip(request),
        user_agent=request.headers.get("User-Agent") or "unknown",
        country=request.headers.get("CF-IPCountry") or "unknown",
    )


def is_admin(request: Request) -> bool:
    return check_bearer_auth(request.headers, settings.admin_secret())


def require_admin(request: Request) -> None:
    """
    Dependency guarding admin routes.

    Raises:
        APIError 401: If the bearer token is missing or wrong
    """
    if not is_admin(request):
        logger.warning(f"Rejected admin request from {get_client_ip(request)}")
        raise APIError(
            status.HTTP_401_UNAUTHORIZED,
            "Unauthorized.",
            headers={"WWW-Authenticate": f'Bearer realm="{settings.AUTH_REALM}"'},
        )


async def read_json_body(request: Request) -> Dict[str, Any]:
    """
    Ingest the request body under the configured byte cap.

    Raises:
        APIError 400: If the body is missing, too large, or not a JSON object
    """
    result = await ingest_json_body(
        request.headers.get("Content-Type"),
        request.headers.get("Content-Length"),
        request.stream(),
        max_bytes=settings.MAX_BODY_BYTES,
    )
    if not result.ok:
        logger.info(f"Rejected request body on {request.url.path}: {result.error}")
        raise APIError(status.HTTP_400_BAD_REQUEST, result.error)
    return result.value.data


def reject_field(message: str, **extra: Any) -> APIError:
    logger.info(f"Rejected payload field: {message}")
    return APIError(UNPROCESSABLE_ENTITY, message, extra=extra)


@router.post(
    "/api/shorten",
    response_model=ShortenResponse,
    summary="Create a short URL",
    description="Validates a URL (and optional custom slug) and stores a new short link"
)
async def create_short_url(
    request: Request,
    service: LinkService = Depends(get_link_service),
) -> ShortenResponse:
    """
    Create a new short link.

    Raises:
        APIError 400: Unreadable body or missing "url"
        APIError 422: Invalid URL or custom slug
        APIError 409: Custom slug already taken
    """
    body = await read_json_body(request)

    raw_url = body.get("url")
    if raw_url is None:
        raise APIError(status.HTTP_400_BAD_REQUEST, 'A "url" field is required.')

    url_result = validate_url(raw_url)
    if not url_result.ok:
        raise reject_field(url_result.error)

    custom_slug = None
    if "customSlug" in body:
        slug_result = validate_assigned_slug(body["customSlug"])
        if not slug_result.ok:
            raise reject_field(slug_result.error)
        custom_slug = slug_result.value

    try:
        record = await service.shorten(url_result.value, get_client_info(request), custom_slug)
    except SlugTakenError as e:
        raise APIError(
            status.HTTP_409_CONFLICT,
            f'The slug "{e.slug}" is already taken.',
            extra={"slug": e.slug},
        )

    return ShortenResponse(
        short_url=f"{get_base_url(request)}/{record['slug']}",
        slug=record["slug"],
        url=record["url"],
    )


@router.post(
    "/api/lookup",
    summary="Look up one or more short links",
    description='Accepts {"slug": "..."} or {"slugs": [...]}; admin callers also see ip and userAgent'
)
async def lookup_links(
    request: Request,
    service: LinkService = Depends(get_link_service),
):
    """
    Look up links by slug.

    Raises:
        APIError 400: Unreadable body, empty or oversized batch, or neither field given
        APIError 422: Invalid slug
        APIError 404: Single slug not found
    """
    body = await read_json_body(request)
    include_private = is_admin(request)
    base_url = get_base_url(request)

    if "slug" in body:
        slug_result = validate_lookup_slug(body["slug"])
        if not slug_result.ok:
            raise reject_field(slug_result.error)

        record = await service.lookup(slug_result.value)
        if record is None:
            raise APIError(
                status.HTTP_404_NOT_FOUND,
                "Slug not found.",
                extra={"slug": slug_result.value},
            )
        return format_record(record, base_url, include_private)

    slugs = body.get("slugs")
    if isinstance(slugs, list):
        if not slugs:
            raise APIError(status.HTTP_400_BAD_REQUEST, '"slugs" array must not be empty.')
        if len(slugs) > settings.BATCH_LIMIT:
            raise APIError(
                status.HTTP_400_BAD_REQUEST,
                f"Batch requests are limited to {settings.BATCH_LIMIT} slugs.",
            )

        # Every slug is validated before the store is touched
        validated = []
        for raw in slugs:
            slug_result = validate_lookup_slug(raw)
            if not slug_result.ok:
                raise reject_field(f'Invalid slug "{str(raw)[:40]}": {slug_result.error}')
            validated.append(slug_result.value)

        records, not_found = await service.lookup_many(validated)
        results = [format_record(record, base_url, include_private) for record in records]
        return BatchLookupResponse(results=results, not_found=not_found, count=len(results))

    raise APIError(
        status.HTTP_400_BAD_REQUEST,
        'Payload must include "slug" (string) or "slugs" (array of strings).',
        extra={"examples": {"single": {"slug": "ab3x"}, "batch": {"slugs": ["ab3x", "yz9q"]}}},
    )


@router.get(
    "/api/admin",
    response_model=AdminListResponse,
    dependencies=[Depends(require_admin)],
    summary="List all links (admin)"
)
async def list_links(service: LinkService = Depends(get_link_service)) -> AdminListResponse:
    try:
        links = await service.list_all()
    except DatabaseError as e:
        logger.error(f"Failed to list links: {e}", exc_info=True)
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to retrieve records.")
    return AdminListResponse(links=links, count=len(links))


@router.delete(
    "/api/admin",
    dependencies=[Depends(require_admin)],
    summary="Delete one link or purge all (admin)",
    description='Accepts {"slug": "..."} or {"purgeAll": true}'
)
async def delete_links(
    request: Request,
    service: LinkService = Depends(get_link_service),
):
    """
    Raises:
        APIError 400: Unreadable body or neither field given
        APIError 422: Invalid slug
        APIError 500: Store failure
    """
    body = await read_json_body(request)

    if body.get("purgeAll") is True:
        try:
            deleted = await service.purge()
        except DatabaseError as e:
            logger.error(f"Purge failed: {e}", exc_info=True)
            raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Purge failed.")
        return PurgeResponse(deleted=deleted)

    if "slug" in body:
        slug_result = validate_lookup_slug(body["slug"])
        if not slug_result.ok:
            raise reject_field(slug_result.error)
        try:
            await service.delete(slug_result.value)
        except DatabaseError as e:
            logger.error(f"Delete failed: {e}", exc_info=True)
            raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Delete failed.")
        return DeleteResponse(slug=slug_result.value)

    raise APIError(
        status.HTTP_400_BAD_REQUEST,
        'Provide either { "slug": "..." } to delete one, or { "purgeAll": true } to wipe all.',
    )


@router.get(
    "/{slug}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short code and redirects to the stored destination"
)
async def redirect_to_url(
    slug: str,
    service: LinkService = Depends(get_link_service),
) -> PlainTextResponse:
    """
    Redirect to the destination stored for a slug.

    Returns:
        302 with Location, 400 for a malformed slug, 404 if unknown
    """
    # Route-like and file-like paths are never short codes
    if slug.lower().startswith(ROUTE_PREFIX) or "." in slug:
        return PlainTextResponse("Not found.", status_code=status.HTTP_404_NOT_FOUND)

    slug_result = validate_lookup_slug(slug)
    if not slug_result.ok:
        return PlainTextResponse("Bad request.", status_code=status.HTTP_400_BAD_REQUEST)

    record = await service.lookup(slug_result.value)
    if record is None or not isinstance(record.get("url"), str):
        return PlainTextResponse("Not found.", status_code=status.HTTP_404_NOT_FOUND)

    destination = record["url"]
    return PlainTextResponse(
        f"Redirecting.\n\nDESTINATION: {destination}\n",
        status_code=status.HTTP_302_FOUND,
        headers={"Location": destination},
    )

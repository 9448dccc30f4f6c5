"""API routes implementation."""

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, HTTPException, Request, status

from ttl_shortener.common.logging_config import get_logger
from ttl_shortener.exceptions import StoreError, ValidationError
from ttl_shortener.policy import UpsertAction

from .schemas import (
    ActiveStatsResponse,
    BatchItemResponse,
    BatchRequest,
    DateGroup,
    ErrorResponse,
    HealthResponse,
    RecentUrlResponse,
    ShortenRequest,
    ShortenResponse,
    UrlRecordResponse,
)

router = APIRouter()
logger = get_logger("web")

INTERNAL_ERROR = "Internal server error."

ACTION_MESSAGES = {
    UpsertAction.CREATED: "New URL record created.",
    UpsertAction.REFRESHED_ACTIVE: (
        "Existing URL is still active; expiry and created updated, returning same short code."
    ),
    UpsertAction.ROTATED_EXPIRED: "Existing URL expired; updated with new short code.",
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


def _store_failure(endpoint: str, error: StoreError) -> HTTPException:
    logger.error(f"Error in {endpoint}: {error}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    responses=ERROR_RESPONSES,
    summary="Shorten a URL",
    description=(
        "Return the short code of a URL: a new one for unseen URLs, the same one "
        "(with a refreshed window) while active, a rotated one once expired."
    ),
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create, refresh or rotate the short code of a URL."""
    service = request.app.state.service

    try:
        result = await service.upsert(body.link, caller_expiry=body.expiry)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        raise _store_failure("/shorten", e)

    request.state.upsert = f"{result.action.value} {result.short_code}"
    return ShortenResponse(short_code=result.short_code, message=ACTION_MESSAGES[result.action])


@router.get(
    "/stats/active",
    response_model=ActiveStatsResponse,
    responses={500: ERROR_RESPONSES[500]},
    summary="Active URL statistics",
    description="Active records grouped by the UTC date they were created on.",
)
async def active_stats(request: Request):
    service = request.app.state.service

    try:
        stats = await service.active_stats()
    except StoreError as e:
        raise _store_failure("/stats/active", e)

    return ActiveStatsResponse(
        total=stats.total,
        groups=[DateGroup(date=group.date, count=group.count) for group in stats.groups],
        active_records=[UrlRecordResponse.from_record(record) for record in stats.active_records],
    )


@router.get(
    "/urls/recent",
    response_model=List[RecentUrlResponse],
    responses={500: ERROR_RESPONSES[500]},
    summary="Recent URLs",
    description="The most recently created short URLs, newest first.",
)
async def recent_urls(request: Request):
    service = request.app.state.service

    try:
        recent = await service.recent_urls()
    except StoreError as e:
        raise _store_failure("/urls/recent", e)

    return [
        RecentUrlResponse(short_code=short_code, original_url=original_url)
        for short_code, original_url in recent
    ]


@router.post(
    "/urls/batch",
    response_model=List[BatchItemResponse],
    responses=ERROR_RESPONSES,
    summary="Shorten several URLs",
    description="Apply the shorten rules to every link, in order, against one snapshot of the store.",
)
async def shorten_batch(request: Request, body: BatchRequest):
    service = request.app.state.service

    try:
        results = await service.upsert_batch(body.links, caller_expiry=body.expiry)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        raise _store_failure("/urls/batch", e)

    created = sum(result.tag == "created" for result in results)
    request.state.upsert = f"batch {len(results)}: {created} created, {len(results) - created} updated"

    return [
        BatchItemResponse(link=result.link, short_code=result.short_code, action=result.tag)
        for result in results
    ]


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service and its record store are healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        store="healthy" if health["store"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from linkhub_app.dependencies import get_click_context, get_link_service
from linkhub_app.schemas.common import ApiResponse, AvailabilityRequest, AvailabilityResponse
from linkhub_app.schemas.links import (
    ClickResponse,
    CreateLinkRequest,
    LinkResponse,
    LinkStats,
    LinkStatsResponse,
)
from linkhub_app.services.link_service import ClickContext, LinkService

router = APIRouter(prefix="/links", tags=["links"])


@router.post("", response_model=ApiResponse[LinkResponse], status_code=status.HTTP_201_CREATED)
def create_link(
    payload: CreateLinkRequest,
    context: ClickContext = Depends(get_click_context),
    link_service: LinkService = Depends(get_link_service),
):
    """Create a new short link (409 if the custom name is unavailable)"""
    link = link_service.create_link(
        original_url=payload.original_url,
        custom_name=payload.custom_name,
        expires_in_seconds=payload.expires_in_seconds,
        context=context,
    )
    return ApiResponse[LinkResponse](data=LinkResponse.model_validate(link))


@router.post("/check-availability", response_model=ApiResponse[AvailabilityResponse])
def check_availability(
    payload: AvailabilityRequest,
    link_service: LinkService = Depends(get_link_service),
):
    availability = link_service.check_availability(payload.custom_name)
    return ApiResponse[AvailabilityResponse](
        data=AvailabilityResponse(
            custom_name=payload.custom_name,
            available=availability.available,
            reason=availability.reason,
        )
    )


@router.get("", response_model=ApiResponse[List[LinkResponse]])
def list_links(
    limit: int = Query(50, ge=0, description="Page size, capped at 100; 0 falls back to 50"),
    offset: int = Query(0, ge=0),
    link_service: LinkService = Depends(get_link_service),
):
    links = link_service.list_links(limit=limit, offset=offset)
    return ApiResponse[List[LinkResponse]](data=[LinkResponse.model_validate(link) for link in links])


@router.get("/{short_name}", response_model=ApiResponse[LinkResponse])
def get_link(short_name: str, link_service: LinkService = Depends(get_link_service)):
    link = link_service.get_link(short_name)
    if not link:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="URL not found")
    return ApiResponse[LinkResponse](data=LinkResponse.model_validate(link))


@router.get("/{short_name}/stats", response_model=ApiResponse[LinkStatsResponse])
def get_link_stats(short_name: str, link_service: LinkService = Depends(get_link_service)):
    """Click totals for today / rolling week / calendar month plus the 10 latest clicks"""
    link = link_service.get_link(short_name)
    if not link:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="URL not found")

    stats = link_service.get_stats(link)
    return ApiResponse[LinkStatsResponse](
        data=LinkStatsResponse(
            short_name=link.short_name,
            original_url=link.original_url,
            custom_name=link.custom_name,
            created_at=link.created_at,
            stats=LinkStats(
                total_clicks=stats.total_clicks,
                clicks_today=stats.clicks_today,
                clicks_this_week=stats.clicks_this_week,
                clicks_this_month=stats.clicks_this_month,
                recent_clicks=[ClickResponse.model_validate(click) for click in stats.recent_clicks],
            ),
        )
    )


@router.delete("/{short_name}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_link(short_name: str, link_service: LinkService = Depends(get_link_service)):
    """Soft delete: the link stops redirecting and frees the keyspace check"""
    if not link_service.deactivate_link(short_name):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="URL not found")

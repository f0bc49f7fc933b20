from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from linkhub_app.dependencies import get_click_context, get_hub_service
from linkhub_app.schemas.common import ApiResponse, AvailabilityRequest, AvailabilityResponse
from linkhub_app.schemas.hubs import CreateHubRequest, HubResponse, HubStats, HubStatsResponse
from linkhub_app.schemas.records import HubEntry
from linkhub_app.services.hub_service import HubService
from linkhub_app.services.link_service import ClickContext

router = APIRouter(prefix="/hubs", tags=["hubs"])


@router.post("", response_model=ApiResponse[HubResponse], status_code=status.HTTP_201_CREATED)
def create_hub(
    payload: CreateHubRequest,
    context: ClickContext = Depends(get_click_context),
    hub_service: HubService = Depends(get_hub_service),
):
    hub = hub_service.create_hub(
        title=payload.title,
        description=payload.description,
        links=[HubEntry(title=link.title, url=link.url, order=link.order) for link in payload.links],
        custom_name=payload.custom_name,
        expires_in_seconds=payload.expires_in_seconds,
        context=context,
    )
    return ApiResponse[HubResponse](data=HubResponse.model_validate(hub))


@router.post("/check-availability", response_model=ApiResponse[AvailabilityResponse])
def check_availability(
    payload: AvailabilityRequest,
    hub_service: HubService = Depends(get_hub_service),
):
    availability = hub_service.check_availability(payload.custom_name)
    return ApiResponse[AvailabilityResponse](
        data=AvailabilityResponse(
            custom_name=payload.custom_name,
            available=availability.available,
            reason=availability.reason,
        )
    )


@router.get("", response_model=ApiResponse[List[HubResponse]])
def list_hubs(
    limit: int = Query(50, ge=0, description="Page size, capped at 100; 0 falls back to 50"),
    offset: int = Query(0, ge=0),
    hub_service: HubService = Depends(get_hub_service),
):
    hubs = hub_service.list_hubs(limit=limit, offset=offset)
    return ApiResponse[List[HubResponse]](data=[HubResponse.model_validate(hub) for hub in hubs])


@router.get("/{hub_name}", response_model=ApiResponse[HubResponse])
def get_hub(hub_name: str, hub_service: HubService = Depends(get_hub_service)):
    hub = hub_service.get_hub(hub_name)
    if not hub:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hub not found")
    return ApiResponse[HubResponse](data=HubResponse.model_validate(hub))


@router.get("/{hub_name}/stats", response_model=ApiResponse[HubStatsResponse])
def get_hub_stats(hub_name: str, hub_service: HubService = Depends(get_hub_service)):
    """Hubs only track a total visit count"""
    hub = hub_service.get_hub(hub_name)
    if not hub:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hub not found")

    return ApiResponse[HubStatsResponse](
        data=HubStatsResponse(
            hub_name=hub.hub_name,
            title=hub.title,
            description=hub.description,
            created_at=hub.created_at,
            stats=HubStats(total_clicks=hub.click_count),
        )
    )


@router.delete("/{hub_name}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_hub(hub_name: str, hub_service: HubService = Depends(get_hub_service)):
    if not hub_service.deactivate_hub(hub_name):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hub not found")

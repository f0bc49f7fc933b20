from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse

from linkhub_app.dependencies import get_click_context, get_hub_service, get_link_service
from linkhub_app.schemas.hubs import HubPageResponse, HubResponse
from linkhub_app.schemas.records import HubRecord
from linkhub_app.services.hub_service import HubService
from linkhub_app.services.link_service import ClickContext, LinkService

router = APIRouter(tags=["redirect"])


def _serve_hub(hub: Optional[HubRecord], hub_service: HubService) -> HubPageResponse:
    if not hub:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hub not found")

    if hub_service.is_expired(hub):
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Hub has expired")

    hub_service.record_visit(hub)
    return HubPageResponse(data=HubResponse.model_validate(hub))


@router.get("/h/{hub_name}", response_model=HubPageResponse)
def open_hub(hub_name: str, hub_service: HubService = Depends(get_hub_service)):
    """Hub content for client-side rendering"""
    return _serve_hub(hub_service.get_hub(hub_name), hub_service)


@router.get("/{short_name}", response_model=HubPageResponse, responses={302: {"description": "Redirect to the destination"}})
def redirect_to_original(
    short_name: str,
    context: ClickContext = Depends(get_click_context),
    link_service: LinkService = Depends(get_link_service),
    hub_service: HubService = Depends(get_hub_service),
):
    """
    Redirect dispatch.

    1. Active link: 410 if expired, otherwise record the click (best-effort)
       and 302 to the destination
    2. No link but an active hub with that name: serve the hub content
    3. Neither: 404
    """
    link = link_service.get_link(short_name)

    if link:
        if link_service.is_expired(link):
            raise HTTPException(status_code=status.HTTP_410_GONE, detail="URL has expired")

        link_service.record_click(link, context)
        return RedirectResponse(url=link.original_url, status_code=status.HTTP_302_FOUND)

    hub = hub_service.get_hub(short_name)
    if hub:
        return _serve_hub(hub, hub_service)

    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Short URL not found")

"""
Subscription routes.

POST /subscriptions            form email + name, double opt-in admission
GET  /subscriptions/confirm    confirmation link target
"""

from typing import Any

from fastapi import APIRouter, Depends, Form, Query
from fastapi.responses import HTMLResponse

from letterbox.api.container import AppContainer
from letterbox.api.deps import get_container
from letterbox.api.pages import confirmed_page
from letterbox.domain.entities import SubscriberStatus

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("")
def subscribe(
    email: str = Form(""),
    name: str = Form(""),
    container: AppContainer = Depends(get_container),
) -> dict[str, Any]:
    output = container.subscriptions.subscribe(email, name)
    return {
        "subscriber_id": str(output.subscriber_id),
        "status": SubscriberStatus.PENDING_CONFIRMATION.value,
    }


@router.get("/confirm", response_class=HTMLResponse)
def confirm(
    subscription_token: str = Query(...),
    container: AppContainer = Depends(get_container),
) -> HTMLResponse:
    container.confirmation.confirm(subscription_token)
    return HTMLResponse(confirmed_page())

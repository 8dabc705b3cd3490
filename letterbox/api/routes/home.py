from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from letterbox.api.pages import home_page

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def home() -> HTMLResponse:
    return HTMLResponse(home_page())

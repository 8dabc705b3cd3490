from fastapi import APIRouter, Response

router = APIRouter()


@router.get("/health-check")
def health_check() -> Response:
    """Liveness probe. 200 with an empty body."""
    return Response(status_code=200)

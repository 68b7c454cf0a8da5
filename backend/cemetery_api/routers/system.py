"""Unauthenticated system endpoints: health, CSRF token, option lists."""
from fastapi import APIRouter, Request

from ..constants import all_options
from ..csrf import current_csrf_token
from ..schemas import CsrfTokenResponse, HealthResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Liveness probe."""
    return HealthResponse(status="ok", message="DMP Cemetery API is running")


@router.get("/csrf-token", response_model=CsrfTokenResponse)
def get_csrf_token(request: Request):
    """Current CSRF token for the client to echo in the x-csrf-token header."""
    return CsrfTokenResponse(csrfToken=current_csrf_token(request))


@router.get("/options")
def get_options():
    """Enumerations used by the API's validation rules."""
    return all_options()

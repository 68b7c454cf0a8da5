"""Auth endpoints."""
import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..audit import AuditAction, audit_request
from ..auth import (
    Principal,
    authenticate_user,
    create_access_token,
    find_user_by_email,
    get_current_user,
    get_password_hash,
    principal_for,
    require_role,
)
from ..csrf import verify_csrf
from ..database import get_db
from ..errors import ConflictError, NotFoundError, UnauthorizedError
from ..models import User
from ..rate_limit import login_rate_limit
from ..schemas import LoginRequest, LoginResponse, UserCreate, UserResponse
from ..services.records import principal_uuid
from ..validation import validated_body

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
# Same message whether or not the email is taken, so registration can't be
# used to discover accounts.
REGISTRATION_REJECTED = "Unable to register user with the supplied details"


def _set_no_store(response: Response) -> None:
    # Reduce the chance of logging/caching tokens.
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(login_rate_limit)])
def login(
    request: Request,
    response: Response,
    payload: dict = Depends(validated_body(LoginRequest)),
    db: Session = Depends(get_db),
):
    """Login with email and password."""
    _set_no_store(response)

    user = authenticate_user(db, payload["email"], payload["password"])
    if user is None:
        audit_request(request, AuditAction.LOGIN_FAILED, {"email": payload["email"]})
        raise UnauthorizedError(INVALID_CREDENTIALS)

    principal = principal_for(user)
    token = create_access_token(principal, request.app.state.settings)
    audit_request(request, AuditAction.LOGIN_SUCCESS, user=principal)

    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=201,
    dependencies=[Depends(get_current_user), Depends(require_role("admin")), Depends(verify_csrf)],
)
def register(
    request: Request,
    payload: dict = Depends(validated_body(UserCreate)),
    db: Session = Depends(get_db),
):
    """Admin-only user creation."""
    if find_user_by_email(db, payload["email"]) is not None:
        raise ConflictError(REGISTRATION_REJECTED)

    user = User(
        email=payload["email"],
        password_hash=get_password_hash(payload["password"]),
        name=payload["name"],
        role=payload["role"] or "staff",
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    audit_request(request, AuditAction.USER_CREATED, {"userId": str(user.id), "role": user.role})
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
def get_me(
    response: Response,
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get current user info."""
    _set_no_store(response)
    user_id = principal_uuid(current_user)
    user = db.get(User, user_id) if user_id is not None else None
    if user is None:
        raise NotFoundError("User")
    return UserResponse.model_validate(user)

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from postboard.domain import commands
from postboard.entrypoints.dependencies import get_bus
from postboard.entrypoints.schemas.user import Token, User, UserRegister
from postboard.security import (
    TokenService,
    authenticate_user,
    get_current_user_id,
    get_token_service,
)
from postboard.service_layer.messagebus import MessageBus
from postboard.views import users as user_views

router = APIRouter(prefix="/api", tags=["users"])

logger = logging.getLogger(__name__)


@router.post("/register", response_model=Token, status_code=201)
async def register_user(
    user: UserRegister,
    bus: Annotated[MessageBus, Depends(get_bus)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
):
    cmd = commands.RegisterUser(name=user.name, email=user.email, password=user.password)
    [user_id] = bus.handle(cmd)
    logger.info(f"Registered user_id={user_id}")
    return {"access_token": token_service.issue(user_id), "token_type": "bearer"}


@router.post("/token", response_model=Token)
async def login(
    request: Request,
    bus: Annotated[MessageBus, Depends(get_bus)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
):
    """
    Token issuer for both JSON clients and OAuth2 password flow (form-encoded).
    - JSON: {"email": "...", "password": "..."}
    - Form: username/password (Swagger OAuth2 password flow)
    """
    login_email = None
    login_password = None

    # Prefer JSON if sent
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            payload = {}
        if isinstance(payload, dict):
            login_email = payload.get("email") or payload.get("username")
            login_password = payload.get("password")
    else:
        form = await request.form()
        login_email = form.get("username")
        login_password = form.get("password")

    if not login_email or not login_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email/username and password are required",
        )

    user = authenticate_user(bus.uow, str(login_email), str(login_password))
    return {"access_token": token_service.issue(user.user.id), "token_type": "bearer"}


@router.get("/user/me", response_model=User)
async def get_current_user_info(
    user_id: Annotated[int, Depends(get_current_user_id)],
    bus: Annotated[MessageBus, Depends(get_bus)],
):
    return user_views.get_profile(user_id, bus.uow)

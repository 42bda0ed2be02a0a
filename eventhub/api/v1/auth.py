from __future__ import annotations

from fastapi import APIRouter, Depends

from eventhub.api.v1.common import DBSession
from eventhub.api.v1.schemas import (
    ApiResponse,
    AuthData,
    LoginIn,
    ProfileUpdateIn,
    RegisterIn,
    UserData,
    UserOut,
)
from eventhub.auth.deps import require_capability
from eventhub.auth.policy import Capability
from eventhub.auth.tokens import Principal, create_access_token
from eventhub.models import User
from eventhub.services import users_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_data(user: User) -> AuthData:
    token = create_access_token(user.id, user.email, user.role)
    return AuthData(user=UserOut.model_validate(user), token=token)


@router.post("/register", response_model=ApiResponse[AuthData], status_code=201)
def register(payload: RegisterIn, db: DBSession):
    user = users_service.create_user(
        db,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        role=payload.role,
    )
    return ApiResponse[AuthData](message="User registered successfully", data=_auth_data(user))


@router.post("/login", response_model=ApiResponse[AuthData])
def login(payload: LoginIn, db: DBSession):
    user = users_service.authenticate(db, payload.email, payload.password)
    return ApiResponse[AuthData](message="Login successful", data=_auth_data(user))


@router.get("/profile", response_model=ApiResponse[UserData])
def get_profile(
    db: DBSession,
    principal: Principal = Depends(require_capability(Capability.EDIT_PROFILE)),
):
    user = users_service.get_user(db, principal.user_id)
    return ApiResponse[UserData](data=UserData(user=UserOut.model_validate(user)))


@router.put("/profile", response_model=ApiResponse[UserData])
def update_profile(
    payload: ProfileUpdateIn,
    db: DBSession,
    principal: Principal = Depends(require_capability(Capability.EDIT_PROFILE)),
):
    user = users_service.update_user(
        db,
        principal.user_id,
        name=payload.name,
        email=payload.email,
    )
    return ApiResponse[UserData](
        message="Profile updated successfully",
        data=UserData(user=UserOut.model_validate(user)),
    )

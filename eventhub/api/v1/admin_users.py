from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from eventhub.api.v1.common import DBSession, Pagination, parse_id
from eventhub.api.v1.schemas import ApiResponse, PaginationOut, SchemaBase, UserOut
from eventhub.auth.deps import require_capability
from eventhub.auth.policy import Capability
from eventhub.auth.tokens import Principal
from eventhub.services import users_service

router = APIRouter(prefix="/admin/users", tags=["admin"])

AdminUser = Annotated[Principal, Depends(require_capability(Capability.MANAGE_USERS))]


class UserListData(SchemaBase):
    users: list[UserOut]
    pagination: PaginationOut


@router.get("", response_model=ApiResponse[UserListData])
def list_users(db: DBSession, paging: Pagination, admin: AdminUser):
    users, total = users_service.list_users(db, paging.page, paging.limit)
    return ApiResponse[UserListData](
        data=UserListData(
            users=[UserOut.model_validate(u) for u in users],
            pagination=paging.out(total),
        )
    )


@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(user_id: str, db: DBSession, admin: AdminUser):
    users_service.delete_user(db, admin.user_id, parse_id(user_id, "user"))
    return ApiResponse[None](message="User deleted successfully")

"""
Admin user-management endpoints, mounted under /api/v1/admin.

Every route requires a bearer token belonging to an admin.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_admin_service, require_roles
from schemas.dto.responses.admin import (
    DashboardData,
    DashboardResponse,
    DashboardStats,
    UserActionResponse,
    UsersListData,
    UsersListResponse,
)
from schemas.dto.responses.auth import UserData, UserResponse
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.models.user import ROLE_ADMIN, UserDoc
from services.admin_service import AdminService

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)

require_admin = require_roles(ROLE_ADMIN)


@router.get("/users", response_model=UsersListResponse)
async def list_users(
    _: UserDoc = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> UsersListResponse:
    users = [UserResponse.from_doc(u) for u in await admin_service.list_users()]
    return UsersListResponse(
        message="Users retrieved successfully",
        data=UsersListData(users=users, count=len(users)),
    )


@router.put("/block/{user_id}", response_model=UserActionResponse)
async def block_user(
    user_id: str,
    admin: UserDoc = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> UserActionResponse:
    user = await admin_service.block_user(user_id, admin)
    return UserActionResponse(
        message="User blocked successfully",
        data=UserData(user=UserResponse.from_doc(user)),
    )


@router.put("/unblock/{user_id}", response_model=UserActionResponse)
async def unblock_user(
    user_id: str,
    admin: UserDoc = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> UserActionResponse:
    user = await admin_service.unblock_user(user_id, admin)
    return UserActionResponse(
        message="User unblocked successfully",
        data=UserData(user=UserResponse.from_doc(user)),
    )


@router.delete("/delete-user/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    admin: UserDoc = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> MessageResponse:
    await admin_service.delete_user(user_id, admin)
    return MessageResponse(message="User and all associated data deleted successfully")


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    _: UserDoc = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> DashboardResponse:
    stats = await admin_service.dashboard_stats()
    return DashboardResponse(
        message="Dashboard stats retrieved successfully",
        data=DashboardData(stats=DashboardStats(**stats)),
    )

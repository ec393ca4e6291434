"""
Response DTOs for admin user-management endpoints.

UsersListResponse    — GET /admin/users
UserActionResponse   — PUT /admin/block/{id}, PUT /admin/unblock/{id}
DashboardResponse    — GET /admin/dashboard
"""

from __future__ import annotations

from schemas.dto.responses.auth import UserData, UserResponse
from schemas.dto.responses.common import ApiModel


class UsersListData(ApiModel):
    users: list[UserResponse]
    count: int


class UsersListResponse(ApiModel):
    success: bool = True
    message: str
    data: UsersListData


class UserActionResponse(ApiModel):
    success: bool = True
    message: str
    data: UserData


class DashboardStats(ApiModel):
    total_users: int
    total_profiles: int
    total_projects: int
    blocked_users: int
    unverified_users: int


class DashboardData(ApiModel):
    stats: DashboardStats


class DashboardResponse(ApiModel):
    success: bool = True
    message: str
    data: DashboardData

"""
User Roles API - role memberships and effective permissions of a user.

Routes live under /users/{user_id}; the role bodies reuse the shape of the
/roles endpoints.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from typing import List, Optional
import logging

from app.api.dependencies import get_request_context, get_user_role_service
from app.api.roles import RoleResponse
from app.application.context import RequestContext
from app.application.user_role_use_cases import (
    AssignRoleUseCase,
    GetUserPermissionsUseCase,
    ListUserRolesUseCase,
    RevokeRoleUseCase,
)
from app.services.user_role_service import UserRoleDomainService

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Pydantic Models
# ============================================

class UserRolesResponse(BaseModel):
    data: List[RoleResponse]


class UserPermissionsResponse(BaseModel):
    """Combined permissions of the user's roles"""
    permissions_bit: int
    permissions_text: List[str]
    granted: Optional[bool] = None

    class Config:
        from_attributes = True


# ============================================
# Endpoints
# ============================================

@router.get("/users/{user_id}/roles", response_model=UserRolesResponse)
async def list_user_roles(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: UserRoleDomainService = Depends(get_user_role_service)
):
    roles = await ListUserRolesUseCase(service).execute(ctx, user_id)
    return UserRolesResponse(data=[RoleResponse.model_validate(role) for role in roles])


@router.put(
    "/users/{user_id}/roles/{role_id}",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_role(
    user_id: str,
    role_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: UserRoleDomainService = Depends(get_user_role_service)
):
    """Give the role to the user and return it; repeating the call changes nothing"""
    role = await AssignRoleUseCase(service).execute(ctx, user_id, role_id)
    return RoleResponse.model_validate(role)


@router.delete("/users/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_role(
    user_id: str,
    role_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: UserRoleDomainService = Depends(get_user_role_service)
):
    await RevokeRoleUseCase(service).execute(ctx, user_id, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/users/{user_id}/permissions",
    response_model=UserPermissionsResponse,
    response_model_exclude_none=True,
)
async def get_user_permissions(
    user_id: str,
    permission: Optional[str] = Query(None, description="Also report whether this permission is granted"),
    ctx: RequestContext = Depends(get_request_context),
    service: UserRoleDomainService = Depends(get_user_role_service)
):
    """
    OR of the permission masks of every role the user holds.

    Bits without a known flag are listed as ``PERMISSION_<index>``.
    """
    result = await GetUserPermissionsUseCase(service).execute(ctx, user_id, permission)
    logger.info(f"🔑 User {user_id} permissions {result.permissions_bit:#x} (request_id={ctx.request_id})")
    return UserPermissionsResponse.model_validate(result)

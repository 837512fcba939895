"""
Roles API - CRUD endpoints for roles and their permission sets.

Permissions are sent as a list of names (``["USER_READ", "ROLE_MANAGE"]``)
and returned both as names and as the stored bitmask.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
import logging

from app.api.dependencies import get_request_context, get_role_service
from app.application.context import RequestContext, RoleSearchParams
from app.application.dto import RoleDTO, RoleInput
from app.application.role_use_cases import (
    CreateRoleUseCase,
    DeleteRoleUseCase,
    FindRoleByIdUseCase,
    ListRolesUseCase,
    PatchRoleUseCase,
    PutRoleUseCase,
    SearchRolesUseCase,
)
from app.domain.permissions import KNOWN_PERMISSIONS
from app.services.role_service import RoleDomainService

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Pydantic Models
# ============================================

class RoleRequest(BaseModel):
    id: Optional[str] = Field(None, description="Role ID (generated on POST when omitted)")
    custom_id: Optional[str] = None
    name: Optional[str] = Field(None, description="1-50 characters")
    permission: Optional[List[str]] = Field(None, description="Permission names")
    is_enable: Optional[bool] = None
    is_system: Optional[bool] = Field(None, description="Only honoured on POST")

    def to_input(self) -> RoleInput:
        return RoleInput(
            id=self.id,
            custom_id=self.custom_id,
            name=self.name,
            permission=self.permission,
            is_enable=self.is_enable,
            is_system=self.is_system,
        )


class RoleResponse(BaseModel):
    id: str
    custom_id: str
    name: str
    permission: int
    permissions: List[str]
    is_enable: bool
    is_system: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RolesResponse(BaseModel):
    total_count: int
    pages: int
    data: List[RoleResponse]


class StatusResponse(BaseModel):
    status: str


def _to_response(dto: RoleDTO) -> RoleResponse:
    return RoleResponse.model_validate(dto)


# ============================================
# Endpoints
# ============================================

@router.get("/roles", response_model=RolesResponse)
async def list_roles(
    ctx: RequestContext = Depends(get_request_context),
    service: RoleDomainService = Depends(get_role_service)
):
    result = await ListRolesUseCase(service).execute(ctx)
    return RolesResponse(
        total_count=result.total_count,
        pages=result.pages,
        data=[_to_response(role) for role in result.roles],
    )


@router.get("/roles/permissions")
async def list_permissions():
    """Known permission names with their flag values"""
    return {"data": [{"name": p.name, "value": int(p)} for p in KNOWN_PERMISSIONS]}


@router.get("/roles/search", response_model=RolesResponse)
async def search_roles(
    id: Optional[str] = Query(None),
    custom_id: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    is_enable: Optional[str] = Query(None, description="true/false/1/0"),
    is_system: Optional[str] = Query(None, description="true/false/1/0"),
    ctx: RequestContext = Depends(get_request_context),
    service: RoleDomainService = Depends(get_role_service)
):
    params = RoleSearchParams(
        id=id,
        custom_id=custom_id,
        name=name,
        is_enable=is_enable,
        is_system=is_system,
    )
    result = await SearchRolesUseCase(service).execute(ctx, params)
    return RolesResponse(
        total_count=result.total_count,
        pages=result.pages,
        data=[_to_response(role) for role in result.roles],
    )


@router.get("/roles/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: RoleDomainService = Depends(get_role_service)
):
    return _to_response(await FindRoleByIdUseCase(service).execute(ctx, role_id))


@router.post("/roles", response_model=StatusResponse)
async def create_role(
    request: RoleRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: RoleDomainService = Depends(get_role_service)
):
    await CreateRoleUseCase(service).execute(ctx, request.to_input())
    return StatusResponse(status="success")


@router.put("/roles", status_code=status.HTTP_204_NO_CONTENT)
async def put_role(
    request: RoleRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: RoleDomainService = Depends(get_role_service)
):
    await PutRoleUseCase(service).execute(ctx, request.to_input())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/roles", status_code=status.HTTP_204_NO_CONTENT)
async def patch_role(
    request: RoleRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: RoleDomainService = Depends(get_role_service)
):
    await PatchRoleUseCase(service).execute(ctx, request.to_input())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: RoleDomainService = Depends(get_role_service)
):
    """Delete a role; built-in roles answer 403"""
    await DeleteRoleUseCase(service).execute(ctx, role_id)
    logger.info(f"🗑️ Role {role_id} removed (request_id={ctx.request_id})")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

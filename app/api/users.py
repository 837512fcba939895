"""
Users API - CRUD endpoints for user accounts.

Domain and application errors propagate to the handlers registered in
app.api.errors, which pick the status code and body.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
import logging

from app.api.dependencies import get_request_context, get_user_service
from app.application.context import RequestContext, UserSearchParams
from app.application.dto import UserDTO, UserInput
from app.application.user_use_cases import (
    CreateUserUseCase,
    DeleteUserUseCase,
    FindUserByIdUseCase,
    ListUsersUseCase,
    PatchUserUseCase,
    PutUserUseCase,
    SearchUsersUseCase,
)
from app.services.user_service import UserDomainService

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Pydantic Models
# ============================================

class UserRequest(BaseModel):
    """User body for POST, PUT and PATCH (PUT/PATCH require id)"""
    id: Optional[str] = Field(None, description="User ID (generated on POST when omitted)")
    email: Optional[str] = Field(None, description="Internal address: {period}.{custom_id}@uniproject.jp")
    custom_id: Optional[str] = Field(None, description="1-10 chars of [A-Za-z0-9_-]")
    name: Optional[str] = None
    external_email: Optional[str] = None
    period: Optional[str] = Field(None, description='Enrollment period, "0" for none')
    is_enable: Optional[bool] = None
    password_hash: Optional[str] = Field(None, description="Precomputed hash, stored as is")
    password: Optional[str] = Field(None, description="Plain password, hashed with bcrypt")
    joined_at: Optional[datetime] = None

    def to_input(self) -> UserInput:
        return UserInput(
            id=self.id,
            email=self.email,
            custom_id=self.custom_id,
            name=self.name,
            external_email=self.external_email,
            period=self.period,
            is_enable=self.is_enable,
            password_hash=self.password_hash,
            password=self.password,
            joined_at=self.joined_at,
        )


class UserResponse(BaseModel):
    """User details (password hash excluded)"""
    id: str
    email: str
    custom_id: str
    name: str
    external_email: str
    period: str
    is_enable: bool
    joined_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UsersResponse(BaseModel):
    total_count: int
    pages: int
    users: List[UserResponse]


class StatusResponse(BaseModel):
    status: str


def _to_response(dto: UserDTO) -> UserResponse:
    return UserResponse.model_validate(dto)


# ============================================
# Endpoints
# ============================================

@router.get("/users", response_model=UsersResponse)
async def list_users(
    ctx: RequestContext = Depends(get_request_context),
    service: UserDomainService = Depends(get_user_service)
):
    """List users ordered by id, paginated with limit/page"""
    result = await ListUsersUseCase(service).execute(ctx)
    return UsersResponse(
        total_count=result.total_count,
        pages=result.pages,
        users=[_to_response(user) for user in result.users],
    )


@router.get("/users/search", response_model=UsersResponse)
async def search_users(
    id: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    custom_id: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    external_email: Optional[str] = Query(None),
    period: Optional[str] = Query(None),
    is_enable: Optional[str] = Query(None, description="true/false/1/0"),
    ctx: RequestContext = Depends(get_request_context),
    service: UserDomainService = Depends(get_user_service)
):
    """
    Exact-match search. Omitted parameters are ignored; an empty value
    (``?name=``) matches users whose field is empty.
    """
    params = UserSearchParams(
        id=id,
        email=email,
        custom_id=custom_id,
        name=name,
        external_email=external_email,
        period=period,
        is_enable=is_enable,
    )
    result = await SearchUsersUseCase(service).execute(ctx, params)
    logger.info(f"🔍 User search returned {len(result.users)}/{result.total_count} (request_id={ctx.request_id})")
    return UsersResponse(
        total_count=result.total_count,
        pages=result.pages,
        users=[_to_response(user) for user in result.users],
    )


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: UserDomainService = Depends(get_user_service)
):
    return _to_response(await FindUserByIdUseCase(service).execute(ctx, user_id))


@router.post("/users", response_model=StatusResponse, status_code=status.HTTP_200_OK)
async def create_user(
    request: UserRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: UserDomainService = Depends(get_user_service)
):
    logger.info(f"Registering user {request.custom_id} (request_id={ctx.request_id})")
    await CreateUserUseCase(service).execute(ctx, request.to_input())
    return StatusResponse(status="success")


@router.put("/users", status_code=status.HTTP_204_NO_CONTENT)
async def put_user(
    request: UserRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: UserDomainService = Depends(get_user_service)
):
    """Replace a user; the body must carry its id"""
    await PutUserUseCase(service).execute(ctx, request.to_input())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/users", status_code=status.HTTP_204_NO_CONTENT)
async def patch_user(
    request: UserRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: UserDomainService = Depends(get_user_service)
):
    """Update only the fields present in the body; the body must carry the id"""
    await PatchUserUseCase(service).execute(ctx, request.to_input())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: UserDomainService = Depends(get_user_service)
):
    await DeleteUserUseCase(service).execute(ctx, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

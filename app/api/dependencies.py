"""
FastAPI dependencies shared by the user and role routers.
"""
from typing import Optional

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.context import RequestContext
from app.config import settings
from app.db.connection import get_db_session
from app.repositories.role_repository import RoleRepository
from app.repositories.user_repository import UserRepository
from app.repositories.user_role_repository import UserRoleRepository
from app.services.role_service import RoleDomainService
from app.services.user_role_service import UserRoleDomainService
from app.services.user_service import UserDomainService


def get_request_id(request: Request) -> str:
    """Request ID assigned by the middleware in app.main"""
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID", "")


def get_request_context(
    request: Request,
    limit: Optional[str] = Query(None, description="Page size (default 100)"),
    page: Optional[str] = Query(None, description="1-based page number"),
) -> RequestContext:
    """
    Build the RequestContext from the query string.

    limit and page are taken as raw strings so unparseable values fall back
    to the defaults instead of failing validation.
    """
    return RequestContext.from_query(
        request_id=get_request_id(request),
        limit=limit,
        page=page,
        default_limit=settings.default_page_limit,
    )


def get_user_service(db: AsyncSession = Depends(get_db_session)) -> UserDomainService:
    return UserDomainService(UserRepository(db))


def get_role_service(db: AsyncSession = Depends(get_db_session)) -> RoleDomainService:
    return RoleDomainService(RoleRepository(db))


def get_user_role_service(db: AsyncSession = Depends(get_db_session)) -> UserRoleDomainService:
    return UserRoleDomainService(
        UserRepository(db),
        RoleRepository(db),
        UserRoleRepository(db),
    )

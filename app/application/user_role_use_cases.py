"""
Role membership use cases - roles held by a user and the permissions they add up to.
"""

from typing import List, Optional
import logging

from app.application.context import RequestContext, require_context
from app.application.dto import RoleDTO, UserPermissionsDTO
from app.services.user_role_service import UserRoleDomainService

logger = logging.getLogger(__name__)


class _UserRoleUseCase:
    def __init__(self, service: UserRoleDomainService):
        self._service = service


class ListUserRolesUseCase(_UserRoleUseCase):
    async def execute(self, ctx: RequestContext, user_id: str) -> List[RoleDTO]:
        ctx = require_context(ctx)
        roles = await self._service.roles_of(ctx, user_id)
        return [RoleDTO.from_entity(role) for role in roles]


class AssignRoleUseCase(_UserRoleUseCase):
    async def execute(self, ctx: RequestContext, user_id: str, role_id: str) -> RoleDTO:
        ctx = require_context(ctx)
        role = await self._service.assign(ctx, user_id, role_id)
        logger.info(f"✅ User {user_id} now holds role {role.custom_id} (request_id={ctx.request_id})")
        return RoleDTO.from_entity(role)


class RevokeRoleUseCase(_UserRoleUseCase):
    async def execute(self, ctx: RequestContext, user_id: str, role_id: str) -> None:
        ctx = require_context(ctx)
        await self._service.revoke(ctx, user_id, role_id)


class GetUserPermissionsUseCase(_UserRoleUseCase):
    async def execute(
        self,
        ctx: RequestContext,
        user_id: str,
        permission: Optional[str] = None
    ) -> UserPermissionsDTO:
        """
        Combined permissions of every role the user holds.

        When ``permission`` is given, ``granted`` reports whether the
        combined mask includes it (unknown names are never granted).
        """
        ctx = require_context(ctx)
        effective = await self._service.effective_permissions(ctx, user_id)
        return UserPermissionsDTO(
            permissions_bit=effective.bits,
            permissions_text=effective.names,
            granted=effective.grants(permission) if permission is not None else None,
        )

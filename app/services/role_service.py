"""
Role Service - single choke point between use cases and role persistence.
"""
from typing import List, Tuple
import logging

from app.application.context import RequestContext, RoleSearchParams
from app.core.interfaces import IRoleRepository
from app.domain.entities import Role
from app.domain.exceptions import RoleNotFoundError, SystemRoleError

logger = logging.getLogger(__name__)


class RoleDomainService:
    """
    Domain service for roles.

    Same contract as UserDomainService, plus: built-in (system) roles
    cannot be deleted.
    """

    def __init__(self, repository: IRoleRepository):
        self._repo = repository

    async def list(self, ctx: RequestContext) -> Tuple[List[Role], int]:
        return await self._repo.list(ctx)

    async def find_by_id(self, ctx: RequestContext, role_id: str) -> Role:
        role = await self._repo.find_by_id(ctx, role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

    async def search(
        self,
        ctx: RequestContext,
        params: RoleSearchParams
    ) -> Tuple[List[Role], int]:
        return await self._repo.search(ctx, params)

    async def create(self, ctx: RequestContext, role: Role) -> Role:
        role.validate()
        return await self._repo.create(ctx, role)

    async def save(self, ctx: RequestContext, role: Role) -> Role:
        role.validate()
        return await self._repo.save(ctx, role)

    async def update(self, ctx: RequestContext, role: Role) -> Role:
        role.validate()
        return await self._repo.update(ctx, role)

    async def delete(self, ctx: RequestContext, role_id: str) -> None:
        """
        Raises:
            RoleNotFoundError: If the role doesn't exist
            SystemRoleError: If the role is built in
        """
        role = await self.find_by_id(ctx, role_id)
        if role.is_system:
            logger.warning(f"Refused to delete system role {role_id} (request_id={ctx.request_id})")
            raise SystemRoleError(role_id)

        if not await self._repo.delete(ctx, role_id):
            raise RoleNotFoundError(role_id)

"""
User Role Service - role memberships and the permissions they grant.
"""
from typing import List
import logging

from app.application.context import RequestContext
from app.core.interfaces import IRoleRepository, IUserRepository, IUserRoleRepository
from app.domain.entities import EffectivePermissions, Role, User
from app.domain.exceptions import RoleNotAssignedError, RoleNotFoundError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserRoleDomainService:
    """
    Domain service for role memberships.

    Both sides of a membership must exist: a missing user raises
    UserNotFoundError before a missing role raises RoleNotFoundError.
    """

    def __init__(
        self,
        users: IUserRepository,
        roles: IRoleRepository,
        memberships: IUserRoleRepository,
    ):
        self._users = users
        self._roles = roles
        self._memberships = memberships

    async def roles_of(self, ctx: RequestContext, user_id: str) -> List[Role]:
        await self._require_user(ctx, user_id)
        return await self._memberships.list_roles(ctx, user_id)

    async def assign(self, ctx: RequestContext, user_id: str, role_id: str) -> Role:
        """
        Give a role to a user; assigning a held role again is a no-op.

        Returns:
            The assigned role
        """
        await self._require_user(ctx, user_id)
        role = await self._require_role(ctx, role_id)
        await self._memberships.assign(ctx, user_id, role_id)
        return role

    async def revoke(self, ctx: RequestContext, user_id: str, role_id: str) -> Role:
        """
        Raises:
            UserNotFoundError, RoleNotFoundError
            RoleNotAssignedError: If the user doesn't hold the role
        """
        await self._require_user(ctx, user_id)
        role = await self._require_role(ctx, role_id)
        if not await self._memberships.revoke(ctx, user_id, role_id):
            logger.warning(f"User {user_id} does not hold role {role_id} (request_id={ctx.request_id})")
            raise RoleNotAssignedError(user_id, role_id)
        return role

    async def effective_permissions(self, ctx: RequestContext, user_id: str) -> EffectivePermissions:
        await self._require_user(ctx, user_id)
        masks = await self._memberships.permission_masks(ctx, user_id)
        return EffectivePermissions.combine(user_id, masks)

    async def _require_user(self, ctx: RequestContext, user_id: str) -> User:
        user = await self._users.find_by_id(ctx, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _require_role(self, ctx: RequestContext, role_id: str) -> Role:
        role = await self._roles.find_by_id(ctx, role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

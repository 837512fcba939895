"""
User Service - single choke point between use cases and user persistence.

Validates users before every write and turns a missing row into
UserNotFoundError. Validation and duplicate-entry errors are raised
unchanged so the HTTP layer can match on their type.
"""
from typing import List, Tuple
import logging

from app.application.context import RequestContext, UserSearchParams
from app.core.interfaces import IUserRepository
from app.domain.entities import User
from app.domain.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)


class UserDomainService:
    """Domain service for users"""

    def __init__(self, repository: IUserRepository):
        self._repo = repository

    async def list(self, ctx: RequestContext) -> Tuple[List[User], int]:
        return await self._repo.list(ctx)

    async def find_by_id(self, ctx: RequestContext, user_id: str) -> User:
        """
        Raises:
            UserNotFoundError: If no user has this ID
        """
        user = await self._repo.find_by_id(ctx, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def search(
        self,
        ctx: RequestContext,
        params: UserSearchParams
    ) -> Tuple[List[User], int]:
        return await self._repo.search(ctx, params)

    async def create(self, ctx: RequestContext, user: User) -> User:
        """
        Validate and insert a new user.

        Raises:
            InvalidCustomIdError, InvalidEmailError, InvalidExternalEmailError
            DuplicateEntryError: If id, custom_id or email is taken
        """
        user.validate()
        return await self._repo.create(ctx, user)

    async def save(self, ctx: RequestContext, user: User) -> User:
        """Validate and replace a stored user (PUT)"""
        user.validate()
        return await self._repo.save(ctx, user)

    async def update(self, ctx: RequestContext, user: User) -> User:
        """Validate and write the editable columns of a stored user (PATCH)"""
        user.validate()
        return await self._repo.update(ctx, user)

    async def delete(self, ctx: RequestContext, user_id: str) -> None:
        """
        Raises:
            UserNotFoundError: If nothing was deleted
        """
        if not await self._repo.delete(ctx, user_id):
            raise UserNotFoundError(user_id)
        logger.info(f"User {user_id} deleted (request_id={ctx.request_id})")

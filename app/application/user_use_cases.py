"""
User use cases - one class per HTTP operation.

Every use case receives the RequestContext explicitly and checks it before
touching the domain service. Entities never leave this module; callers get
DTOs.
"""

from typing import Optional
import logging
import uuid

from app.application.context import (
    RequestContext,
    UserSearchParams,
    require_context,
    require_search_params,
)
from app.application.dto import UserDTO, UserInput, UserListDTO
from app.application.errors import MissingIdentifierError
from app.domain.entities import User
from app.domain.exceptions import InvalidPasswordError
from app.services.user_service import UserDomainService
from app.utils.password_hash import hash_password

logger = logging.getLogger(__name__)


def _password_hash(data: UserInput) -> Optional[str]:
    """A plain password wins over a supplied hash"""
    if data.password is not None:
        try:
            return hash_password(data.password)
        except ValueError as e:
            raise InvalidPasswordError(str(e))
    return data.password_hash or None


def _require_id(data: UserInput) -> str:
    if not data.id:
        raise MissingIdentifierError("User")
    return data.id


class _UserUseCase:
    def __init__(self, service: UserDomainService):
        self._service = service


class ListUsersUseCase(_UserUseCase):
    async def execute(self, ctx: RequestContext) -> UserListDTO:
        ctx = require_context(ctx)
        users, total = await self._service.list(ctx)
        return UserListDTO(
            total_count=total,
            pages=ctx.page_count(total),
            users=[UserDTO.from_entity(user) for user in users],
        )


class FindUserByIdUseCase(_UserUseCase):
    async def execute(self, ctx: RequestContext, user_id: str) -> UserDTO:
        ctx = require_context(ctx)
        user = await self._service.find_by_id(ctx, user_id)
        return UserDTO.from_entity(user)


class SearchUsersUseCase(_UserUseCase):
    async def execute(
        self,
        ctx: RequestContext,
        params: Optional[UserSearchParams]
    ) -> UserListDTO:
        """
        Raises:
            InvalidRequestContextError: If ctx is unusable
            InvalidSearchParamsError: If params are missing or is_enable is not a boolean
        """
        ctx = require_context(ctx)
        params = require_search_params(params, UserSearchParams)

        users, total = await self._service.search(ctx, params)
        return UserListDTO(
            total_count=total,
            pages=ctx.page_count(total),
            users=[UserDTO.from_entity(user) for user in users],
        )


class CreateUserUseCase(_UserUseCase):
    async def execute(self, ctx: RequestContext, data: UserInput) -> UserDTO:
        """
        Create a user; a missing id is generated.

        Omitted string fields are treated as empty and rejected by validation
        where the rules require a value.
        """
        ctx = require_context(ctx)

        user = User.create(
            id=data.id or str(uuid.uuid4()),
            email=data.email or "",
            custom_id=data.custom_id or "",
            name=data.name or "",
            external_email=data.external_email or "",
            period=data.period or "",
            is_enable=True if data.is_enable is None else data.is_enable,
            password_hash=_password_hash(data),
            joined_at=data.joined_at,
        )
        created = await self._service.create(ctx, user)
        logger.info(f"✅ User {created.id} registered (request_id={ctx.request_id})")
        return UserDTO.from_entity(created)


class PutUserUseCase(_UserUseCase):
    async def execute(self, ctx: RequestContext, data: UserInput) -> UserDTO:
        """
        Replace every editable field of an existing user.

        id and created_at are kept. The stored password hash is kept unless
        the body carries a new password or hash.
        """
        ctx = require_context(ctx)
        user_id = _require_id(data)

        existing = await self._service.find_by_id(ctx, user_id)
        replacement = User.create(
            id=existing.id,
            email=data.email or "",
            custom_id=data.custom_id or "",
            name=data.name or "",
            external_email=data.external_email or "",
            period=data.period or "",
            is_enable=True if data.is_enable is None else data.is_enable,
            password_hash=_password_hash(data) or existing.password_hash,
            created_at=existing.created_at,
            updated_at=existing.updated_at,
            joined_at=data.joined_at,
        )
        saved = await self._service.save(ctx, replacement)
        return UserDTO.from_entity(saved)


class PatchUserUseCase(_UserUseCase):
    async def execute(self, ctx: RequestContext, data: UserInput) -> UserDTO:
        """Merge the supplied fields over the stored user, then validate the result"""
        ctx = require_context(ctx)
        user_id = _require_id(data)

        existing = await self._service.find_by_id(ctx, user_id)
        changes = data.supplied_profile()
        new_hash = _password_hash(data)
        if new_hash is not None:
            changes["password_hash"] = new_hash

        logger.debug(f"Patching user {user_id} fields {sorted(changes)} (request_id={ctx.request_id})")
        updated = await self._service.update(ctx, existing.with_changes(**changes))
        return UserDTO.from_entity(updated)


class DeleteUserUseCase(_UserUseCase):
    async def execute(self, ctx: RequestContext, user_id: str) -> None:
        ctx = require_context(ctx)
        await self._service.delete(ctx, user_id)

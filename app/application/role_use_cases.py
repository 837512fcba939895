"""
Role use cases - one class per HTTP operation.
"""

from typing import Optional
import logging
import uuid

from app.application.context import (
    RequestContext,
    RoleSearchParams,
    require_context,
    require_search_params,
)
from app.application.dto import RoleDTO, RoleInput, RoleListDTO
from app.application.errors import MissingIdentifierError
from app.domain.entities import Role
from app.services.role_service import RoleDomainService

logger = logging.getLogger(__name__)

ROLE_FLAG_FIELDS = ("is_enable", "is_system")


def _require_id(data: RoleInput) -> str:
    if not data.id:
        raise MissingIdentifierError("Role")
    return data.id


class _RoleUseCase:
    def __init__(self, service: RoleDomainService):
        self._service = service


class ListRolesUseCase(_RoleUseCase):
    async def execute(self, ctx: RequestContext) -> RoleListDTO:
        ctx = require_context(ctx)
        roles, total = await self._service.list(ctx)
        return RoleListDTO(
            total_count=total,
            pages=ctx.page_count(total),
            roles=[RoleDTO.from_entity(role) for role in roles],
        )


class FindRoleByIdUseCase(_RoleUseCase):
    async def execute(self, ctx: RequestContext, role_id: str) -> RoleDTO:
        ctx = require_context(ctx)
        return RoleDTO.from_entity(await self._service.find_by_id(ctx, role_id))


class SearchRolesUseCase(_RoleUseCase):
    async def execute(
        self,
        ctx: RequestContext,
        params: Optional[RoleSearchParams]
    ) -> RoleListDTO:
        ctx = require_context(ctx)
        params = require_search_params(params, RoleSearchParams, flag_fields=ROLE_FLAG_FIELDS)

        roles, total = await self._service.search(ctx, params)
        return RoleListDTO(
            total_count=total,
            pages=ctx.page_count(total),
            roles=[RoleDTO.from_entity(role) for role in roles],
        )


class CreateRoleUseCase(_RoleUseCase):
    async def execute(self, ctx: RequestContext, data: RoleInput) -> RoleDTO:
        ctx = require_context(ctx)

        role = Role.create(
            id=data.id or str(uuid.uuid4()),
            custom_id=data.custom_id or "",
            name=data.name or "",
            permissions=data.permission or [],
            is_enable=True if data.is_enable is None else data.is_enable,
            is_system=bool(data.is_system),
        )
        created = await self._service.create(ctx, role)
        logger.info(
            f"✅ Role {created.id} created with permission {created.permission_bits:#x} "
            f"(request_id={ctx.request_id})"
        )
        return RoleDTO.from_entity(created)


class PutRoleUseCase(_RoleUseCase):
    async def execute(self, ctx: RequestContext, data: RoleInput) -> RoleDTO:
        """Replace custom_id, name, permissions and enabled flag; is_system is kept"""
        ctx = require_context(ctx)
        role_id = _require_id(data)

        existing = await self._service.find_by_id(ctx, role_id)
        replacement = Role.create(
            id=existing.id,
            custom_id=data.custom_id or "",
            name=data.name or "",
            permissions=data.permission or [],
            is_enable=True if data.is_enable is None else data.is_enable,
            is_system=existing.is_system,
            created_at=existing.created_at,
            updated_at=existing.updated_at,
        )
        return RoleDTO.from_entity(await self._service.save(ctx, replacement))


class PatchRoleUseCase(_RoleUseCase):
    async def execute(self, ctx: RequestContext, data: RoleInput) -> RoleDTO:
        ctx = require_context(ctx)
        role_id = _require_id(data)

        existing = await self._service.find_by_id(ctx, role_id)
        merged = existing.with_changes(**data.supplied_editable())
        return RoleDTO.from_entity(await self._service.update(ctx, merged))


class DeleteRoleUseCase(_RoleUseCase):
    async def execute(self, ctx: RequestContext, role_id: str) -> None:
        ctx = require_context(ctx)
        await self._service.delete(ctx, role_id)

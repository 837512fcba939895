"""
Role repository implementation using SQLAlchemy.

Permissions are persisted as a bitmask; names are rebuilt from the known
flags when loading, so unknown stored bits are dropped.
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete, update
from sqlalchemy.exc import IntegrityError
import logging

from app.application.context import RequestContext, RoleSearchParams, parse_flag
from app.core.interfaces import IRoleRepository
from app.db.errors import is_duplicate_entry
from app.db.models import RoleModel, UserRoleModel
from app.domain.entities import PermissionSet, Role
from app.domain.exceptions import DuplicateEntryError, RoleNotFoundError
from app.domain.value_objects import CustomId, RoleName

logger = logging.getLogger(__name__)

BOOLEAN_FILTERS = {"is_enable", "is_system"}


class RoleRepository(IRoleRepository):
    """SQLAlchemy implementation of IRoleRepository"""

    def __init__(self, session: AsyncSession):
        self._db = session

    async def list(self, ctx: RequestContext) -> Tuple[List[Role], int]:
        return await self._page(ctx, [])

    async def find_by_id(self, ctx: RequestContext, role_id: str) -> Optional[Role]:
        row = await self._db.get(RoleModel, role_id)
        return role_from_orm(row) if row is not None else None

    async def search(
        self,
        ctx: RequestContext,
        params: RoleSearchParams
    ) -> Tuple[List[Role], int]:
        filters = []
        for column_name, value in params.supplied().items():
            column = getattr(RoleModel, column_name)
            if column_name in BOOLEAN_FILTERS:
                filters.append(column == parse_flag(value))
            else:
                filters.append(column == value)
        return await self._page(ctx, filters)

    async def create(self, ctx: RequestContext, role: Role) -> Role:
        now = datetime.now(timezone.utc)
        role = role.with_changes(created_at=now, updated_at=now)
        self._db.add(self._to_orm(role))
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise self._classify(ctx, role, e)

        logger.info(f"💾 Created role {role.id} ({role.custom_id}) (request_id={ctx.request_id})")
        return role

    async def save(self, ctx: RequestContext, role: Role) -> Role:
        row = await self._db.get(RoleModel, role.id)
        if row is None:
            raise RoleNotFoundError(role.id)

        role = role.with_changes(created_at=row.created_at, updated_at=datetime.now(timezone.utc))
        row.custom_id = role.custom_id.value
        row.name = role.name.value
        row.permission = role.permission_bits
        row.is_enable = role.is_enable
        row.is_system = role.is_system
        row.updated_at = role.updated_at
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise self._classify(ctx, role, e)

        logger.info(f"💾 Saved role {role.id} (request_id={ctx.request_id})")
        return role

    async def update(self, ctx: RequestContext, role: Role) -> Role:
        now = datetime.now(timezone.utc)
        stmt = (
            update(RoleModel)
            .where(RoleModel.id == role.id)
            .values(
                custom_id=role.custom_id.value,
                name=role.name.value,
                permission=role.permission_bits,
                is_enable=role.is_enable,
                updated_at=now,
            )
        )
        try:
            result = await self._db.execute(stmt)
            if result.rowcount == 0:
                await self._db.rollback()
                raise RoleNotFoundError(role.id)
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise self._classify(ctx, role, e)

        logger.info(f"💾 Updated role {role.id} (request_id={ctx.request_id})")
        return role.with_changes(updated_at=now)

    async def delete(self, ctx: RequestContext, role_id: str) -> bool:
        # SQLite does not enforce ON DELETE CASCADE without PRAGMA foreign_keys
        await self._db.execute(delete(UserRoleModel).where(UserRoleModel.role_id == role_id))
        result = await self._db.execute(delete(RoleModel).where(RoleModel.id == role_id))
        await self._db.commit()
        logger.info(f"🗑️ Delete role {role_id}: {result.rowcount} row(s) (request_id={ctx.request_id})")
        return result.rowcount > 0

    async def _page(self, ctx: RequestContext, filters: list) -> Tuple[List[Role], int]:
        stmt = (
            select(RoleModel)
            .where(*filters)
            .order_by(RoleModel.id.asc())
            .limit(ctx.limit)
            .offset(ctx.offset)
        )
        result = await self._db.execute(stmt)
        rows = result.scalars().all()

        count_result = await self._db.execute(
            select(func.count()).select_from(RoleModel).where(*filters)
        )
        total = count_result.scalar_one()

        logger.debug(f"📖 Loaded {len(rows)}/{total} roles (request_id={ctx.request_id})")
        return [role_from_orm(row) for row in rows], total

    def _classify(self, ctx: RequestContext, role: Role, error: IntegrityError) -> Exception:
        if is_duplicate_entry(error):
            logger.error(f"Duplicate entry for role {role.id} ({role.custom_id}) (request_id={ctx.request_id})")
            return DuplicateEntryError("Role", role.id)
        logger.error(f"Failed to write role {role.id}: {error} (request_id={ctx.request_id})")
        return error

    # Domain ↔ ORM conversion methods

    def _to_orm(self, role: Role) -> RoleModel:
        return RoleModel(
            id=role.id,
            custom_id=role.custom_id.value,
            name=role.name.value,
            permission=role.permission_bits,
            is_enable=role.is_enable,
            is_system=role.is_system,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )


def role_from_orm(row: RoleModel) -> Role:
    """Convert ORM RoleModel → domain Role (also used for role memberships)"""
    return Role(
        id=row.id,
        custom_id=CustomId(row.custom_id),
        name=RoleName(row.name),
        permissions=PermissionSet.from_bits(row.permission or 0),
        is_enable=row.is_enable,
        is_system=row.is_system,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )

"""
Role membership repository implementation using SQLAlchemy.
"""

from datetime import datetime, timezone
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
import logging

from app.application.context import RequestContext
from app.core.interfaces import IUserRoleRepository
from app.db.errors import is_duplicate_entry
from app.db.models import RoleModel, UserRoleModel
from app.domain.entities import Role
from app.repositories.role_repository import role_from_orm

logger = logging.getLogger(__name__)


class UserRoleRepository(IUserRoleRepository):
    """SQLAlchemy implementation of IUserRoleRepository"""

    def __init__(self, session: AsyncSession):
        self._db = session

    async def list_roles(self, ctx: RequestContext, user_id: str) -> List[Role]:
        stmt = (
            select(RoleModel)
            .join(UserRoleModel, UserRoleModel.role_id == RoleModel.id)
            .where(UserRoleModel.user_id == user_id)
            .order_by(RoleModel.id.asc())
        )
        result = await self._db.execute(stmt)
        rows = result.scalars().all()

        logger.debug(f"📖 User {user_id} holds {len(rows)} role(s) (request_id={ctx.request_id})")
        return [role_from_orm(row) for row in rows]

    async def permission_masks(self, ctx: RequestContext, user_id: str) -> List[int]:
        stmt = (
            select(RoleModel.permission)
            .join(UserRoleModel, UserRoleModel.role_id == RoleModel.id)
            .where(UserRoleModel.user_id == user_id)
        )
        result = await self._db.execute(stmt)
        return [mask or 0 for mask in result.scalars().all()]

    async def assign(self, ctx: RequestContext, user_id: str, role_id: str) -> bool:
        if await self._db.get(UserRoleModel, (user_id, role_id)) is not None:
            logger.info(f"User {user_id} already holds role {role_id} (request_id={ctx.request_id})")
            return False

        self._db.add(UserRoleModel(
            user_id=user_id,
            role_id=role_id,
            created_at=datetime.now(timezone.utc),
        ))
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            if is_duplicate_entry(e):
                # Assigned concurrently by another request
                return False
            logger.error(f"Failed to assign role {role_id} to user {user_id}: {e} (request_id={ctx.request_id})")
            raise

        logger.info(f"💾 Assigned role {role_id} to user {user_id} (request_id={ctx.request_id})")
        return True

    async def revoke(self, ctx: RequestContext, user_id: str, role_id: str) -> bool:
        result = await self._db.execute(
            delete(UserRoleModel).where(
                UserRoleModel.user_id == user_id,
                UserRoleModel.role_id == role_id,
            )
        )
        await self._db.commit()

        removed = result.rowcount > 0
        if removed:
            logger.info(f"🗑️ Revoked role {role_id} from user {user_id} (request_id={ctx.request_id})")
        return removed

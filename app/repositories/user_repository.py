"""
User repository implementation using SQLAlchemy.

Converts between the domain User entity and the UserModel ORM row, and
classifies unique-key violations into DuplicateEntryError.
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete, update
from sqlalchemy.exc import IntegrityError
import logging

from app.application.context import RequestContext, UserSearchParams, parse_flag
from app.core.interfaces import IUserRepository
from app.db.errors import is_duplicate_entry
from app.db.models import UserModel, UserRoleModel
from app.domain.entities import User
from app.domain.exceptions import DuplicateEntryError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of IUserRepository"""

    def __init__(self, db_session: AsyncSession):
        self._db = db_session

    async def list(self, ctx: RequestContext) -> Tuple[List[User], int]:
        stmt = (
            select(UserModel)
            .order_by(UserModel.id.asc())
            .limit(ctx.limit)
            .offset(ctx.offset)
        )
        result = await self._db.execute(stmt)
        rows = result.scalars().all()

        total = await self._count()

        logger.info(
            f"📖 Listed {len(rows)}/{total} users "
            f"(limit={ctx.limit}, page={ctx.page}, request_id={ctx.request_id})"
        )
        return [self._from_orm(row) for row in rows], total

    async def find_by_id(self, ctx: RequestContext, user_id: str) -> Optional[User]:
        row = await self._db.get(UserModel, user_id)
        if row is None:
            logger.info(f"User {user_id} not found (request_id={ctx.request_id})")
            return None
        return self._from_orm(row)

    async def search(
        self,
        ctx: RequestContext,
        params: UserSearchParams
    ) -> Tuple[List[User], int]:
        """
        Exact-match search on every supplied field.

        An empty string is a real filter (matches empty columns); None skips
        the field.
        """
        filters = []
        for column_name, value in params.supplied().items():
            column = getattr(UserModel, column_name)
            if column_name == "is_enable":
                filters.append(column == parse_flag(value))
            else:
                filters.append(column == value)

        stmt = (
            select(UserModel)
            .where(*filters)
            .order_by(UserModel.id.asc())
            .limit(ctx.limit)
            .offset(ctx.offset)
        )
        result = await self._db.execute(stmt)
        rows = result.scalars().all()

        total = await self._count(*filters)

        logger.info(
            f"🔍 Search matched {total} users on {sorted(params.supplied())} "
            f"(request_id={ctx.request_id})"
        )
        return [self._from_orm(row) for row in rows], total

    async def create(self, ctx: RequestContext, user: User) -> User:
        now = datetime.now(timezone.utc)
        user = user.with_changes(created_at=now, updated_at=now)
        self._db.add(self._to_orm(user))
        await self._commit(ctx, user, "create")
        logger.info(f"💾 Created user {user.id} ({user.custom_id}) (request_id={ctx.request_id})")
        return user

    async def save(self, ctx: RequestContext, user: User) -> User:
        """Replace every column, password hash included"""
        row = await self._db.get(UserModel, user.id)
        if row is None:
            raise UserNotFoundError(user.id)

        user = user.with_changes(
            created_at=row.created_at,
            updated_at=datetime.now(timezone.utc),
        )
        row.email = user.email.value
        row.custom_id = user.custom_id.value
        row.name = user.name
        row.external_email = user.external_email.value
        row.period = user.period
        row.is_enable = user.is_enable
        row.password_hash = user.password_hash
        row.joined_at = user.joined_at
        row.updated_at = user.updated_at

        await self._commit(ctx, user, "save")
        logger.info(f"💾 Saved user {user.id} (request_id={ctx.request_id})")
        return user

    async def update(self, ctx: RequestContext, user: User) -> User:
        """Write editable columns; a missing password hash leaves the stored one"""
        now = datetime.now(timezone.utc)
        values = {
            "email": user.email.value,
            "custom_id": user.custom_id.value,
            "name": user.name,
            "external_email": user.external_email.value,
            "period": user.period,
            "is_enable": user.is_enable,
            "joined_at": user.joined_at,
            "updated_at": now,
        }
        if user.password_hash is not None:
            values["password_hash"] = user.password_hash

        stmt = update(UserModel).where(UserModel.id == user.id).values(**values)
        try:
            result = await self._db.execute(stmt)
        except IntegrityError as e:
            await self._db.rollback()
            raise self._classify(ctx, user, e, "update")

        if result.rowcount == 0:
            await self._db.rollback()
            raise UserNotFoundError(user.id)

        await self._commit(ctx, user, "update")
        logger.info(f"💾 Updated user {user.id} (request_id={ctx.request_id})")
        return user.with_changes(updated_at=now)

    async def delete(self, ctx: RequestContext, user_id: str) -> bool:
        # SQLite does not enforce ON DELETE CASCADE without PRAGMA foreign_keys
        await self._db.execute(delete(UserRoleModel).where(UserRoleModel.user_id == user_id))
        result = await self._db.execute(delete(UserModel).where(UserModel.id == user_id))
        await self._db.commit()

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"🗑️ Deleted user {user_id} (request_id={ctx.request_id})")
        else:
            logger.info(f"Nothing to delete for user {user_id} (request_id={ctx.request_id})")
        return deleted

    async def _count(self, *filters) -> int:
        stmt = select(func.count()).select_from(UserModel).where(*filters)
        result = await self._db.execute(stmt)
        return result.scalar_one()

    async def _commit(self, ctx: RequestContext, user: User, operation: str) -> None:
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise self._classify(ctx, user, e, operation)

    def _classify(self, ctx: RequestContext, user: User, error: IntegrityError, operation: str) -> Exception:
        if is_duplicate_entry(error):
            logger.error(
                f"Duplicate entry on {operation} for user {user.id} "
                f"({user.custom_id}) (request_id={ctx.request_id})"
            )
            return DuplicateEntryError("User", user.id)
        logger.error(f"Failed to {operation} user {user.id}: {error} (request_id={ctx.request_id})")
        return error

    # Domain ↔ ORM conversion methods

    def _to_orm(self, user: User) -> UserModel:
        """Convert domain User → ORM UserModel"""
        return UserModel(
            id=user.id,
            email=user.email.value,
            custom_id=user.custom_id.value,
            name=user.name,
            external_email=user.external_email.value,
            period=user.period,
            is_enable=user.is_enable,
            password_hash=user.password_hash,
            created_at=user.created_at,
            updated_at=user.updated_at,
            joined_at=user.joined_at,
        )

    def _from_orm(self, row: UserModel) -> User:
        """Convert ORM UserModel → domain User"""
        return User.create(
            id=row.id,
            email=row.email,
            custom_id=row.custom_id,
            name=row.name,
            external_email=row.external_email,
            period=row.period,
            is_enable=row.is_enable,
            password_hash=row.password_hash,
            created_at=row.created_at,
            updated_at=row.updated_at,
            joined_at=row.joined_at,
        )

"""
Integration tests for the user, role and role membership repositories.

These tests run against a real (in-memory SQLite) database.
"""
import pytest
from sqlalchemy import update

from app.application.context import RequestContext, RoleSearchParams, UserSearchParams
from app.db.models import RoleModel
from app.domain.exceptions import DuplicateEntryError, RoleNotFoundError, UserNotFoundError
from app.repositories.role_repository import RoleRepository
from app.repositories.user_repository import UserRepository
from app.repositories.user_role_repository import UserRoleRepository
from tests.fakes import make_role, make_user


# ============================================
# UserRepository
# ============================================

class TestUserRepository:

    @pytest.mark.asyncio
    async def test_create_and_find(self, db_session, ctx):
        repo = UserRepository(db_session)

        created = await repo.create(ctx, make_user(password_hash="$2b$12$stored"))
        assert created.created_at is not None

        found = await repo.find_by_id(ctx, "u-1")
        assert found is not None
        assert found.custom_id.value == "stud01"
        assert found.email.value == "stud01@uniproject.jp"
        assert found.password_hash == "$2b$12$stored"

    @pytest.mark.asyncio
    async def test_find_missing_returns_none(self, db_session, ctx):
        assert await UserRepository(db_session).find_by_id(ctx, "nope") is None

    @pytest.mark.asyncio
    async def test_duplicate_custom_id(self, db_session, ctx):
        repo = UserRepository(db_session)
        await repo.create(ctx, make_user())

        with pytest.raises(DuplicateEntryError):
            await repo.create(ctx, make_user(id="u-2"))

        # Session is usable after the rollback
        _, total = await repo.list(ctx)
        assert total == 1

    @pytest.mark.asyncio
    async def test_duplicate_primary_key(self, db_session, ctx):
        repo = UserRepository(db_session)
        await repo.create(ctx, make_user())
        # Second request, fresh identity map
        db_session.expunge_all()

        with pytest.raises(DuplicateEntryError):
            await repo.create(ctx, make_user(custom_id="stud02"))

    @pytest.mark.asyncio
    async def test_list_paginates_in_id_order(self, db_session, ctx):
        repo = UserRepository(db_session)
        for i in (3, 1, 2, 0, 4):
            await repo.create(ctx, make_user(id=f"u-{i}", custom_id=f"stud{i}"))

        page, total = await repo.list(RequestContext(limit=2, page=2))
        assert total == 5
        assert [u.id for u in page] == ["u-2", "u-3"]

        # page 0 and page 1 read the same rows
        first, _ = await repo.list(RequestContext(limit=2, page=0))
        assert [u.id for u in first] == ["u-0", "u-1"]

    @pytest.mark.asyncio
    async def test_search_exact_match(self, db_session, ctx):
        repo = UserRepository(db_session)
        await repo.create(ctx, make_user(id="u-1", custom_id="alice", period="12"))
        await repo.create(ctx, make_user(id="u-2", custom_id="bob", period="12", is_enable=False))
        await repo.create(ctx, make_user(id="u-3", custom_id="carol", period="13"))

        found, total = await repo.search(ctx, UserSearchParams(period="12"))
        assert total == 2

        found, total = await repo.search(ctx, UserSearchParams(period="12", is_enable="0"))
        assert [u.id for u in found] == ["u-2"]

        # Partial values do not match
        _, total = await repo.search(ctx, UserSearchParams(custom_id="ali"))
        assert total == 0

    @pytest.mark.asyncio
    async def test_search_empty_string_is_a_filter(self, db_session, ctx):
        repo = UserRepository(db_session)
        await repo.create(ctx, make_user(id="u-1", custom_id="alice", name=""))
        await repo.create(ctx, make_user(id="u-2", custom_id="bob"))

        found, total = await repo.search(ctx, UserSearchParams(name=""))
        assert total == 1
        assert found[0].id == "u-1"

        _, total = await repo.search(ctx, UserSearchParams())
        assert total == 2

    @pytest.mark.asyncio
    async def test_update_keeps_password_when_not_supplied(self, db_session, ctx):
        repo = UserRepository(db_session)
        stored = await repo.create(ctx, make_user(password_hash="$2b$12$keep"))

        await repo.update(ctx, stored.with_changes(name="Renamed", password_hash=None))

        found = await repo.find_by_id(ctx, "u-1")
        assert found.name == "Renamed"
        assert found.password_hash == "$2b$12$keep"

    @pytest.mark.asyncio
    async def test_update_missing_user(self, db_session, ctx):
        with pytest.raises(UserNotFoundError):
            await UserRepository(db_session).update(ctx, make_user())

    @pytest.mark.asyncio
    async def test_update_to_taken_custom_id(self, db_session, ctx):
        repo = UserRepository(db_session)
        await repo.create(ctx, make_user(id="u-1", custom_id="alice"))
        bob = await repo.create(ctx, make_user(id="u-2", custom_id="bob"))

        with pytest.raises(DuplicateEntryError):
            await repo.update(ctx, bob.with_changes(custom_id="alice", email="alice@uniproject.jp"))

    @pytest.mark.asyncio
    async def test_save_replaces_everything(self, db_session, ctx):
        repo = UserRepository(db_session)
        stored = await repo.create(ctx, make_user(password_hash="$2b$12$old"))

        await repo.save(ctx, stored.with_changes(name="New", password_hash=None, is_enable=False))

        found = await repo.find_by_id(ctx, "u-1")
        assert found.name == "New"
        assert found.is_enable is False
        assert found.password_hash is None

    @pytest.mark.asyncio
    async def test_save_missing_user(self, db_session, ctx):
        with pytest.raises(UserNotFoundError):
            await UserRepository(db_session).save(ctx, make_user())

    @pytest.mark.asyncio
    async def test_delete(self, db_session, ctx):
        repo = UserRepository(db_session)
        await repo.create(ctx, make_user())

        assert await repo.delete(ctx, "u-1") is True
        assert await repo.delete(ctx, "u-1") is False


# ============================================
# RoleRepository
# ============================================

class TestRoleRepository:

    @pytest.mark.asyncio
    async def test_permissions_stored_as_bitmask(self, db_session, ctx):
        repo = RoleRepository(db_session)
        await repo.create(ctx, make_role(permissions=["ROLE_MANAGE", "USER_READ"]))

        found = await repo.find_by_id(ctx, "r-1")
        assert found.permission_bits == 1 | (1 << 24)
        # Names come back in flag order
        assert found.permission_names == ["USER_READ", "ROLE_MANAGE"]

    @pytest.mark.asyncio
    async def test_duplicate_custom_id(self, db_session, ctx):
        repo = RoleRepository(db_session)
        await repo.create(ctx, make_role())

        with pytest.raises(DuplicateEntryError):
            await repo.create(ctx, make_role(id="r-2"))

    @pytest.mark.asyncio
    async def test_search_by_system_flag(self, db_session, ctx):
        repo = RoleRepository(db_session)
        await repo.create(ctx, make_role(id="r-1", custom_id="admins", is_system=True))
        await repo.create(ctx, make_role(id="r-2", custom_id="guests"))

        found, total = await repo.search(ctx, RoleSearchParams(is_system="true"))
        assert total == 1
        assert found[0].id == "r-1"

    @pytest.mark.asyncio
    async def test_update_does_not_touch_system_flag(self, db_session, ctx):
        repo = RoleRepository(db_session)
        stored = await repo.create(ctx, make_role(is_system=True))

        await repo.update(ctx, stored.with_changes(is_system=False, name="Renamed"))

        found = await repo.find_by_id(ctx, "r-1")
        assert found.is_system is True
        assert found.name.value == "Renamed"

    @pytest.mark.asyncio
    async def test_update_missing_role(self, db_session, ctx):
        with pytest.raises(RoleNotFoundError):
            await RoleRepository(db_session).update(ctx, make_role())

    @pytest.mark.asyncio
    async def test_delete(self, db_session, ctx):
        repo = RoleRepository(db_session)
        await repo.create(ctx, make_role())

        assert await repo.delete(ctx, "r-1") is True
        assert await repo.find_by_id(ctx, "r-1") is None


# ============================================
# UserRoleRepository
# ============================================

async def _seed_membership(db_session, ctx):
    await UserRepository(db_session).create(ctx, make_user())
    roles = RoleRepository(db_session)
    await roles.create(ctx, make_role(id="r-1", custom_id="admins", permissions=["USER_READ"]))
    await roles.create(ctx, make_role(id="r-2", custom_id="editors", permissions=["USER_UPDATE"]))
    return UserRoleRepository(db_session)


class TestUserRoleRepository:

    @pytest.mark.asyncio
    async def test_assign_and_list(self, db_session, ctx):
        repo = await _seed_membership(db_session, ctx)

        assert await repo.assign(ctx, "u-1", "r-2") is True
        assert await repo.assign(ctx, "u-1", "r-1") is True

        roles = await repo.list_roles(ctx, "u-1")
        assert [role.id for role in roles] == ["r-1", "r-2"]
        assert roles[1].permission_names == ["USER_UPDATE"]

    @pytest.mark.asyncio
    async def test_assign_twice_is_a_no_op(self, db_session, ctx):
        repo = await _seed_membership(db_session, ctx)

        assert await repo.assign(ctx, "u-1", "r-1") is True
        assert await repo.assign(ctx, "u-1", "r-1") is False
        assert len(await repo.list_roles(ctx, "u-1")) == 1

    @pytest.mark.asyncio
    async def test_revoke(self, db_session, ctx):
        repo = await _seed_membership(db_session, ctx)
        await repo.assign(ctx, "u-1", "r-1")

        assert await repo.revoke(ctx, "u-1", "r-1") is True
        assert await repo.revoke(ctx, "u-1", "r-1") is False
        assert await repo.list_roles(ctx, "u-1") == []

    @pytest.mark.asyncio
    async def test_permission_masks_are_raw(self, db_session, ctx):
        repo = await _seed_membership(db_session, ctx)
        await repo.assign(ctx, "u-1", "r-1")
        await repo.assign(ctx, "u-1", "r-2")
        # A bit with no named flag, written outside the API
        await db_session.execute(
            update(RoleModel).where(RoleModel.id == "r-2").values(permission=(1 << 2) | (1 << 30))
        )
        await db_session.commit()

        masks = await repo.permission_masks(ctx, "u-1")
        assert sorted(masks) == [1, (1 << 2) | (1 << 30)]

    @pytest.mark.asyncio
    async def test_deleting_user_or_role_drops_memberships(self, db_session, ctx):
        repo = await _seed_membership(db_session, ctx)
        await repo.assign(ctx, "u-1", "r-1")
        await repo.assign(ctx, "u-1", "r-2")

        await RoleRepository(db_session).delete(ctx, "r-1")
        assert [role.id for role in await repo.list_roles(ctx, "u-1")] == ["r-2"]

        await UserRepository(db_session).delete(ctx, "u-1")
        assert await repo.list_roles(ctx, "u-1") == []

"""
Tests for the user, role and role membership domain services.

Repositories are in-memory doubles; these tests cover validation ordering,
not-found handling and the system role guard.
"""
import pytest

from app.application.context import RequestContext, UserSearchParams
from app.domain.exceptions import (
    DuplicateEntryError,
    InvalidCustomIdError,
    InvalidEmailError,
    InvalidPermissionError,
    RoleNotAssignedError,
    RoleNotFoundError,
    SystemRoleError,
    UserNotFoundError,
)
from app.services.role_service import RoleDomainService
from app.services.user_role_service import UserRoleDomainService
from app.services.user_service import UserDomainService
from tests.fakes import (
    InMemoryRoleRepository,
    InMemoryUserRepository,
    InMemoryUserRoleRepository,
    make_role,
    make_user,
)


# ============================================
# Users
# ============================================

class TestUserDomainService:

    @pytest.mark.asyncio
    async def test_create_stores_valid_user(self, ctx):
        repo = InMemoryUserRepository()
        service = UserDomainService(repo)

        created = await service.create(ctx, make_user())

        assert created.created_at is not None
        assert "u-1" in repo.users

    @pytest.mark.asyncio
    async def test_create_rejects_invalid_user_without_writing(self, ctx):
        repo = InMemoryUserRepository()
        service = UserDomainService(repo)

        with pytest.raises(InvalidCustomIdError):
            await service.create(ctx, make_user(custom_id="--bad"))
        assert repo.writes == 0

    @pytest.mark.asyncio
    async def test_create_duplicate_raises(self, ctx):
        service = UserDomainService(InMemoryUserRepository([make_user()]))

        with pytest.raises(DuplicateEntryError):
            await service.create(ctx, make_user(id="u-2"))

    @pytest.mark.asyncio
    async def test_find_by_id_missing_raises(self, ctx):
        service = UserDomainService(InMemoryUserRepository())

        with pytest.raises(UserNotFoundError) as exc_info:
            await service.find_by_id(ctx, "missing")
        assert exc_info.value.user_id == "missing"

    @pytest.mark.asyncio
    async def test_update_validates_merged_user(self, ctx):
        stored = make_user()
        repo = InMemoryUserRepository([stored])
        service = UserDomainService(repo)

        with pytest.raises(InvalidEmailError):
            await service.update(ctx, stored.with_changes(custom_id="stud02"))
        assert repo.writes == 0

    @pytest.mark.asyncio
    async def test_save_missing_user_raises(self, ctx):
        service = UserDomainService(InMemoryUserRepository())

        with pytest.raises(UserNotFoundError):
            await service.save(ctx, make_user())

    @pytest.mark.asyncio
    async def test_delete(self, ctx):
        repo = InMemoryUserRepository([make_user()])
        service = UserDomainService(repo)

        await service.delete(ctx, "u-1")
        assert repo.users == {}

        with pytest.raises(UserNotFoundError):
            await service.delete(ctx, "u-1")

    @pytest.mark.asyncio
    async def test_list_and_search_pass_through(self, ctx):
        users = [make_user(id=f"u-{i}", custom_id=f"stud{i}") for i in range(3)]
        service = UserDomainService(InMemoryUserRepository(users))

        listed, total = await service.list(RequestContext(limit=2))
        assert total == 3
        assert [u.id for u in listed] == ["u-0", "u-1"]

        found, total = await service.search(ctx, UserSearchParams(custom_id="stud2"))
        assert total == 1
        assert found[0].id == "u-2"


# ============================================
# Roles
# ============================================

class TestRoleDomainService:

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_permission(self, ctx):
        repo = InMemoryRoleRepository()
        service = RoleDomainService(repo)

        with pytest.raises(InvalidPermissionError):
            await service.create(ctx, make_role(permissions=["USER_READ", "FLY"]))
        assert repo.writes == 0

    @pytest.mark.asyncio
    async def test_find_by_id_missing_raises(self, ctx):
        service = RoleDomainService(InMemoryRoleRepository())

        with pytest.raises(RoleNotFoundError):
            await service.find_by_id(ctx, "missing")

    @pytest.mark.asyncio
    async def test_delete_refuses_system_role(self, ctx):
        repo = InMemoryRoleRepository([make_role(is_system=True)])
        service = RoleDomainService(repo)

        with pytest.raises(SystemRoleError):
            await service.delete(ctx, "r-1")
        assert "r-1" in repo.roles

    @pytest.mark.asyncio
    async def test_delete_regular_role(self, ctx):
        repo = InMemoryRoleRepository([make_role()])
        service = RoleDomainService(repo)

        await service.delete(ctx, "r-1")
        assert repo.roles == {}

    @pytest.mark.asyncio
    async def test_delete_missing_role_raises(self, ctx):
        service = RoleDomainService(InMemoryRoleRepository())

        with pytest.raises(RoleNotFoundError):
            await service.delete(ctx, "missing")


# ============================================
# Role memberships
# ============================================

def membership_service(pairs=()):
    users = InMemoryUserRepository([make_user()])
    roles = InMemoryRoleRepository([
        make_role(id="r-1", custom_id="admins", permissions=["USER_READ", "ROLE_MANAGE"]),
        make_role(id="r-2", custom_id="editors", permissions=["USER_UPDATE"]),
    ])
    memberships = InMemoryUserRoleRepository(roles, pairs)
    return UserRoleDomainService(users, roles, memberships), memberships


class TestUserRoleDomainService:

    @pytest.mark.asyncio
    async def test_assign_returns_role(self, ctx):
        service, memberships = membership_service()

        role = await service.assign(ctx, "u-1", "r-2")

        assert role.id == "r-2"
        assert memberships.pairs == {("u-1", "r-2")}

    @pytest.mark.asyncio
    async def test_assign_checks_user_before_role(self, ctx):
        service, memberships = membership_service()

        with pytest.raises(UserNotFoundError):
            await service.assign(ctx, "missing", "missing")
        with pytest.raises(RoleNotFoundError):
            await service.assign(ctx, "u-1", "missing")
        assert memberships.pairs == set()

    @pytest.mark.asyncio
    async def test_roles_of_missing_user_raises(self, ctx):
        service, _ = membership_service()

        with pytest.raises(UserNotFoundError):
            await service.roles_of(ctx, "missing")

    @pytest.mark.asyncio
    async def test_revoke_role_not_held(self, ctx):
        service, _ = membership_service(pairs=[("u-1", "r-1")])

        with pytest.raises(RoleNotAssignedError):
            await service.revoke(ctx, "u-1", "r-2")

        await service.revoke(ctx, "u-1", "r-1")
        assert await service.roles_of(ctx, "u-1") == []

    @pytest.mark.asyncio
    async def test_effective_permissions_combine_roles(self, ctx):
        service, _ = membership_service(pairs=[("u-1", "r-1"), ("u-1", "r-2")])

        effective = await service.effective_permissions(ctx, "u-1")

        assert effective.bits == (1 << 0) | (1 << 2) | (1 << 24)
        assert effective.names == ["USER_READ", "USER_UPDATE", "ROLE_MANAGE"]
        assert effective.grants("ROLE_MANAGE")
        assert not effective.grants("USER_DELETE")

    @pytest.mark.asyncio
    async def test_effective_permissions_without_roles(self, ctx):
        service, _ = membership_service()

        effective = await service.effective_permissions(ctx, "u-1")
        assert effective.bits == 0
        assert effective.names == []

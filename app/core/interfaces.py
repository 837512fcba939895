"""
Core interfaces for the Users & Roles API.

Domain services depend only on these abstractions; the SQLAlchemy
implementations live in app/repositories/.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from app.application.context import RequestContext, RoleSearchParams, UserSearchParams
    from app.domain.entities import Role, User


class IUserRepository(ABC):
    """
    Interface for user storage and retrieval.

    Implementations must:
    - Apply ctx.limit / ctx.offset to list and search
    - Raise DuplicateEntryError when a unique key is already taken
    - Return None (not a blank entity) when a user doesn't exist
    """

    @abstractmethod
    async def list(self, ctx: 'RequestContext') -> Tuple[List['User'], int]:
        """
        Get one page of users ordered by ID.

        Returns:
            (users on this page, total number of users)
        """
        pass

    @abstractmethod
    async def find_by_id(self, ctx: 'RequestContext', user_id: str) -> Optional['User']:
        """
        Get user by ID.

        Returns:
            User if found, None otherwise
        """
        pass

    @abstractmethod
    async def search(
        self,
        ctx: 'RequestContext',
        params: 'UserSearchParams'
    ) -> Tuple[List['User'], int]:
        """
        Get one page of users matching every supplied field exactly.

        Returns:
            (matching users on this page, total number of matches)
        """
        pass

    @abstractmethod
    async def create(self, ctx: 'RequestContext', user: 'User') -> 'User':
        """
        Insert a new user.

        Raises:
            DuplicateEntryError: If id, custom_id or email already exists
        """
        pass

    @abstractmethod
    async def save(self, ctx: 'RequestContext', user: 'User') -> 'User':
        """
        Replace every stored column of an existing user.

        Raises:
            UserNotFoundError: If the user doesn't exist
            DuplicateEntryError: If the new custom_id or email is taken
        """
        pass

    @abstractmethod
    async def update(self, ctx: 'RequestContext', user: 'User') -> 'User':
        """
        Write the editable columns of an existing user.

        Raises:
            UserNotFoundError: If the user doesn't exist
            DuplicateEntryError: If the new custom_id or email is taken
        """
        pass

    @abstractmethod
    async def delete(self, ctx: 'RequestContext', user_id: str) -> bool:
        """
        Delete user by ID.

        Returns:
            True if a row was deleted, False if the user didn't exist
        """
        pass


class IRoleRepository(ABC):
    """Interface for role storage and retrieval (same contract as users)"""

    @abstractmethod
    async def list(self, ctx: 'RequestContext') -> Tuple[List['Role'], int]:
        pass

    @abstractmethod
    async def find_by_id(self, ctx: 'RequestContext', role_id: str) -> Optional['Role']:
        pass

    @abstractmethod
    async def search(
        self,
        ctx: 'RequestContext',
        params: 'RoleSearchParams'
    ) -> Tuple[List['Role'], int]:
        pass

    @abstractmethod
    async def create(self, ctx: 'RequestContext', role: 'Role') -> 'Role':
        pass

    @abstractmethod
    async def save(self, ctx: 'RequestContext', role: 'Role') -> 'Role':
        pass

    @abstractmethod
    async def update(self, ctx: 'RequestContext', role: 'Role') -> 'Role':
        pass

    @abstractmethod
    async def delete(self, ctx: 'RequestContext', role_id: str) -> bool:
        pass


class IUserRoleRepository(ABC):
    """
    Interface for role memberships.

    Implementations don't check that the user or role exists; the domain
    service does that first.
    """

    @abstractmethod
    async def list_roles(self, ctx: 'RequestContext', user_id: str) -> List['Role']:
        """Roles held by the user, ordered by role ID"""
        pass

    @abstractmethod
    async def permission_masks(self, ctx: 'RequestContext', user_id: str) -> List[int]:
        """Raw stored permission masks of the user's roles"""
        pass

    @abstractmethod
    async def assign(self, ctx: 'RequestContext', user_id: str, role_id: str) -> bool:
        """
        Give the role to the user.

        Returns:
            True if the membership was added, False if it already existed
        """
        pass

    @abstractmethod
    async def revoke(self, ctx: 'RequestContext', user_id: str, role_id: str) -> bool:
        """
        Take the role away from the user.

        Returns:
            True if a membership was removed, False if the user didn't hold it
        """
        pass

"""
Domain Entities - Users and Roles.

Entities are tracked by ID and aggregate value objects. They are frozen:
an update builds a new entity (``dataclasses.replace``) which then replaces
the stored row.

Validation is explicit (``validate()``) and runs at the domain service entry,
so an invalid entity can still be built from a request and rejected with a
precise error.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from .permissions import Permission, bits_from_names, describe_bits, has_permission, names_from_bits
from .value_objects import CustomId, ExternalEmail, InternalEmail, RoleName


@dataclass(frozen=True)
class User:
    """
    User aggregate.

    Invariants (checked by validate(), in this order):
    1. custom_id matches the custom ID rule
    2. email is exactly the address derived from custom_id and period
    3. external_email is a valid e-mail address
    """

    # Identity
    id: str

    email: InternalEmail
    custom_id: CustomId
    name: str
    external_email: ExternalEmail
    period: str
    is_enable: bool = True

    # Opaque, never returned to clients
    password_hash: Optional[str] = None

    # Timestamps (None until persisted)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        id: str,
        email: str,
        custom_id: str,
        name: str,
        external_email: str,
        period: str,
        is_enable: bool = True,
        password_hash: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        joined_at: Optional[datetime] = None,
    ) -> "User":
        """Build a user from primitive field values"""
        return cls(
            id=id,
            email=InternalEmail(email),
            custom_id=CustomId(custom_id),
            name=name,
            external_email=ExternalEmail(external_email),
            period=period,
            is_enable=is_enable,
            password_hash=password_hash or None,
            created_at=created_at,
            updated_at=updated_at,
            joined_at=joined_at,
        )

    def validate(self) -> None:
        """
        Check the user invariants, stopping at the first failure.

        Raises:
            InvalidCustomIdError, InvalidEmailError, InvalidExternalEmailError
        """
        self.custom_id.validate()
        self.email.validate(self.custom_id.value, self.period)
        self.external_email.validate()

    def with_changes(self, **changes) -> "User":
        """
        Return a copy with primitive field values replaced.

        Accepts the same keyword names as create(); value-object fields are
        wrapped automatically.
        """
        wrappers = {
            "email": InternalEmail,
            "custom_id": CustomId,
            "external_email": ExternalEmail,
        }
        wrapped = {
            key: wrappers[key](value) if key in wrappers else value
            for key, value in changes.items()
        }
        return replace(self, **wrapped)

    def __repr__(self) -> str:
        return (
            f"User(id={self.id}, custom_id={self.custom_id.value}, "
            f"period={self.period}, enabled={self.is_enable})"
        )


@dataclass(frozen=True)
class PermissionSet:
    """
    Named permissions granted by a role plus the derived bitmask.

    Built either from names (request side) or from a stored bitmask
    (database side). Unknown names are kept so validate() can report them.
    """

    names: Tuple[str, ...] = ()

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "PermissionSet":
        # Keep first occurrence order, drop repeats
        unique = []
        for name in names:
            if name not in unique:
                unique.append(name)
        return cls(names=tuple(unique))

    @classmethod
    def from_bits(cls, bits: int) -> "PermissionSet":
        names, _ = names_from_bits(bits)
        return cls(names=tuple(names))

    def validate(self) -> None:
        """
        Raises:
            InvalidPermissionError: If any name is not a known permission
        """
        for name in self.names:
            Permission.from_name(name)

    @property
    def bits(self) -> int:
        """32-bit mask of the known names"""
        known = [name for name in self.names if name in Permission.__members__]
        return bits_from_names(known)

    def __repr__(self) -> str:
        return f"PermissionSet({list(self.names)}, bits={self.bits:#x})"


@dataclass(frozen=True)
class Role:
    """
    Role aggregate.

    Invariants (checked by validate(), in this order):
    1. custom_id matches the custom ID rule
    2. name is a valid role name
    3. every permission name is known

    System roles (is_system=True) are built in and cannot be deleted.
    """

    # Identity
    id: str

    custom_id: CustomId
    name: RoleName
    permissions: PermissionSet = field(default_factory=PermissionSet)
    is_enable: bool = True
    is_system: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        id: str,
        custom_id: str,
        name: str,
        permissions: Optional[Iterable[str]] = None,
        is_enable: bool = True,
        is_system: bool = False,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> "Role":
        """Build a role from primitive field values"""
        return cls(
            id=id,
            custom_id=CustomId(custom_id),
            name=RoleName(name),
            permissions=PermissionSet.from_names(permissions or []),
            is_enable=is_enable,
            is_system=is_system,
            created_at=created_at,
            updated_at=updated_at,
        )

    def validate(self) -> None:
        """
        Raises:
            InvalidCustomIdError, InvalidRoleNameError, InvalidPermissionError
        """
        self.custom_id.validate()
        self.name.validate()
        self.permissions.validate()

    def with_changes(self, **changes) -> "Role":
        """Return a copy with primitive field values replaced"""
        wrapped = {}
        for key, value in changes.items():
            if key == "custom_id":
                value = CustomId(value)
            elif key == "name":
                value = RoleName(value)
            elif key == "permissions":
                value = PermissionSet.from_names(value or [])
            wrapped[key] = value
        return replace(self, **wrapped)

    @property
    def permission_names(self) -> List[str]:
        return list(self.permissions.names)

    @property
    def permission_bits(self) -> int:
        return self.permissions.bits

    def __repr__(self) -> str:
        flags = " system" if self.is_system else ""
        return (
            f"Role(id={self.id}, custom_id={self.custom_id.value}, "
            f"permission={self.permission_bits:#x}{flags})"
        )


@dataclass(frozen=True)
class EffectivePermissions:
    """
    Permissions a user holds through role memberships.

    The mask is the OR of the stored masks of every assigned role, unknown
    bits included.
    """

    user_id: str
    bits: int = 0

    @classmethod
    def combine(cls, user_id: str, masks: Iterable[int]) -> "EffectivePermissions":
        bits = 0
        for mask in masks:
            bits |= mask
        return cls(user_id=user_id, bits=bits)

    @property
    def names(self) -> List[str]:
        return describe_bits(self.bits)

    def grants(self, name: str) -> bool:
        """False for unknown permission names"""
        return has_permission(self.bits, name)

"""
Data transfer objects for the user and role use cases.

Inputs carry Optional fields: None means the client did not send the
field. Outputs are built from entities by explicit projection; password
hashes never leave the application layer.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.domain.entities import Role, User


# ============================================
# Inputs
# ============================================

@dataclass(frozen=True)
class UserInput:
    id: Optional[str] = None
    email: Optional[str] = None
    custom_id: Optional[str] = None
    name: Optional[str] = None
    external_email: Optional[str] = None
    period: Optional[str] = None
    is_enable: Optional[bool] = None
    password_hash: Optional[str] = None
    password: Optional[str] = None
    joined_at: Optional[datetime] = None

    # Never merged directly into an entity
    _CREDENTIAL_FIELDS = ("id", "password", "password_hash")

    def supplied_profile(self) -> Dict[str, Any]:
        """Non-credential fields the client sent"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in self._CREDENTIAL_FIELDS and getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class RoleInput:
    id: Optional[str] = None
    custom_id: Optional[str] = None
    name: Optional[str] = None
    permission: Optional[List[str]] = None
    is_enable: Optional[bool] = None
    is_system: Optional[bool] = None

    def supplied_editable(self) -> Dict[str, Any]:
        """Fields PATCH may change (id and the system flag are fixed)"""
        changes = {}
        if self.custom_id is not None:
            changes["custom_id"] = self.custom_id
        if self.name is not None:
            changes["name"] = self.name
        if self.permission is not None:
            changes["permissions"] = self.permission
        if self.is_enable is not None:
            changes["is_enable"] = self.is_enable
        return changes


# ============================================
# Outputs
# ============================================

@dataclass(frozen=True)
class UserDTO:
    id: str
    email: str
    custom_id: str
    name: str
    external_email: str
    period: str
    is_enable: bool
    joined_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserDTO":
        return cls(
            id=user.id,
            email=user.email.value,
            custom_id=user.custom_id.value,
            name=user.name,
            external_email=user.external_email.value,
            period=user.period,
            is_enable=user.is_enable,
            joined_at=user.joined_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@dataclass(frozen=True)
class UserListDTO:
    total_count: int
    pages: int
    users: List[UserDTO] = field(default_factory=list)


@dataclass(frozen=True)
class RoleDTO:
    id: str
    custom_id: str
    name: str
    permission: int
    permissions: List[str]
    is_enable: bool
    is_system: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, role: Role) -> "RoleDTO":
        return cls(
            id=role.id,
            custom_id=role.custom_id.value,
            name=role.name.value,
            permission=role.permission_bits,
            permissions=role.permission_names,
            is_enable=role.is_enable,
            is_system=role.is_system,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )


@dataclass(frozen=True)
class RoleListDTO:
    total_count: int
    pages: int
    roles: List[RoleDTO] = field(default_factory=list)


@dataclass(frozen=True)
class UserPermissionsDTO:
    permissions_bit: int
    permissions_text: List[str]
    # Only set when the caller asked about one permission
    granted: Optional[bool] = None

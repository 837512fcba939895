"""
Permission bit flags for roles.

Each bit grants one operation; a role's permission set is the OR of its bits
and is stored as a single 32-bit integer.

Layout:
    0-7    user management
    8-15   apps (OAuth clients)
    16-23  system / config
    24-31  RBAC / security
"""

import enum
from typing import Iterable, List, Tuple

from .exceptions import InvalidPermissionError


class Permission(enum.IntFlag):
    # User management (acting on other users)
    USER_READ = 1 << 0
    USER_CREATE = 1 << 1
    USER_UPDATE = 1 << 2  # includes disabling passwords
    USER_DELETE = 1 << 3
    USER_DISABLE = 1 << 4

    # Apps owned by other users
    APP_READ = 1 << 8
    APP_CREATE = 1 << 9
    APP_UPDATE = 1 << 10
    APP_DELETE = 1 << 11
    APP_SECRET_ROTATE = 1 << 12

    # System / config
    TOKEN_REVOKE = 1 << 16
    AUDIT_READ = 1 << 18
    CONFIG_UPDATE = 1 << 19
    KEY_MANAGE = 1 << 20

    # RBAC / security
    ROLE_MANAGE = 1 << 24
    PERMISSION_MANAGE = 1 << 25
    SESSION_MANAGE = 1 << 26
    MFA_MANAGE = 1 << 27

    @classmethod
    def from_name(cls, name: str) -> "Permission":
        """
        Look up a single flag by its name.

        Raises:
            InvalidPermissionError: If the name is not a known permission
        """
        try:
            return cls[name]
        except (KeyError, TypeError):
            raise InvalidPermissionError(name) from None


# Declaration order, used for stable name lists
KNOWN_PERMISSIONS: Tuple[Permission, ...] = tuple(Permission.__members__.values())


def bits_from_names(names: Iterable[str]) -> int:
    """OR together the flags for ``names``; duplicates are harmless"""
    bits = 0
    for name in names:
        bits |= Permission.from_name(name)
    return int(bits)


def names_from_bits(bits: int) -> Tuple[List[str], int]:
    """
    Decode a stored bitmask.

    Returns:
        (known_names, known_mask) - bits without a known flag are dropped
    """
    names = []
    mask = 0
    for flag in KNOWN_PERMISSIONS:
        if bits & flag:
            names.append(flag.name)
            mask |= flag
    return names, int(mask)


def has_permission(bits: int, name: str) -> bool:
    """Check whether ``bits`` grants the permission called ``name``"""
    try:
        flag = Permission.from_name(name)
    except InvalidPermissionError:
        return False
    return bool(bits & flag)


def describe_bits(bits: int) -> List[str]:
    """
    Name every set bit of a 32-bit mask.

    Known flags come first in declaration order; bits without a flag are
    reported as ``PERMISSION_<index>``.
    """
    names, known_mask = names_from_bits(bits)
    remaining = bits & ~known_mask & 0xFFFFFFFF
    names.extend(f"PERMISSION_{index}" for index in range(32) if remaining & (1 << index))
    return names

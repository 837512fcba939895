"""
Value Objects for user and role fields.

Value objects are immutable and own their format rules. Unlike the entities
that aggregate them, they are compared by value. Construction never fails:
rules are checked by ``validate()`` so the domain service can decide when to
enforce them and which error kind to surface.
"""

import re
from dataclasses import dataclass

from .exceptions import (
    InvalidCustomIdError,
    InvalidEmailError,
    InvalidExternalEmailError,
    InvalidRoleNameError,
)

CUSTOM_ID_PATTERN = re.compile(r"[a-zA-Z0-9_-]{1,10}")
CUSTOM_ID_SEPARATORS = frozenset("-_")

EXTERNAL_EMAIL_PATTERN = re.compile(r"[\w.%+-]+@[\w.-]+\.[A-Za-z]{2,}", re.ASCII)

INTERNAL_EMAIL_DOMAIN = "uniproject.jp"

# Period tag for members without an enrollment period
NO_PERIOD = "0"

ROLE_NAME_MAX_LENGTH = 50


@dataclass(frozen=True)
class CustomId:
    """
    Human-chosen identifier shared by users and roles.

    Format: 1-10 chars of [a-zA-Z0-9_-]
    Example: stud01, web-team, a_b

    Separators ('-' and '_') may not lead, trail, or sit next to each other.
    """

    value: str

    def validate(self) -> None:
        """
        Raises:
            InvalidCustomIdError: If the value breaks the format rule
        """
        value = self.value
        if not isinstance(value, str) or not CUSTOM_ID_PATTERN.fullmatch(value):
            raise InvalidCustomIdError(value)
        if value[0] in CUSTOM_ID_SEPARATORS or value[-1] in CUSTOM_ID_SEPARATORS:
            raise InvalidCustomIdError(value)
        for prev, cur in zip(value, value[1:]):
            if prev in CUSTOM_ID_SEPARATORS and cur in CUSTOM_ID_SEPARATORS:
                raise InvalidCustomIdError(value)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"CustomId('{self.value}')"


@dataclass(frozen=True)
class InternalEmail:
    """
    Organisation mailbox, derived from the custom ID and enrollment period.

    Format: {period}.{custom_id}@uniproject.jp
    Example: 12.stud01@uniproject.jp, or stud01@uniproject.jp for period "0"
    """

    value: str

    @staticmethod
    def derive(custom_id: str, period: str) -> str:
        """Build the only address accepted for this custom ID and period"""
        if period == NO_PERIOD:
            return f"{custom_id}@{INTERNAL_EMAIL_DOMAIN}"
        return f"{period}.{custom_id}@{INTERNAL_EMAIL_DOMAIN}"

    def validate(self, custom_id: str, period: str) -> None:
        """
        Compare against the derived address (exact, case-sensitive).

        Raises:
            InvalidEmailError: If the value differs from the derived address
        """
        if self.value != self.derive(custom_id, period):
            raise InvalidEmailError(self.value)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"InternalEmail('{self.value}')"


@dataclass(frozen=True)
class ExternalEmail:
    """Free-form contact address outside the organisation"""

    value: str

    def validate(self) -> None:
        """
        Raises:
            InvalidExternalEmailError: If the value is not an e-mail address
        """
        if not isinstance(self.value, str) or not EXTERNAL_EMAIL_PATTERN.fullmatch(self.value):
            raise InvalidExternalEmailError(self.value)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"ExternalEmail('{self.value}')"


@dataclass(frozen=True)
class RoleName:
    """
    Display name of a role.

    1-50 characters. Control characters, the C1 block (incl. NBSP) and
    U+2000-U+2FFF (punctuation, symbols, arrows, dingbats) are rejected.
    """

    value: str

    def validate(self) -> None:
        """
        Raises:
            InvalidRoleNameError: If the length or a character is not allowed
        """
        value = self.value
        if not isinstance(value, str) or not 1 <= len(value) <= ROLE_NAME_MAX_LENGTH:
            raise InvalidRoleNameError(
                value, f"role name must be between 1 and {ROLE_NAME_MAX_LENGTH} characters"
            )
        for char in value:
            if _is_blocked_name_char(ord(char)):
                raise InvalidRoleNameError(value, "role name contains invalid characters")

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"RoleName('{self.value}')"


def _is_blocked_name_char(code_point: int) -> bool:
    return (
        code_point < 0x20
        or 0x7F <= code_point <= 0xA0
        or 0x2000 <= code_point <= 0x2FFF
    )

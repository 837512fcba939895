"""
Domain exceptions.

The HTTP layer matches on these classes to pick a status code, so each
failure the client can act on has its own type.
"""


class DomainError(Exception):
    """Base exception for domain layer errors"""
    pass


# Validation

class ValidationError(DomainError):
    """Raised when an entity field breaks its format rule"""
    pass


class InvalidCustomIdError(ValidationError):
    """Raised when a custom ID does not match the required pattern"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"invalid custom id: {value!r}")


class InvalidEmailError(ValidationError):
    """Raised when the internal email is not the one derived from custom ID and period"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"invalid user email address: {value!r}")


class InvalidExternalEmailError(ValidationError):
    """Raised when the external email is not a valid address"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"invalid external email address: {value!r}")


class InvalidRoleNameError(ValidationError):
    """Raised when a role name is empty, too long, or has blocked characters"""

    def __init__(self, value, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(reason)


class InvalidPermissionError(ValidationError):
    """Raised when a permission name is unknown"""

    def __init__(self, name):
        self.name = name
        super().__init__(f"unknown permission: {name!r}")


class InvalidPasswordError(ValidationError):
    """Raised when a plain password cannot be hashed (empty or too long)"""
    pass


# Persistence

class DuplicateEntryError(DomainError):
    """Raised when a unique key (id, custom_id, email) is already taken"""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} already exists")


class UserNotFoundError(DomainError):
    """Raised when user doesn't exist"""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class RoleNotFoundError(DomainError):
    """Raised when role doesn't exist"""

    def __init__(self, role_id: str):
        self.role_id = role_id
        super().__init__(f"Role {role_id} not found")


class SystemRoleError(DomainError):
    """Raised when attempting to delete a built-in role"""

    def __init__(self, role_id: str):
        self.role_id = role_id
        super().__init__(f"Role {role_id} is a system role and cannot be deleted")


class RoleNotAssignedError(DomainError):
    """Raised when removing a role the user does not hold"""

    def __init__(self, user_id: str, role_id: str):
        self.user_id = user_id
        self.role_id = role_id
        super().__init__(f"Role {role_id} is not assigned to user {user_id}")

"""
Domain layer - users, roles and their validation rules.

This layer contains:
- Value objects (CustomId, InternalEmail, ExternalEmail, RoleName)
- Entities (User, Role, PermissionSet)
- Permission flags
- Domain exceptions

No dependencies on infrastructure or frameworks.
"""

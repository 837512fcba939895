"""
Services package - domain services for users, roles and role memberships.
"""
from app.services.user_service import UserDomainService
from app.services.role_service import RoleDomainService
from app.services.user_role_service import UserRoleDomainService

__all__ = ['UserDomainService', 'RoleDomainService', 'UserRoleDomainService']

"""Core module containing interfaces."""

from app.core.interfaces import IUserRepository, IRoleRepository

__all__ = ["IUserRepository", "IRoleRepository"]

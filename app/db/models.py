"""
SQLAlchemy ORM models for database tables.

Separate from the domain entities in app/domain/entities.py; repositories
convert between the two.
"""
from sqlalchemy import Column, String, DateTime, Index, Boolean, Integer, ForeignKey
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class UserModel(Base):
    """
    Users table.

    custom_id and email are unique: a second user with either value is a
    duplicate entry, not an update.
    """
    __tablename__ = "users"

    id = Column(String(255), primary_key=True)  # Opaque ID (UUID when generated by us)
    email = Column(String(255), unique=True, nullable=False)  # Internal address, derived from custom_id + period
    custom_id = Column(String(50), unique=True, nullable=False)
    name = Column(String(255), nullable=False, default="")
    external_email = Column(String(255), nullable=False)
    period = Column(String(50), nullable=False)  # Enrollment period tag, "0" = none
    is_enable = Column(Boolean, nullable=False, default=True)
    password_hash = Column(String(255), nullable=True)  # bcrypt hash
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())
    joined_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index('idx_users_period', 'period'),
        Index('idx_users_is_enable', 'is_enable'),
    )


class RoleModel(Base):
    """
    Roles table.

    Permissions are stored as a 32-bit mask (see app/domain/permissions.py);
    names are derived when loading.
    """
    __tablename__ = "roles"

    id = Column(String(255), primary_key=True)
    custom_id = Column(String(50), unique=True, nullable=False)
    name = Column(String(50), nullable=False)
    permission = Column(Integer, nullable=False, default=0)
    is_enable = Column(Boolean, nullable=False, default=True)
    is_system = Column(Boolean, nullable=False, default=False)  # Built-in, cannot be deleted
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_roles_is_system', 'is_system'),
    )


class UserRoleModel(Base):
    """
    Role memberships (users ↔ roles).

    One row per (user, role) pair; rows go away with either side.
    """
    __tablename__ = "user_roles"

    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_id = Column(String(255), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=func.now())

    __table_args__ = (
        Index('idx_user_roles_role_id', 'role_id'),
    )

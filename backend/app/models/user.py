"""SQLAlchemy model for portal users."""

from __future__ import annotations

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String, func
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """Roles for service-provider staff and client organization members."""

    PROVIDER_ADMIN = "provider_admin"
    PROVIDER_STAFF = "provider_staff"
    CLIENT_ADMIN = "client_admin"
    CLIENT_APPROVER = "client_approver"
    CLIENT_VIEWER = "client_viewer"


PROVIDER_ROLES = frozenset({UserRole.PROVIDER_ADMIN, UserRole.PROVIDER_STAFF})
CLIENT_ROLES = frozenset(
    {UserRole.CLIENT_ADMIN, UserRole.CLIENT_APPROVER, UserRole.CLIENT_VIEWER}
)


class User(Base):
    """A person who can sign in to the portal."""

    __tablename__ = "users"

    id = Column("user_id", GUID(), primary_key=True, default=generate_uuid)
    organization_id = Column(
        GUID(),
        ForeignKey("organizations.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    email = Column(String(255), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    title = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    password_hash = Column(String(255), nullable=True)

    role = Column(
        Enum(
            UserRole,
            name="user_role_enum",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=UserRole.CLIENT_VIEWER,
    )
    can_pay = Column(Boolean, nullable=False, default=False)
    is_approver = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    organization = relationship("Organization", back_populates="users")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

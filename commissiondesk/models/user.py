"""
User profile model.

Profiles are written by the identity provider; this service only reads
them to resolve names and roles.
"""

from enum import Enum

from sqlalchemy import Boolean, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from commissiondesk.models.base import Base, TimestampMixin


class UserRole(str, Enum):
    """User roles for access control."""
    MEMBER = "member"
    MANAGER = "manager"
    ADMIN = "admin"


class UserProfile(Base, TimestampMixin):
    """
    Salesperson or manager account.

    - member: records own sales, sees own commissions
    - manager / admin: sees and edits every sale and ledger row
    """

    __tablename__ = "user_profiles"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        SQLAlchemyEnum(
            UserRole,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=UserRole.MEMBER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    @property
    def is_manager(self) -> bool:
        return self.role in (UserRole.MANAGER, UserRole.ADMIN)

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id}, email='{self.email}', role={self.role})>"

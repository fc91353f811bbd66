"""
User model with ULID primary keys.
"""
from datetime import datetime
from sqlalchemy import String, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskguard.core.database.base import Base, TimestampMixin, generate_ulid


class User(Base, TimestampMixin):
    """
    User model representing authenticated users.

    Every user has exactly one role and one home organization.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    role_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    organization_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    last_login_at: Mapped[datetime | None] = mapped_column(nullable=True)

    role: Mapped["Role"] = relationship(  # type: ignore
        "Role",
        lazy="selectin"
    )
    organization: Mapped["Organization"] = relationship(  # type: ignore
        "Organization",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"

"""
Organization model.

Organizations form a tree through parent_id, but authorization only ever looks
one level down: a user's home organization and its direct children.
"""
from sqlalchemy import String, ForeignKey, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from taskguard.core.database.base import Base, TimestampMixin, generate_ulid


class Organization(Base, TimestampMixin):
    """
    Organization owning users and tasks.

    A null parent_id marks a top-level organization.
    """
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    parent_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name!r}, parent_id={self.parent_id})>"

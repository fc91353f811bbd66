"""
Task model.
"""
from sqlalchemy import String, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskguard.core.database.base import Base, TimestampMixin, generate_ulid


class Task(Base, TimestampMixin):
    """
    A task belongs to one organization and one owning user.

    type is "personal" or "work"; status is "todo", "in-progress" or "done";
    priority is "low", "medium" or "high".
    """
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="todo", index=True)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    organization_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    owner_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title!r}, type={self.type}, org_id={self.organization_id})>"

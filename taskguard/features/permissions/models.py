"""
Role and Permission models.

A permission is an (action, entity, access) triple. `access` is stored as text
and may be compound ("own,any"); it is split once when a role is turned into
an rbac.Role for evaluation.
"""
from sqlalchemy import String, ForeignKey, Table, Column, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskguard.core.database.base import Base, TimestampMixin, generate_ulid


# Role-Permission relationship
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", String(26), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", String(26), ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Permission(Base, TimestampMixin):
    """
    A single grant, e.g. action="update", entity="task", access="own".
    """
    __tablename__ = "permissions"
    __table_args__ = (UniqueConstraint("action", "entity", "access", name="uq_permission_triple"),)

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entity: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    access: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, {self.action}:{self.entity}:{self.access})>"


class Role(Base, TimestampMixin):
    """
    Role model grouping permissions. Examples: owner, admin, viewer.

    The role named "owner" satisfies every permission regardless of its grants.
    """
    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name!r})>"

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_library.core.database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255))  # pbkdf2 hash

    # Profile
    display_name: Mapped[str] = mapped_column(String(100))
    avatar: Mapped[str | None] = mapped_column(String(2048))

    # Presence
    is_online: Mapped[bool] = mapped_column(Boolean, default=False)

    memberships: Mapped[list["UserFamily"]] = relationship(back_populates="user")


class Family(Base):
    __tablename__ = "families"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), index=True)

    memberships: Mapped[list["UserFamily"]] = relationship(back_populates="family")


class UserFamily(Base):
    """Join row: one user's membership in one family."""

    __tablename__ = "user_families"
    __table_args__ = (
        UniqueConstraint("user_id", "family_id", name="unique_user_family"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    family_id: Mapped[int] = mapped_column(ForeignKey("families.id"), index=True)

    user: Mapped["User"] = relationship(back_populates="memberships")
    family: Mapped["Family"] = relationship(back_populates="memberships")

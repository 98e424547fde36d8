"""User domain models."""

from uuid import UUID, uuid4

from sqlalchemy import Boolean, String
from sqlalchemy import Uuid as SQLALCHEMY_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """User identity record.

    ``username`` is the immutable business key. Users are soft-disabled through
    ``is_active`` and never deleted by the authentication flows.
    """

    __tablename__ = "users"

    # Primary key
    id: Mapped[UUID] = mapped_column(SQLALCHEMY_UUID(as_uuid=True), primary_key=True, default=uuid4)

    # Identity (globally unique)
    username: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Authentication
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Status
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true", index=True
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"

"""Session models (server-side refresh token tracking)."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, text
from sqlalchemy import Uuid as SQLALCHEMY_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin, UTCDateTime, utcnow


class UserSession(Base, TimestampMixin):
    """The single source of truth for whether a refresh token is still usable.

    A user owns at most one non-revoked session. The partial unique index
    ``uq_sessions_user_active`` enforces that in the database itself.
    """

    __tablename__ = "sessions"
    __table_args__ = (
        Index(
            "uq_sessions_user_active",
            "user_id",
            unique=True,
            postgresql_where=text("NOT is_revoked"),
            sqlite_where=text("NOT is_revoked"),
        ),
    )

    # Primary key
    session_id: Mapped[UUID] = mapped_column(SQLALCHEMY_UUID(as_uuid=True), primary_key=True, default=uuid4)

    # Ownership and token
    user_id: Mapped[UUID] = mapped_column(
        SQLALCHEMY_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    # Descriptive client metadata, never used for authorization
    device_info: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)  # IPv6 max length is 45
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Lifetime
    last_activity_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    # Revocation (revoked_at is set exactly when is_revoked is)
    is_revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false", index=True
    )
    revoked_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def is_valid(self, now: datetime | None = None) -> bool:
        """A session is valid iff it is not revoked and not yet expired."""
        return not self.is_revoked and not self.is_expired(now)

    def revoke(self, now: datetime | None = None) -> None:
        self.is_revoked = True
        self.revoked_at = now or utcnow()

    def __repr__(self) -> str:
        return f"<UserSession id={self.session_id} user_id={self.user_id} revoked={self.is_revoked}>"

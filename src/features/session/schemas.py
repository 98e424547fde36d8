"""Session schemas (DTOs)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class SessionMetadata(BaseModel):
    """Client metadata stored alongside a session.

    Passed explicitly from the HTTP layer to the auth service. Purely
    descriptive: none of these fields take part in authorization decisions.
    """

    device_info: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class SessionResponse(BaseModel):
    """Session view without the refresh token value.

    History rows are included: a replaced or logged-out session has
    ``is_revoked`` set and ``revoked_at`` filled in.
    """

    session_id: UUID
    device_info: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    last_activity_at: datetime
    expires_at: datetime
    is_revoked: bool
    revoked_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}

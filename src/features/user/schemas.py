"""User schemas (DTOs)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr


# Response schemas
class UserResponse(BaseModel):
    """Outward user view. The password hash is never part of it."""

    id: UUID
    username: str
    email: EmailStr
    full_name: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}

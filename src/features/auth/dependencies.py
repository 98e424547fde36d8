"""Authentication dependencies for FastAPI."""

from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session

from .jwt_utils import extract_bearer_token
from .schemas import TokenClaims
from .service import AuthService

# Raw header; the scheme is checked by extract_bearer_token
authorization_header = APIKeyHeader(name="Authorization", auto_error=False, description="Bearer <access token>")


async def get_current_claims(
    authorization: str | None = Depends(authorization_header),
    session: AsyncSession = Depends(get_db_session),
) -> TokenClaims:
    """Validate the bearer access token of the current request.

    Args:
        authorization: Raw ``Authorization`` header value
        session: Database session

    Returns:
        Claims of a valid access token whose user is active

    Raises:
        TokenMissingException: If no Authorization header was sent
        InvalidTokenException: If the scheme is not Bearer or the token is invalid
        TokenExpiredException: If the access token expired
        UserInactiveException: If the user was disabled

    """
    token = extract_bearer_token(authorization)
    return await AuthService.validate_token(session, token)

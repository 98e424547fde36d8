"""Request rate limiting for credential endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from src.config.settings import settings

# Attached to app.state in main; routes decorate with limiter.limit(...)
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

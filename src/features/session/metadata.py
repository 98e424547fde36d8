"""Derive session metadata from an inbound request."""

from fastapi import Request

from .schemas import SessionMetadata


def get_client_ip(request: Request) -> str | None:
    """Client address, preferring proxy headers when present."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else None


def parse_device_info(user_agent: str | None) -> str:
    """Coarse device descriptor from a User-Agent string."""
    if not user_agent:
        return "Unknown"

    ua = user_agent.lower()

    if "iphone" in ua:
        return "iPhone"
    if "ipad" in ua:
        return "iPad"
    if "android" in ua:
        return "Android Phone" if "mobile" in ua else "Android Tablet"
    if "windows" in ua:
        return "Windows PC"
    if "macintosh" in ua or "mac os x" in ua:
        return "Mac"
    if "linux" in ua:
        return "Linux PC"

    return "Desktop"


async def get_session_metadata(request: Request) -> SessionMetadata:
    """FastAPI dependency building ``SessionMetadata`` for the current request."""
    user_agent = request.headers.get("user-agent")
    return SessionMetadata(
        device_info=parse_device_info(user_agent),
        ip_address=get_client_ip(request),
        user_agent=user_agent[:500] if user_agent else None,
    )

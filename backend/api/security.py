"""
Request guards for the reconciliation API.

Confirming a match writes a learned pattern, so that endpoint can be locked
behind RECONCILE_API_KEY and tags each pattern with the acting user.
"""
from typing import Optional

from fastapi import Header, HTTPException

from backend.core.config import settings

ANONYMOUS_USER = "unknown"


def require_api_key(x_api_key: Optional[str] = Header(None)) -> None:
    """Reject writes without the configured key. No key configured means open."""
    if settings.API_KEY and x_api_key != settings.API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")


def acting_user(x_user: Optional[str] = Header(None)) -> Optional[str]:
    """User from the X-User header, None when absent or blank."""
    return (x_user or "").strip() or None


def resolve_user(header_user: Optional[str], body_user: Optional[str] = None) -> str:
    """The header identity wins; the body value is only used without one."""
    return header_user or (body_user or "").strip() or ANONYMOUS_USER

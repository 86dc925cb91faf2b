"""
API Dependencies
Common dependencies for API endpoints (authentication, authorization, etc.)
"""

from typing import Optional

from fastapi import Depends, Header

from portal.core.exceptions import Forbidden
from portal.core.security import Role, get_current_user, require_role
from portal.db.session import get_db  # same callable, so dependency overrides apply everywhere
from portal.models.user import User
from portal.services.webhook_service import verify_webhook_secret

require_student = require_role(Role.STUDENT)
require_company = require_role(Role.COMPANY)
require_admin = require_role(Role.ADMIN)


async def forbid_demo(current_user: User = Depends(get_current_user)) -> User:
    """
    Block demo identities from mutating routes.

    Demo accounts exist for product walkthroughs and may browse every
    screen of their role, but never change shared state.
    """
    if current_user.is_demo:
        raise Forbidden("Demo accounts cannot perform this action")
    return current_user


async def require_webhook_secret(
    x_webhook_secret: Optional[str] = Header(None),
    x_n8n_secret: Optional[str] = Header(None),
) -> Optional[str]:
    """
    Check the automation's shared secret before the body is parsed.

    Returns the presented secret so the route can hand it to the service.
    """
    presented = x_webhook_secret or x_n8n_secret
    verify_webhook_secret(presented)
    return presented


__all__ = [
    "get_db",
    "get_current_user",
    "require_student",
    "require_company",
    "require_admin",
    "forbid_demo",
    "require_webhook_secret",
]

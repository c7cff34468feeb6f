"""
Caller identity for the marketplace handlers.

The caller is always the Cognito ``sub`` set by the API Gateway authorizer.
Request bodies never name the acting client or worker.
"""
from typing import Any, Dict, List, Optional

from .errors import Forbidden, Unauthorized
from .models import Role


def _claims(event: dict) -> Dict[str, Any]:
    try:
        return event['requestContext']['authorizer']['claims'] or {}
    except (KeyError, TypeError):
        return {}


def get_user_sub(event: dict) -> Optional[str]:
    """Cognito sub of the caller, or None for anonymous requests."""
    return _claims(event).get('sub') or None


def require_user_sub(event: dict) -> str:
    """
    Cognito sub of the caller.

    Raises:
        Unauthorized: the request has no authenticated caller
    """
    sub = get_user_sub(event)
    if not sub:
        raise Unauthorized()
    return sub


def get_user_groups(event: dict) -> List[str]:
    """Cognito groups of the caller (client, worker, admin)."""
    groups = _claims(event).get('cognito:groups', '')
    if isinstance(groups, str):
        return groups.split(',') if groups else []
    return list(groups or [])


def is_admin(event: dict) -> bool:
    return Role.ADMIN.value in get_user_groups(event)


def require_admin(event: dict) -> str:
    """
    Raises:
        Unauthorized: anonymous request
        Forbidden: the caller is not in the admin group
    """
    sub = require_user_sub(event)
    if not is_admin(event):
        raise Forbidden('Admin access required')
    return sub


def require_self_or_admin(event: dict, user_id: Optional[str]) -> str:
    """
    Caller sub, provided the caller is user_id or an admin.

    Raises:
        Unauthorized: anonymous request
        Forbidden: the caller acts on another user's profile
    """
    sub = require_user_sub(event)
    if sub != user_id and not is_admin(event):
        raise Forbidden('You can only update your own profile')
    return sub

"""
Current User Handler.
GET /users/me
Resolves the caller's profile from the Cognito sub.
"""
from marketplace.auth import require_user_sub
from marketplace.errors import MarketplaceError
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response
from marketplace.workers import WorkerDirectory


def handler(event, context):
    log_event(event)

    try:
        uid = require_user_sub(event)
        return format_response(200, WorkerDirectory(get_store()).find_by_uid(uid))

    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error fetching current user: {e}")
        return format_response(500, {'error': 'Internal Server Error'})

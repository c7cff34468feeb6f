"""
List Users Handler (admin only).
GET /admin/users            all non-admin users
GET /admin/users?view=emails   email and disabled flag only
"""
from marketplace.auth import require_admin
from marketplace.errors import MarketplaceError
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response, get_query_param
from marketplace.workers import WorkerDirectory


def handler(event, context):
    log_event(event)

    try:
        require_admin(event)
        directory = WorkerDirectory(get_store())
        if get_query_param(event, 'view') == 'emails':
            return format_response(200, {'users': directory.list_emails()})

        users = list(directory.list_users())
        return format_response(200, {'users': users, 'total': len(users)})

    except MarketplaceError as e:
        logger.warning(f"User listing rejected: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing users: {e}")
        return format_response(500, {'error': 'Internal Server Error'})

"""
Disable / Enable User Handler (admin only).
PATCH /admin/users/{userId}/disable
PATCH /admin/users/{userId}/enable
"""
from marketplace.auth import require_admin
from marketplace.errors import MarketplaceError
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response, get_path_param
from marketplace.workers import WorkerDirectory


def handler(event, context):
    log_event(event)

    user_id = get_path_param(event, 'userId')
    disable = not (event.get('path') or event.get('resource') or '').rstrip('/').endswith('/enable')

    try:
        require_admin(event)
        user = WorkerDirectory(get_store()).set_disabled(user_id, disable)
        return format_response(200, {'userId': user['userId'], 'isDisabled': user['isDisabled']})

    except MarketplaceError as e:
        logger.warning(f"Disable/enable of {user_id} rejected: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error changing disabled flag of {user_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})

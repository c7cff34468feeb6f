"""
Create User Handler.
POST /users
Registers a client, or a wizard when isWizard is true.
"""
from marketplace.auth import get_user_sub
from marketplace.errors import MarketplaceError
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response, parse_body
from marketplace.workers import WorkerDirectory


def handler(event, context):
    log_event(event)

    body = parse_body(event)
    # The identity-provider uid comes from the token, never from the body
    body.pop('uidFireBase', None)
    uid = get_user_sub(event)
    if uid:
        body['uidFireBase'] = uid

    # Admins are never self-registered
    if body.get('role') == 'admin':
        body['role'] = 'client'

    try:
        user = WorkerDirectory(get_store()).create_user(body)
        return format_response(201, user)

    except MarketplaceError as e:
        logger.warning(f"Registration rejected: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating user: {e}")
        return format_response(500, {'error': 'Internal Server Error'})

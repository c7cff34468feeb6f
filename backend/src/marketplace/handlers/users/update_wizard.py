"""
Update Wizard Handler.
PATCH /users/{userId}/wizard
Body: { "languages", "subjects", "experience", "name", "image", "calendar" }
Upgrades a user to wizard, or updates an existing wizard profile.
"""
from marketplace.auth import require_self_or_admin
from marketplace.errors import MarketplaceError
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response, get_path_param, parse_body
from marketplace.workers import PROFILE_FIELDS, WorkerDirectory


def handler(event, context):
    log_event(event)

    user_id = get_path_param(event, 'userId')
    body = parse_body(event)
    profile = {name: body[name] for name in PROFILE_FIELDS if name in body}

    try:
        require_self_or_admin(event, user_id)
        user = WorkerDirectory(get_store()).upgrade_to_wizard(
            user_id,
            languages=body.get('languages'),
            subjects=body.get('subjects'),
            experience=body.get('experience'),
            **profile
        )
        user.pop('email', None)
        return format_response(200, user)

    except MarketplaceError as e:
        logger.warning(f"Wizard update for {user_id} rejected: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error updating wizard {user_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})

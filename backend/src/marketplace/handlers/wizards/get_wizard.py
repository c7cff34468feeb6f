"""
Get Wizard Handler.
GET /wizards/{wizardId}
"""
from marketplace.errors import MarketplaceError
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response, get_path_param
from marketplace.workers import WorkerDirectory


def handler(event, context):
    log_event(event)

    wizard_id = get_path_param(event, 'wizardId')

    try:
        return format_response(200, WorkerDirectory(get_store()).get_wizard(wizard_id))

    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error fetching wizard {wizard_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})

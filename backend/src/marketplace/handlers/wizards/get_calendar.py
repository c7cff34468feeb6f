"""
Get Calendar Handler.
GET /wizards/{wizardId}/calendar
Exposes the stored calendar data; no scheduling logic.
"""
from marketplace.discovery import DiscoveryEngine
from marketplace.errors import MarketplaceError
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response, get_path_param


def handler(event, context):
    log_event(event)

    wizard_id = get_path_param(event, 'wizardId')

    try:
        return format_response(200, DiscoveryEngine(get_store()).get_calendar(wizard_id))

    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error fetching calendar of {wizard_id}: {e}")
        return format_response(500, {'error': 'Internal Server Error'})

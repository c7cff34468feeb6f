"""
Leaderboard Handlers.
GET /wizards/top-sellers   -> top_sellers_handler
GET /wizards/top-rated     -> top_rated_handler
"""
from marketplace.discovery import DiscoveryEngine
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import format_response


def top_sellers_handler(event, context):
    log_event(event)

    try:
        return format_response(200, {'wizards': DiscoveryEngine(get_store()).top_sellers()})
    except Exception as e:
        logger.exception(f"Error computing top sellers: {e}")
        return format_response(500, {'error': 'Internal Server Error'})


def top_rated_handler(event, context):
    log_event(event)

    try:
        return format_response(200, {'wizards': DiscoveryEngine(get_store()).top_rated_wizards()})
    except Exception as e:
        logger.exception(f"Error computing top rated wizards: {e}")
        return format_response(500, {'error': 'Internal Server Error'})

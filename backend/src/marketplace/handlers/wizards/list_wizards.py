"""
List Wizards Handler.
GET /wizards?subjects=Math,Physics&languages=English&sortByReviews=desc&page=1&size=10
Returns one page of active wizards plus pagination metadata.
"""
import math

from marketplace.config import config
from marketplace.discovery import DiscoveryEngine
from marketplace.errors import MarketplaceError
from marketplace.logging import logger, log_event
from marketplace.store import get_store
from marketplace.utils import error_response, format_response, get_int_query_param, get_query_list, get_query_param


def handler(event, context):
    log_event(event)

    try:
        subjects = get_query_list(event, 'subjects')
        languages = get_query_list(event, 'languages')
        sort_by_reviews = get_query_param(event, 'sortByReviews')
        page = get_int_query_param(event, 'page', 1)
        # Page size is caller-supplied; cap it
        size = min(get_int_query_param(event, 'size', config.DEFAULT_PAGE_SIZE), config.MAX_PAGE_SIZE)

        engine = DiscoveryEngine(get_store())
        wizards = list(engine.list_wizards(subjects, languages, sort_by_reviews, page=page, size=size))
        total = engine.count_wizards(subjects, languages)

        return format_response(200, {
            'wizards': wizards,
            'total': total,
            'page': page,
            'size': size,
            'totalPages': math.ceil(total / size) if size > 0 else 0
        })

    except MarketplaceError as e:
        logger.warning(f"Wizard listing rejected: {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing wizards: {e}")
        return format_response(500, {'error': 'Internal Server Error'})

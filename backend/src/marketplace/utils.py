"""
Common utility functions for Lambda handlers.
"""
import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import MarketplaceError, ValidationError


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal types from DynamoDB."""

    def default(self, o):
        if isinstance(o, Decimal):
            # Convert to int if it's a whole number, otherwise float
            if o % 1 == 0:
                return int(o)
            return float(o)
        if isinstance(o, Enum):
            return o.value
        if isinstance(o, (set, frozenset)):
            return sorted(o)
        return super().default(o)


def now_iso() -> str:
    """Timezone-aware UTC timestamp for createdAt/updatedAt."""
    return datetime.now(timezone.utc).isoformat()


def format_response(
    status_code: int,
    body: Any,
    headers: Dict[str, str] = None
) -> Dict[str, Any]:
    """
    Format a standard API Gateway response with CORS headers.

    Args:
        status_code: HTTP status code
        body: Response body (will be JSON serialized)
        headers: Additional headers to include

    Returns:
        API Gateway response dict
    """
    default_headers = {
        'Access-Control-Allow-Origin': '*',
        'Access-Control-Allow-Credentials': True,
        'Content-Type': 'application/json'
    }

    if headers:
        default_headers.update(headers)

    return {
        'statusCode': status_code,
        'headers': default_headers,
        'body': json.dumps(body, cls=DecimalEncoder)
    }


def parse_body(event: dict) -> dict:
    """
    Safely parse JSON body from API Gateway event.

    Args:
        event: API Gateway Lambda proxy event

    Returns:
        Parsed body dict or empty dict if invalid
    """
    try:
        body = event.get('body') or '{}'
        if isinstance(body, str):
            body = json.loads(body)
        return body if isinstance(body, dict) else {}
    except (json.JSONDecodeError, TypeError):
        return {}


def get_path_param(event: dict, param_name: str) -> Optional[str]:
    """Extract path parameter from event."""
    try:
        return event['pathParameters'][param_name]
    except (KeyError, TypeError):
        return None


def get_query_param(event: dict, param_name: str, default: str = None) -> Optional[str]:
    """Extract query string parameter from event."""
    params = event.get('queryStringParameters') or {}
    return params.get(param_name, default)


def get_query_list(event: dict, param_name: str) -> Optional[List[str]]:
    """
    Extract a list-valued query parameter.
    Accepts repeated parameters (?subjects=Math&subjects=Art) and
    comma-separated values (?subjects=Math,Art). None when absent.
    """
    raw = (event.get('multiValueQueryStringParameters') or {}).get(param_name)
    if not raw:
        single = get_query_param(event, param_name)
        raw = [single] if single else []
    values = [part.strip() for value in raw for part in value.split(',') if part.strip()]
    return values or None


def get_int_query_param(event: dict, param_name: str, default: int) -> int:
    """Integer query parameter; ValidationError when not a number."""
    raw = get_query_param(event, param_name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(param_name, 'must be an integer')


def error_response(error: MarketplaceError) -> Dict[str, Any]:
    """API Gateway response for a MarketplaceError."""
    return format_response(error.status_code, error.to_dict())

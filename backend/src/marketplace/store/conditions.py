"""
In-process evaluation of boto3 condition objects.

Mirrors DynamoDB semantics closely enough for the marketplace queries:
comparisons against a missing attribute are false (except ``<>``), booleans
never equal numbers, and ``contains`` is membership on lists/sets and
substring on strings.
"""
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

from boto3.dynamodb.conditions import AttributeBase, ConditionBase

from .base import has_path, resolve_path


def _name(attribute: AttributeBase) -> str:
    return attribute.name


def _normalize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _equal(left: Any, right: Any) -> bool:
    left, right = _normalize(left), _normalize(right)
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    return left == right


def _compare(left: Any, right: Any, operator: str) -> bool:
    left, right = _normalize(left), _normalize(right)
    try:
        if operator == '<':
            return left < right
        if operator == '<=':
            return left <= right
        if operator == '>':
            return left > right
        return left >= right
    except TypeError:
        # Mismatched types never satisfy an ordering comparison
        return False


def _contains(container: Any, operand: Any) -> bool:
    operand = _normalize(operand)
    if isinstance(container, str):
        return isinstance(operand, str) and operand in container
    if isinstance(container, (list, set, frozenset, tuple)):
        return any(_equal(item, operand) for item in container)
    return False


def evaluate(condition: ConditionBase, document: Dict[str, Any]) -> bool:
    """Return True if ``document`` satisfies ``condition``."""
    expression = condition.get_expression()
    operator = expression['operator']
    values = expression['values']

    if operator == 'AND':
        return all(evaluate(value, document) for value in values)
    if operator == 'OR':
        return any(evaluate(value, document) for value in values)
    if operator == 'NOT':
        return not evaluate(values[0], document)

    path = _name(values[0])

    if operator == 'attribute_exists':
        return has_path(document, path)
    if operator == 'attribute_not_exists':
        return not has_path(document, path)

    present = has_path(document, path)
    current = resolve_path(document, path)

    if operator == '<>':
        return not present or not _equal(current, values[1])
    if not present:
        return False
    if operator == '=':
        return _equal(current, values[1])
    if operator in ('<', '<=', '>', '>='):
        return _compare(current, values[1], operator)
    if operator == 'BETWEEN':
        return _compare(current, values[1], '>=') and _compare(current, values[2], '<=')
    if operator == 'IN':
        return any(_equal(current, candidate) for candidate in values[1])
    if operator == 'contains':
        return _contains(current, values[1])
    if operator == 'begins_with':
        return isinstance(current, str) and current.startswith(_normalize(values[1]))

    raise NotImplementedError(f"Unsupported condition operator: {operator}")

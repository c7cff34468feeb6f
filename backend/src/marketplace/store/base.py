"""
Document store contract consumed by the marketplace core.

Conditions are boto3 condition objects (``Attr('isWizard').eq(True)``), so the
DynamoDB backend hands them to DynamoDB unchanged and the in-memory backend
evaluates the very same objects.
"""
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Protocol, Sequence, Tuple

from boto3.dynamodb.conditions import ConditionBase

from ..models import ASC

SortSpec = Sequence[Tuple[str, int]]


class Guard(NamedTuple):
    """A condition that must hold on another document for a write to proceed."""
    collection: str
    doc_id: str
    condition: ConditionBase


class DocumentStore(Protocol):
    """Abstract store handle injected into every core component."""

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    def find_one(
        self,
        collection: str,
        condition: ConditionBase,
        projection: Optional[Sequence[str]] = None,
        exclude: Sequence[str] = ()
    ) -> Optional[Dict[str, Any]]:
        ...

    def find_many(
        self,
        collection: str,
        condition: Optional[ConditionBase] = None,
        projection: Optional[Sequence[str]] = None,
        exclude: Sequence[str] = (),
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> Iterator[Dict[str, Any]]:
        ...

    def count(self, collection: str, condition: Optional[ConditionBase] = None) -> int:
        ...

    def insert(
        self,
        collection: str,
        document: Dict[str, Any],
        unique: Sequence[str] = (),
        guards: Sequence[Guard] = ()
    ) -> Dict[str, Any]:
        ...

    def conditional_update(
        self,
        collection: str,
        doc_id: str,
        condition: Optional[ConditionBase],
        patch: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        ...


_MISSING = object()


def resolve_path(document: Dict[str, Any], path: str, default: Any = None) -> Any:
    """Read a dotted attribute path ('experience.expJobs') from a document."""
    current: Any = document
    for part in path.split('.'):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def has_path(document: Dict[str, Any], path: str) -> bool:
    return resolve_path(document, path, _MISSING) is not _MISSING


def set_path(document: Dict[str, Any], path: str, value: Any) -> None:
    """Write a dotted attribute path, creating intermediate maps."""
    parts = path.split('.')
    current = document
    for part in parts[:-1]:
        nested = current.get(part)
        if not isinstance(nested, dict):
            nested = {}
            current[part] = nested
        current = nested
    current[parts[-1]] = value


def project(
    document: Dict[str, Any],
    projection: Optional[Sequence[str]] = None,
    exclude: Sequence[str] = ()
) -> Dict[str, Any]:
    """
    Keep only the projected attribute paths (all when projection is None),
    then drop the excluded top-level attributes.
    """
    if projection is None:
        result = dict(document)
    else:
        result = {}
        for path in projection:
            value = resolve_path(document, path, _MISSING)
            if value is not _MISSING:
                set_path(result, path, value)
    for name in exclude:
        result.pop(name, None)
    return result


def _sort_key(path: str):
    # Missing values order lowest, like null in a document database
    def key(document):
        value = resolve_path(document, path)
        return (value is not None, value if value is not None else 0)
    return key


def sort_documents(documents: Iterable[Dict[str, Any]], sort: SortSpec) -> List[Dict[str, Any]]:
    """
    Stable multi-key sort. ``sort`` lists (path, ASC|DESC) by priority.
    """
    ordered = list(documents)
    for path, direction in reversed(list(sort)):
        ordered.sort(key=_sort_key(path), reverse=(direction != ASC))
    return ordered

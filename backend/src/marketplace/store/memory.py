"""
In-memory document store.

Implements the same contract as the DynamoDB backend and evaluates the same
boto3 condition objects. Used for local runs and tests. All mutations run
under one lock, so guarded inserts and conditional updates are atomic.
"""
import copy
import itertools
import threading
import uuid
from typing import Any, Dict, Iterator, Optional, Sequence

from boto3.dynamodb.conditions import ConditionBase

from ..errors import ConditionFailed, DuplicateKey
from ..logging import logger
from ..models import KEY_ATTRIBUTES
from .base import Guard, SortSpec, project, resolve_path, set_path, sort_documents
from .conditions import evaluate


class MemoryDocumentStore:
    """Thread-safe dict-of-dicts store keyed by collection and document id."""

    def __init__(self, key_attributes: Optional[Dict[str, str]] = None):
        self._key_attributes = dict(key_attributes or KEY_ATTRIBUTES)
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def key_attribute(self, collection: str) -> str:
        return self._key_attributes.get(collection, 'id')

    def _documents(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    def _snapshot(self, collection: str, condition: Optional[ConditionBase]):
        with self._lock:
            documents = [copy.deepcopy(doc) for doc in self._documents(collection).values()]
        if condition is None:
            return documents
        return [doc for doc in documents if evaluate(condition, doc)]

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self._documents(collection).get(doc_id)
            return copy.deepcopy(document) if document is not None else None

    def find_one(
        self,
        collection: str,
        condition: ConditionBase,
        projection: Optional[Sequence[str]] = None,
        exclude: Sequence[str] = ()
    ) -> Optional[Dict[str, Any]]:
        for document in self._snapshot(collection, condition):
            return project(document, projection, exclude)
        return None

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
        documents = self._snapshot(collection, condition)
        if sort:
            documents = sort_documents(documents, sort)
        stop = skip + limit if limit is not None else None
        return (project(doc, projection, exclude) for doc in itertools.islice(documents, skip, stop))

    def count(self, collection: str, condition: Optional[ConditionBase] = None) -> int:
        return len(self._snapshot(collection, condition))

    def insert(
        self,
        collection: str,
        document: Dict[str, Any],
        unique: Sequence[str] = (),
        guards: Sequence[Guard] = ()
    ) -> Dict[str, Any]:
        key = self.key_attribute(collection)
        item = copy.deepcopy(document)
        item.setdefault(key, str(uuid.uuid4()))

        with self._lock:
            documents = self._documents(collection)
            if item[key] in documents:
                raise DuplicateKey(key)

            for field in unique:
                value = resolve_path(item, field)
                if value is None:
                    continue
                if any(resolve_path(other, field) == value for other in documents.values()):
                    raise DuplicateKey(field)

            for guard in guards:
                target = self._documents(guard.collection).get(guard.doc_id)
                if target is None or not evaluate(guard.condition, target):
                    raise ConditionFailed(guard.collection, guard.doc_id)

            documents[item[key]] = item

        logger.debug(f"Inserted {collection}/{item[key]}")
        return copy.deepcopy(item)

    def conditional_update(
        self,
        collection: str,
        doc_id: str,
        condition: Optional[ConditionBase],
        patch: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self._documents(collection).get(doc_id)
            if document is None:
                return None
            if condition is not None and not evaluate(condition, document):
                return None
            for path, value in patch.items():
                set_path(document, path, copy.deepcopy(value))
            return copy.deepcopy(document)

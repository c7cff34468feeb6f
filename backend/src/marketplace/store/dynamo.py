"""
DynamoDB document store.

Conditions go to DynamoDB as FilterExpression / ConditionExpression through
the boto3 resource, which serializes both the condition objects and native
Python values. Transactions go through the low-level client instead, so each
transaction item carries its own string ConditionExpression, placeholders and
typed values. Scans follow LastEvaluatedKey; sorting, offsets and projections
are applied to the scanned items.
"""
import itertools
import uuid
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence

import boto3
from boto3.dynamodb.conditions import Attr, ConditionBase, ConditionExpressionBuilder
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from ..config import config
from ..errors import ConditionFailed, DuplicateKey
from ..logging import logger
from ..models import JOBS, KEY_ATTRIBUTES, USERS
from .base import Guard, SortSpec, project, resolve_path, sort_documents

UNIQUE_KEY_ATTRIBUTE = 'uniqueKey'

_serializer = TypeSerializer()


def to_dynamo(value: Any) -> Any:
    """Convert a Python value into something boto3 can serialize."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_dynamo(v) for v in value]
    return value


def to_attribute_values(item: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Typed attribute values ({'S': ...}, {'N': ...}) for the low-level client."""
    return {name: _serializer.serialize(to_dynamo(value)) for name, value in item.items()}


def condition_params(condition: ConditionBase) -> Dict[str, Any]:
    """
    ConditionExpression for one transaction item, with its own
    ExpressionAttributeNames and typed ExpressionAttributeValues.
    """
    built = ConditionExpressionBuilder().build_expression(condition)
    params: Dict[str, Any] = {
        'ConditionExpression': built.condition_expression,
        'ExpressionAttributeNames': built.attribute_name_placeholders
    }
    # DynamoDB rejects an empty ExpressionAttributeValues map
    if built.attribute_value_placeholders:
        params['ExpressionAttributeValues'] = to_attribute_values(built.attribute_value_placeholders)
    return params


def _update_expression(patch: Dict[str, Any]):
    """Build 'SET #a = :a, #b.#c = :b' with placeholders that do not clash with boto3's."""
    clauses = []
    names: Dict[str, str] = {}
    values: Dict[str, Any] = {}
    for index, (path, value) in enumerate(patch.items()):
        placeholders = []
        for depth, part in enumerate(path.split('.')):
            placeholder = f'#set{index}_{depth}'
            names[placeholder] = part
            placeholders.append(placeholder)
        values[f':set{index}'] = to_dynamo(value)
        clauses.append(f"{'.'.join(placeholders)} = :set{index}")
    return 'SET ' + ', '.join(clauses), names, values


class DynamoDocumentStore:
    """Document store backed by one DynamoDB table per collection."""

    def __init__(
        self,
        resource,
        table_names: Dict[str, str],
        uniques_table: Optional[str] = None,
        key_attributes: Optional[Dict[str, str]] = None,
        client=None
    ):
        self._resource = resource
        self._table_names = dict(table_names)
        self._uniques_table = uniques_table
        self._key_attributes = dict(key_attributes or KEY_ATTRIBUTES)
        # Transactions use the low-level client with typed values
        self._client = client or boto3.client('dynamodb', region_name=config.AWS_REGION)

    @classmethod
    def from_config(cls) -> 'DynamoDocumentStore':
        params = {'region_name': config.AWS_REGION}
        if config.DYNAMODB_ENDPOINT_URL:
            params['endpoint_url'] = config.DYNAMODB_ENDPOINT_URL
        return cls(
            boto3.resource('dynamodb', **params),
            table_names={USERS: config.USERS_TABLE, JOBS: config.JOBS_TABLE},
            uniques_table=config.UNIQUES_TABLE or None,
            client=boto3.client('dynamodb', **params)
        )

    def key_attribute(self, collection: str) -> str:
        return self._key_attributes.get(collection, 'id')

    def _table_name(self, collection: str) -> str:
        return self._table_names[collection]

    def _table(self, collection: str):
        return self._resource.Table(self._table_name(collection))

    def _scan(self, collection: str, condition: Optional[ConditionBase]) -> Iterator[Dict[str, Any]]:
        table = self._table(collection)
        params: Dict[str, Any] = {}
        if condition is not None:
            params['FilterExpression'] = condition
        while True:
            try:
                response = table.scan(**params)
            except ClientError as e:
                logger.error(f"Error scanning {self._table_name(collection)}: {e}")
                raise
            yield from response.get('Items', [])
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                break
            params['ExclusiveStartKey'] = last_key

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a single item from DynamoDB."""
        try:
            response = self._table(collection).get_item(Key={self.key_attribute(collection): doc_id})
        except ClientError as e:
            logger.error(f"Error getting item from {self._table_name(collection)}: {e}")
            raise
        return response.get('Item')

    def find_one(
        self,
        collection: str,
        condition: ConditionBase,
        projection: Optional[Sequence[str]] = None,
        exclude: Sequence[str] = ()
    ) -> Optional[Dict[str, Any]]:
        for item in self._scan(collection, condition):
            return project(item, projection, exclude)
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
        """
        Scan a table and return matching items.

        Args:
            collection: Logical collection name
            condition: Optional filter expression
            projection: Attribute paths to keep (all when None)
            exclude: Top-level attributes to drop
            sort: (path, direction) pairs by priority
            skip: Items to skip after sorting
            limit: Max items to return

        Returns:
            Iterator over the matching items
        """
        items = self._scan(collection, condition)
        if sort:
            items = iter(sort_documents(items, sort))
        stop = skip + limit if limit is not None else None
        return (project(item, projection, exclude) for item in itertools.islice(items, skip, stop))

    def count(self, collection: str, condition: Optional[ConditionBase] = None) -> int:
        table = self._table(collection)
        params: Dict[str, Any] = {'Select': 'COUNT'}
        if condition is not None:
            params['FilterExpression'] = condition
        total = 0
        while True:
            try:
                response = table.scan(**params)
            except ClientError as e:
                logger.error(f"Error counting {self._table_name(collection)}: {e}")
                raise
            total += response.get('Count', 0)
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return total
            params['ExclusiveStartKey'] = last_key

    def insert(
        self,
        collection: str,
        document: Dict[str, Any],
        unique: Sequence[str] = (),
        guards: Sequence[Guard] = ()
    ) -> Dict[str, Any]:
        """
        Put a new item. Unique attributes and guards are enforced in one
        transaction together with the put.

        Raises:
            DuplicateKey: the item id or a unique attribute value is taken
            ConditionFailed: a guard did not hold
        """
        key = self.key_attribute(collection)
        item = to_dynamo(document)
        item.setdefault(key, str(uuid.uuid4()))
        not_exists = Attr(key).not_exists()

        unique_fields = [field for field in unique if resolve_path(item, field) is not None]
        if not unique_fields and not guards:
            try:
                self._table(collection).put_item(Item=item, ConditionExpression=not_exists)
            except ClientError as e:
                if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
                    raise DuplicateKey(key)
                logger.error(f"Error putting item in {self._table_name(collection)}: {e}")
                raise
            return item

        transact_items: List[Dict[str, Any]] = [{
            'Put': {
                'TableName': self._table_name(collection),
                'Item': to_attribute_values(item),
                **condition_params(not_exists)
            }
        }]
        for field in unique_fields:
            transact_items.append({
                'Put': {
                    'TableName': self._uniques_table,
                    'Item': to_attribute_values({
                        UNIQUE_KEY_ATTRIBUTE: f"{collection}#{field}#{resolve_path(item, field)}",
                        'ownerId': item[key]
                    }),
                    **condition_params(Attr(UNIQUE_KEY_ATTRIBUTE).not_exists())
                }
            })
        for guard in guards:
            guard_key = self.key_attribute(guard.collection)
            transact_items.append({
                'ConditionCheck': {
                    'TableName': self._table_name(guard.collection),
                    'Key': to_attribute_values({guard_key: guard.doc_id}),
                    **condition_params(Attr(guard_key).exists() & guard.condition)
                }
            })

        try:
            self._client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            if e.response['Error']['Code'] != 'TransactionCanceledException':
                logger.error(f"Error inserting into {self._table_name(collection)}: {e}")
                raise
            reasons = e.response.get('CancellationReasons', [])
            failed = [i for i, reason in enumerate(reasons) if reason.get('Code') == 'ConditionalCheckFailed']
            if not failed or failed[0] == 0:
                raise DuplicateKey(key)
            index = failed[0]
            if index <= len(unique_fields):
                raise DuplicateKey(unique_fields[index - 1])
            guard = guards[index - 1 - len(unique_fields)]
            raise ConditionFailed(guard.collection, guard.doc_id)

        logger.info(f"Inserted {collection}/{item[key]}")
        return item

    def conditional_update(
        self,
        collection: str,
        doc_id: str,
        condition: Optional[ConditionBase],
        patch: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Update an item only if it exists and the condition holds."""
        key = self.key_attribute(collection)
        expression, names, values = _update_expression(patch)
        condition_expression = Attr(key).exists()
        if condition is not None:
            condition_expression = condition_expression & condition

        try:
            response = self._table(collection).update_item(
                Key={key: doc_id},
                UpdateExpression=expression,
                ConditionExpression=condition_expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues='ALL_NEW'
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
                return None
            logger.error(f"Error updating item in {self._table_name(collection)}: {e}")
            raise
        return response.get('Attributes')

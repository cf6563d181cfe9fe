"""
Generic DynamoDB handler for the inventory table.

This module wraps the boto3 table resource with consistent error translation,
numeric conversion (DynamoDB only accepts Decimal numbers) and observability.
A table resource is created per thread because boto3 resources must not be
shared between the worker threads of a concurrent batch.
"""

import functools
import threading
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import BotoCoreError, ClientError

from chem_inventory.handlers.utils.errors import ErrorSeverity, PersistenceError
from chem_inventory.handlers.utils.observability import logger, metrics, tracer


class DALError(PersistenceError):
    """Base exception for Data Access Layer errors."""

    def __init__(
        self,
        message: str,
        operation: str,
        table_name: str,
        error_code: str = "DAL_ERROR",
        severity: ErrorSeverity = ErrorSeverity.HIGH,
    ):
        super().__init__(message=message, error_code=error_code, severity=severity)
        self.operation = operation
        self.table_name = table_name


class ConditionalCheckFailedError(DALError):
    """Raised when a conditional write is rejected by DynamoDB."""

    def __init__(self, table_name: str, operation: str, condition: str):
        super().__init__(
            message=f"Conditional check failed: {condition}",
            operation=operation,
            table_name=table_name,
            error_code="CONDITIONAL_CHECK_FAILED",
            severity=ErrorSeverity.MEDIUM,
        )
        self.condition = condition


def to_dynamodb_value(value: Any) -> Any:
    """Convert floats (recursively) to Decimal for storage."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamodb_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamodb_value(v) for v in value]
    return value


def from_dynamodb_value(value: Any) -> Any:
    """Convert Decimal (recursively) back to int or float."""
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    if isinstance(value, dict):
        return {k: from_dynamodb_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamodb_value(v) for v in value]
    return value


def handle_dynamodb_errors(operation: str):
    """Decorator translating boto errors into DAL errors and recording metrics."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            operation_start = time.time()
            try:
                result = func(self, *args, **kwargs)

                duration_ms = (time.time() - operation_start) * 1000
                metrics.add_metric(name=f"DynamoDB{operation}Duration", unit=MetricUnit.Milliseconds, value=duration_ms)
                return result

            except ClientError as e:
                error_code = e.response['Error']['Code']
                error_message = e.response['Error']['Message']

                metrics.add_metric(name=f"DynamoDB{operation}Error", unit=MetricUnit.Count, value=1)

                if error_code == 'ConditionalCheckFailedException':
                    logger.info(f"DynamoDB {operation} condition not met", extra={
                        "table_name": self.table_name,
                    })
                    raise ConditionalCheckFailedError(
                        table_name=self.table_name,
                        operation=operation,
                        condition=error_message,
                    )

                logger.error(f"DynamoDB {operation} error", extra={
                    "error_code": error_code,
                    "error_message": error_message,
                    "table_name": self.table_name,
                })

                if error_code == 'ResourceNotFoundException':
                    raise DALError(
                        message=f"Table {self.table_name} not found",
                        operation=operation,
                        table_name=self.table_name,
                        error_code="TABLE_NOT_FOUND",
                    )
                raise DALError(
                    message=f"DynamoDB {operation} failed: {error_message}",
                    operation=operation,
                    table_name=self.table_name,
                    error_code=f"DYNAMODB_{error_code}",
                )

            except BotoCoreError as e:
                metrics.add_metric(name=f"DynamoDB{operation}Error", unit=MetricUnit.Count, value=1)
                logger.error(f"DynamoDB connection error during {operation}", extra={
                    "error": str(e),
                    "table_name": self.table_name,
                })
                raise DALError(
                    message=f"Database connection error: {e}",
                    operation=operation,
                    table_name=self.table_name,
                    error_code="DATABASE_CONNECTION_ERROR",
                )

            except (TypeError, ValueError) as e:
                # Raised by the boto3 serializer, e.g. for Infinity and NaN
                metrics.add_metric(name=f"DynamoDB{operation}Error", unit=MetricUnit.Count, value=1)
                logger.error(f"DynamoDB {operation} could not serialize item", extra={
                    "error": str(e),
                    "table_name": self.table_name,
                })
                raise DALError(
                    message=f"Item could not be serialized for {operation}: {e}",
                    operation=operation,
                    table_name=self.table_name,
                    error_code="SERIALIZATION_ERROR",
                ) from e

        return wrapper
    return decorator


class DynamoDBHandler:
    """DynamoDB handler with error translation and observability."""

    def __init__(
        self,
        table_name: str,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        """
        Initialize DynamoDB handler.

        Args:
            table_name: Name of the DynamoDB table
            region_name: AWS region name
            endpoint_url: DynamoDB endpoint URL (for local testing)
        """
        self.table_name = table_name
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self._local = threading.local()

        logger.info("DynamoDB handler initialized", extra={
            "table_name": table_name,
            "region_name": region_name,
            "endpoint_url": endpoint_url,
        })

    @property
    def table(self):
        """Table resource owned by the calling thread."""
        table = getattr(self._local, 'table', None)
        if table is None:
            session = boto3.session.Session(region_name=self.region_name)
            resource = session.resource('dynamodb', endpoint_url=self.endpoint_url)
            table = resource.Table(self.table_name)
            self._local.table = table
        return table

    @tracer.capture_method
    @handle_dynamodb_errors("GetItem")
    def get_item(self, key: Dict[str, Any], consistent_read: bool = False) -> Optional[Dict[str, Any]]:
        """
        Get a single item.

        Args:
            key: Primary key of the item to retrieve
            consistent_read: Whether to use strongly consistent read

        Returns:
            Item data or None if not found

        Raises:
            DALError: If DynamoDB operation fails
        """
        response = self.table.get_item(Key=key, ConsistentRead=consistent_read)
        item = response.get('Item')
        return from_dynamodb_value(item) if item else None

    @tracer.capture_method
    @handle_dynamodb_errors("PutItem")
    def put_item(self, item: Dict[str, Any], condition_expression: Optional[str] = None) -> Dict[str, Any]:
        """
        Put an item.

        Args:
            item: Item data to store
            condition_expression: Conditional expression for the put operation

        Returns:
            The stored item data

        Raises:
            DALError: If DynamoDB operation fails
            ConditionalCheckFailedError: If condition check fails
        """
        now = datetime.now(timezone.utc).isoformat()
        item = {**item, 'created_at': item.get('created_at', now), 'updated_at': now}

        put_item_kwargs: Dict[str, Any] = {'Item': to_dynamodb_value(item)}
        if condition_expression:
            put_item_kwargs['ConditionExpression'] = condition_expression

        self.table.put_item(**put_item_kwargs)

        logger.debug("Item stored successfully", extra={
            "table_name": self.table_name,
            "pk": item.get('pk'),
        })
        return item

    @tracer.capture_method
    @handle_dynamodb_errors("UpdateItem")
    def update_item(
        self,
        key: Dict[str, Any],
        set_values: Dict[str, Any],
        condition_expression: Optional[str] = 'attribute_exists(pk)',
    ) -> Optional[Dict[str, Any]]:
        """
        Set attributes on an existing item.

        Args:
            key: Primary key of the item to update
            set_values: Attribute names and their new values
            condition_expression: Conditional expression for the update

        Returns:
            Updated item data

        Raises:
            DALError: If DynamoDB operation fails
            ConditionalCheckFailedError: If condition check fails
        """
        values = {**set_values, 'updated_at': datetime.now(timezone.utc).isoformat()}
        names = {f'#a{i}': name for i, name in enumerate(values)}
        update_expression = 'SET ' + ', '.join(f'#a{i} = :v{i}' for i in range(len(values)))

        update_kwargs: Dict[str, Any] = {
            'Key': key,
            'UpdateExpression': update_expression,
            'ExpressionAttributeNames': names,
            'ExpressionAttributeValues': {
                f':v{i}': to_dynamodb_value(value) for i, value in enumerate(values.values())
            },
            'ReturnValues': 'ALL_NEW',
        }
        if condition_expression:
            update_kwargs['ConditionExpression'] = condition_expression

        response = self.table.update_item(**update_kwargs)
        return from_dynamodb_value(response.get('Attributes'))

    @tracer.capture_method
    @handle_dynamodb_errors("DeleteItem")
    def delete_item(self, key: Dict[str, Any]) -> bool:
        """
        Delete an item.

        Returns:
            True if item was deleted, False if not found
        """
        response = self.table.delete_item(Key=key, ReturnValues='ALL_OLD')
        deleted = bool(response.get('Attributes'))
        if not deleted:
            logger.warning("Item not found for deletion", extra={
                "table_name": self.table_name,
                "key": key,
            })
        return deleted

    @tracer.capture_method
    @handle_dynamodb_errors("Query")
    def query_items(
        self,
        key_condition: Any,
        filter_expression: Optional[Any] = None,
        index_name: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Query all pages of items matching a key condition.

        Args:
            key_condition: Key condition expression
            filter_expression: Filter expression
            index_name: Global secondary index name

        Returns:
            Matching items

        Raises:
            DALError: If DynamoDB operation fails
        """
        query_kwargs: Dict[str, Any] = {'KeyConditionExpression': key_condition}
        if filter_expression is not None:
            query_kwargs['FilterExpression'] = filter_expression
        if index_name:
            query_kwargs['IndexName'] = index_name

        items: List[Dict[str, Any]] = []
        while True:
            response = self.table.query(**query_kwargs)
            items.extend(response.get('Items', []))
            if 'LastEvaluatedKey' not in response:
                break
            query_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']

        return from_dynamodb_value(items)

    @tracer.capture_method
    @handle_dynamodb_errors("Scan")
    def scan_items(self, filter_expression: Optional[Any] = None) -> List[Dict[str, Any]]:
        """
        Scan all pages of the table.

        Args:
            filter_expression: Filter expression

        Returns:
            Matching items

        Raises:
            DALError: If DynamoDB operation fails
        """
        scan_kwargs: Dict[str, Any] = {}
        if filter_expression is not None:
            scan_kwargs['FilterExpression'] = filter_expression

        items: List[Dict[str, Any]] = []
        while True:
            response = self.table.scan(**scan_kwargs)
            items.extend(response.get('Items', []))
            if 'LastEvaluatedKey' not in response:
                break
            scan_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']

        logger.debug("Scan completed", extra={
            "table_name": self.table_name,
            "items_count": len(items),
        })
        return from_dynamodb_value(items)

    @tracer.capture_method
    @handle_dynamodb_errors("BatchWriteItem")
    def batch_put_items(self, items: List[Dict[str, Any]]) -> int:
        """
        Write many items; the batch writer chunks requests and resends unprocessed items.

        Returns:
            Number of items written
        """
        now = datetime.now(timezone.utc).isoformat()
        with self.table.batch_writer() as batch:
            for item in items:
                batch.put_item(Item=to_dynamodb_value({**item, 'created_at': now, 'updated_at': now}))

        logger.debug("Batch write completed", extra={
            "table_name": self.table_name,
            "put_requests": len(items),
        })
        return len(items)

    @tracer.capture_method
    @handle_dynamodb_errors("UpdateItem")
    def increment_counter(self, counter_name: str) -> int:
        """
        Atomically allocate the next integer from a named counter item.

        Args:
            counter_name: Entity the counter allocates keys for

        Returns:
            The new counter value, starting at 1
        """
        response = self.table.update_item(
            Key={'pk': f'COUNTER#{counter_name}', 'sk': 'COUNTER'},
            UpdateExpression='ADD #value :inc',
            ExpressionAttributeNames={'#value': 'value'},
            ExpressionAttributeValues={':inc': 1},
            ReturnValues='UPDATED_NEW',
        )
        return int(response['Attributes']['value'])

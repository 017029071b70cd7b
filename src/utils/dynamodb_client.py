"""
Amazon DynamoDB client wrapper for index lookups and keyed deletes.
"""

from typing import Any, Dict, List

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import DynamoDBConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class DynamoDBError(Exception):
    """Custom exception for DynamoDB errors."""
    pass


class DynamoDBClient:
    """DynamoDB client working in plain Python values instead of attribute-value maps."""

    def __init__(self, config: DynamoDBConfig):
        """
        Initialize DynamoDB client.

        Args:
            config: DynamoDBConfig instance with connection parameters
        """
        self.config = config
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

        # Low-level clients are thread safe, the cascade shares this one across workers
        self.client = boto3.client('dynamodb',
                                   region_name=config.region,
                                   config=BotoConfig(connect_timeout=config.connect_timeout,
                                                     read_timeout=config.read_timeout,
                                                     retries={
                                                         'max_attempts': config.max_attempts,
                                                         'mode': 'standard'
                                                     }))

        logger.info(f'Initialized DynamoDB client in region: {config.region}')

    def query_by_index(self, table: str, index: str, key: str, value: Any) -> List[Dict[str, Any]]:
        """
        Return every item of a secondary index whose key attribute equals value.

        Follows LastEvaluatedKey until the result set is exhausted.

        Args:
            table: Table name
            index: Secondary index name
            key: Partition key attribute of the index
            value: Value to match

        Returns:
            List of deserialized items

        Raises:
            DynamoDBError: If the query fails
        """
        try:
            paginator = self.client.get_paginator('query')
            pages = paginator.paginate(TableName=table,
                                       IndexName=index,
                                       KeyConditionExpression='#k = :v',
                                       ExpressionAttributeNames={'#k': key},
                                       ExpressionAttributeValues={':v': self._serializer.serialize(value)})

            items = []
            page_count = 0
            for page in pages:
                page_count += 1
                items.extend(self._deserialize(item) for item in page.get('Items', []))

            logger.debug(f'Query {table}/{index} returned {len(items)} items over {page_count} pages')
            return items

        except (ClientError, BotoCoreError) as e:
            logger.error(f'Query {table}/{index} failed: {e}')
            raise DynamoDBError(f'Query on {table}/{index} failed: {e}')

    def delete_by_key(self, table: str, key: Dict[str, Any]) -> None:
        """
        Delete one item by its full primary key.

        Deleting a key that is already absent succeeds.

        Args:
            table: Table name
            key: Mapping of key attribute names to plain values

        Raises:
            DynamoDBError: If the delete fails
        """
        try:
            self.client.delete_item(TableName=table, Key=self._serialize(key))
            logger.debug(f'Deleted {key} from {table}')

        except (ClientError, BotoCoreError) as e:
            logger.error(f'Delete of {key} from {table} failed: {e}')
            raise DynamoDBError(f'Delete from {table} failed: {e}')

    def _serialize(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return {name: self._serializer.serialize(value) for name, value in item.items()}

    def _deserialize(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return {name: self._deserializer.deserialize(value) for name, value in item.items()}

    def health_check(self, table: str) -> bool:
        """
        Check that a table exists and is active.

        Returns:
            True if the table is ACTIVE, False otherwise
        """
        try:
            response = self.client.describe_table(TableName=table)
            return response['Table']['TableStatus'] == 'ACTIVE'

        except Exception as e:
            logger.error(f'DynamoDB health check for {table} failed: {e}')
            return False

import asyncio
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Dict, Optional, Protocol

import boto3
from botocore.exceptions import ClientError

from txlog.utils.config import load_store_settings
from txlog.utils.logger import get_logger

logger = get_logger("store")


class TransactionStoreError(Exception):
    """Base error for durable-store write failures."""


class DuplicateLogRecord(TransactionStoreError):
    """Raised when a log_id has already been written; records are write-once."""


class TransactionStore(Protocol):
    async def insert(self, item: Dict[str, Any]) -> None:
        ...


class DynamoDBTransactionStore:
    """
    Append-only audit table on DynamoDB.

    boto3 is blocking, so writes run on a small executor owned by the store.
    An abandoned write keeps running there without holding up the caller or
    the event loop's shutdown.
    """

    def __init__(
        self,
        table_name: str,
        region_name: Optional[str] = None,
        resource: Any = None,
        max_workers: int = 2,
    ):
        if resource is None:
            resource = boto3.resource("dynamodb", region_name=region_name)
        self.table_name = table_name
        self._table = resource.Table(table_name)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="txlog-store"
        )

    def put(self, item: Dict[str, Any]) -> None:
        try:
            self._table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(log_id)",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise DuplicateLogRecord(item.get("log_id")) from e
            raise

    async def insert(self, item: Dict[str, Any]) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, partial(self.put, item))


def build_store() -> DynamoDBTransactionStore:
    """
    Build the process-wide transaction store from the environment.
    Call once per container and pass the result into TransactionLogger.
    """
    table_name, region_name = load_store_settings()
    store = DynamoDBTransactionStore(table_name, region_name=region_name)
    logger.info(
        "store.initialized",
        extra={"table": table_name, "region": region_name},
    )
    return store

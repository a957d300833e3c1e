"""tests/conftest.py - Shared fixtures and store stubs.

Sets environment variables before any txlog module is imported,
then provides stub stores and a moto-mocked DynamoDB table.
"""
import asyncio
import os

os.environ.update({
    "TRANSACTIONS_TABLE":    "test-transactions",
    "AWS_REGION":            "us-east-1",
    "AWS_DEFAULT_REGION":    "us-east-1",
    "AWS_ACCESS_KEY_ID":     "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_SECURITY_TOKEN":    "testing",
    "AWS_SESSION_TOKEN":     "testing",
})

import boto3
import pytest
from moto import mock_aws


class RecordingStore:
    """Accepts every insert, optionally after a delay."""

    def __init__(self, delay=0.0):
        self.delay = delay
        self.items = []

    async def insert(self, item):
        if self.delay:
            await asyncio.sleep(self.delay)
        self.items.append(item)


class FailingStore:
    """Rejects every insert asynchronously."""

    def __init__(self, exc=None):
        self.exc = exc or ConnectionError("connection refused")
        self.calls = 0

    async def insert(self, item):
        self.calls += 1
        raise self.exc


class SyncRaisingStore:
    """insert() raises before ever returning an awaitable."""

    def insert(self, item):
        raise ConnectionError("no route to host")


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def dynamodb_table():
    """Mocked DynamoDB transactions table for each test."""
    with mock_aws():
        ddb = boto3.resource("dynamodb", region_name="us-east-1")
        table = ddb.create_table(
            TableName="test-transactions",
            KeySchema=[{"AttributeName": "log_id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "log_id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        yield table

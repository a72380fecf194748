from __future__ import annotations

import logging
import time
from typing import Any, Callable

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from bluegreen_state.core.config import Settings
from bluegreen_state.domain.errors import StoreUnavailableError, TableNotReadyError
from bluegreen_state.models.deployment_state import PARTITION_KEY
from bluegreen_state.services.observability import emit_structured_log

COMPONENT = "bluegreen.store"
TABLE_TAGS = [
    {"Key": "Purpose", "Value": "BlueGreenDeployment"},
    {"Key": "ManagedBy", "Value": "GitHubActions"},
]

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _error_code(exc: Exception) -> str | None:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def build_dynamodb_client(settings: Settings):
    session = boto3.session.Session(
        aws_access_key_id=settings.aws_access_key_id or None,
        aws_secret_access_key=settings.aws_secret_access_key or None,
        region_name=settings.aws_region,
    )
    return session.client("dynamodb", endpoint_url=settings.dynamodb_endpoint or None)


def serialize_item(item: dict[str, Any]) -> dict[str, Any]:
    return {key: _serializer.serialize(value) for key, value in item.items()}


def deserialize_item(item: dict[str, Any]) -> dict[str, Any]:
    return {key: _deserializer.deserialize(value) for key, value in item.items()}


class DynamoStateStore:
    """Single-table DynamoDB access: existence, creation, point reads and writes."""

    def __init__(
        self,
        client,
        *,
        table_name: str,
        wait_attempts: int = 30,
        wait_seconds: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.table_name = table_name
        self.wait_attempts = wait_attempts
        self.wait_seconds = wait_seconds
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, *, client=None, sleep: Callable[[float], None] = time.sleep) -> DynamoStateStore:
        return cls(
            client if client is not None else build_dynamodb_client(settings),
            table_name=settings.table_name,
            wait_attempts=settings.table_wait_attempts,
            wait_seconds=settings.table_wait_seconds,
            sleep=sleep,
        )

    def table_exists(self) -> bool:
        try:
            self.client.describe_table(TableName=self.table_name)
        except ClientError as exc:
            if _error_code(exc) == "ResourceNotFoundException":
                return False
            raise StoreUnavailableError(f"Failed to describe table {self.table_name}: {exc}") from exc
        except BotoCoreError as exc:
            raise StoreUnavailableError(f"Failed to describe table {self.table_name}: {exc}") from exc
        return True

    def create_table(self) -> None:
        emit_structured_log(component=COMPONENT, event="table_create_requested", table_name=self.table_name)
        try:
            self.client.create_table(
                TableName=self.table_name,
                KeySchema=[{"AttributeName": PARTITION_KEY, "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": PARTITION_KEY, "AttributeType": "S"}],
                BillingMode="PAY_PER_REQUEST",
                Tags=TABLE_TAGS,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreUnavailableError(f"Failed to create table {self.table_name}: {exc}") from exc

    def wait_until_active(self) -> int:
        """Poll until the table reports ACTIVE; returns the attempt that saw it.

        Describe failures count against the same attempt budget instead of
        aborting the wait.
        """
        last_error: Exception | None = None
        for attempt in range(1, self.wait_attempts + 1):
            try:
                response = self.client.describe_table(TableName=self.table_name)
                status = response["Table"]["TableStatus"]
                if status == "ACTIVE":
                    emit_structured_log(
                        component=COMPONENT,
                        event="table_active",
                        table_name=self.table_name,
                        attempt=attempt,
                    )
                    return attempt
                emit_structured_log(
                    component=COMPONENT,
                    event="table_status_pending",
                    table_name=self.table_name,
                    attempt=attempt,
                    table_status=status,
                )
            except (ClientError, BotoCoreError, KeyError) as exc:
                last_error = exc
                emit_structured_log(
                    component=COMPONENT,
                    event="table_describe_failed",
                    level=logging.WARNING,
                    table_name=self.table_name,
                    attempt=attempt,
                    error=str(exc),
                )
            if attempt < self.wait_attempts:
                self._sleep(self.wait_seconds)

        raise TableNotReadyError(self.table_name, self.wait_attempts) from last_error

    def get_item(self, key: str) -> dict[str, Any] | None:
        try:
            response = self.client.get_item(
                TableName=self.table_name,
                Key=serialize_item({PARTITION_KEY: key}),
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreUnavailableError(f"Failed to get deployment state: {exc}") from exc

        item = response.get("Item")
        if not item:
            return None
        return deserialize_item(item)

    def put_item(self, item: dict[str, Any]) -> None:
        try:
            self.client.put_item(TableName=self.table_name, Item=serialize_item(item))
        except (ClientError, BotoCoreError) as exc:
            raise StoreUnavailableError(f"Failed to set deployment state: {exc}") from exc

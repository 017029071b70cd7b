from __future__ import annotations

import threading
import time
from dataclasses import replace
from typing import Any, Callable

import pytest

from src.services.context import ServiceContext
from src.utils.cognito_client import CognitoError, CognitoUserNotFoundError
from src.utils.config import AppConfig, CascadeConfig, CognitoConfig, CorsConfig, DynamoDBConfig
from src.utils.dynamodb_client import DynamoDBError

# Conversation records keep the response id under a different attribute than the table key.
KEY_ALIASES = {'response_id': 'responseId'}


def make_config(**overrides: Any) -> AppConfig:
    config = AppConfig(environment='test',
                       log_level='DEBUG',
                       cognito=CognitoConfig(region='us-east-2', user_pool_id='us-east-2_TestPool'),
                       dynamodb=DynamoDBConfig(region='us-east-2',
                                               users_table='Users',
                                               conversations_table='Conversations',
                                               threads_table='Threads',
                                               users_id_index='id-index',
                                               conversations_account_index='associated_account-is_first_email-index',
                                               threads_account_index='associated_account-index',
                                               max_attempts=3,
                                               connect_timeout=5.0,
                                               read_timeout=30.0),
                       cascade=CascadeConfig(max_workers=8),
                       cors=CorsConfig(region='us-east-2', function_name='Allow-Cors'))
    return replace(config, **overrides)


class FakeStore:
    """In-memory stand-in for DynamoDBClient."""

    def __init__(self, tables: dict[str, list[dict]] | None = None) -> None:
        self.tables = {name: [dict(item) for item in items] for name, items in (tables or {}).items()}
        self.queries: list[tuple[str, str, str, Any]] = []
        self.deletes: list[tuple[str, dict]] = []
        self.fail_queries: set[str] = set()
        self.fail_delete: Callable[[str, dict], bool] = lambda table, key: False
        self.delete_delay = 0.0
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def query_by_index(self, table: str, index: str, key: str, value: Any) -> list[dict]:
        with self._lock:
            self.queries.append((table, index, key, value))
        if table in self.fail_queries:
            raise DynamoDBError(f'Query on {table}/{index} failed: throttled')
        return [dict(item) for item in self.tables.get(table, []) if item.get(key) == value]

    def delete_by_key(self, table: str, key: dict) -> None:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delete_delay:
                time.sleep(self.delete_delay)
            if self.fail_delete(table, key):
                raise DynamoDBError(f'Delete from {table} failed: throttled')
            with self._lock:
                self.deletes.append((table, dict(key)))
                self.tables[table] = [item for item in self.tables.get(table, []) if not _matches(item, key)]
        finally:
            with self._lock:
                self.active -= 1

    def deleted_from(self, table: str) -> list[dict]:
        return [key for name, key in self.deletes if name == table]


def _matches(item: dict, key: dict) -> bool:
    return all(item.get(name, item.get(KEY_ALIASES.get(name, name))) == value for name, value in key.items())


class FakeDirectory:
    """In-memory stand-in for CognitoClient."""

    def __init__(self, accounts: set[str] | None = None) -> None:
        self.accounts = set(accounts or ())
        self.calls: list[str] = []
        self.fail_with: Exception | None = None

    def delete_account(self, username: str) -> None:
        self.calls.append(username)
        if self.fail_with is not None:
            raise self.fail_with
        if username not in self.accounts:
            raise CognitoUserNotFoundError(f'User {username} not found in identity directory')
        self.accounts.remove(username)


class FakeCorsProvider:

    def __init__(self, headers: dict[str, str] | None) -> None:
        self.headers = headers
        self.events: list[dict] = []

    def get_headers(self, event: dict) -> dict[str, str] | None:
        self.events.append(event)
        return self.headers


def seed_tables() -> dict[str, list[dict]]:
    return {
        'Users': [
            {'id': 'u-42', 'email': 'a@b.com', 'name': 'Ada'},
            {'id': 'u-7', 'email': 'other@b.com'},
        ],
        'Conversations': [
            {'conversation_id': 'c-1', 'responseId': 'r-1', 'associated_account': 'u-42'},
            {'conversation_id': 'c-1', 'responseId': 'r-2', 'associated_account': 'u-42'},
            {'conversation_id': 'c-2', 'responseId': 'r-3', 'associated_account': 'u-42'},
            {'conversation_id': 'c-9', 'responseId': 'r-9', 'associated_account': 'u-7'},
        ],
        'Threads': [
            {'thread_id': 't-1', 'message_id': 'm-1', 'associated_accounts': 'u-42'},
            {'thread_id': 't-9', 'message_id': 'm-9', 'associated_accounts': 'u-7'},
        ],
    }


@pytest.fixture
def store() -> FakeStore:
    return FakeStore(seed_tables())


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory({'u-42', 'u-7'})


@pytest.fixture
def cors_provider() -> FakeCorsProvider:
    return FakeCorsProvider({'Access-Control-Allow-Origin': 'https://app.example.com'})


@pytest.fixture
def service_context(store: FakeStore, directory: FakeDirectory, cors_provider: FakeCorsProvider) -> ServiceContext:
    return ServiceContext(config=make_config(), directory=directory, store=store, cors_providers=[cors_provider])


@pytest.fixture
def cognito_failure() -> CognitoError:
    return CognitoError('Identity directory deletion failed: TooManyRequestsException')

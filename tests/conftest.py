# tests/conftest.py
"""
Pytest configuration and fixtures for the DataFix test suite.

Provides:
- Supabase mock client (tables, RPC, Storage, Auth) for testing
- FastAPI test client
- Seeded branches, features, profiles and tickets
- Sessions for an admin and a requester

Note: Tests use a mocked Supabase client to avoid hitting a real project.
"""

import copy
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from supabase import AuthApiError

# Set test environment before imports
os.environ["DATAFIX_ENV"] = "test"
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_KEY"] = "test-key"

from src.datafix.auth.session import UserSession
from src.datafix.config import DataFixConfig, reset_config
from src.datafix.core.models import Profile
from src.datafix.infrastructure.supabase_client import reset_supabase_client
from src.datafix.main import app


ADMIN_ID = "user-admin"
REQUESTER_ID = "user-requester"
OTHER_REQUESTER_ID = "user-requester-2"
ADMIN_TOKEN = "token-admin"
REQUESTER_TOKEN = "token-requester"


# ============== Supabase Mock Fixtures ==============

class MockSupabaseResponse:
    """Mock response from Supabase operations."""
    def __init__(self, data: Any = None, count: int = None):
        self.data = data if data is not None else []
        self.count = count if count is not None else (len(self.data) if isinstance(self.data, list) else None)


class MockSupabaseTable:
    """Mock Supabase table with chainable methods."""

    def __init__(self, table_name: str, client: "MockSupabaseClient"):
        self.table_name = table_name
        self._client = client
        self._operation = "select"
        self._payload = None
        self._filters: Dict[str, Any] = {}
        self._order_by = None
        self._limit = None
        self._select_cols = "*"

    @property
    def _rows(self) -> List[Dict[str, Any]]:
        return self._client._data_store.setdefault(self.table_name, [])

    def select(self, columns: str = "*"):
        self._select_cols = columns
        return self

    def insert(self, data):
        self._operation = "insert"
        self._payload = data
        return self

    def update(self, data: Dict):
        self._operation = "update"
        self._payload = data
        return self

    def delete(self):
        self._operation = "delete"
        return self

    def eq(self, column: str, value: Any):
        self._filters[column] = value
        return self

    def order(self, column: str, desc: bool = False):
        self._order_by = (column, desc)
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(row.get(col) == val for col, val in self._filters.items())

    def execute(self) -> MockSupabaseResponse:
        """Execute the query and return results."""
        response = self._run()
        overrides = self._client._corruptions.get((self.table_name, self._operation))
        if overrides:
            for row in response.data:
                row.update(overrides)
        return response

    def _run(self) -> MockSupabaseResponse:
        self._client.calls.append((self.table_name, self._operation))
        failure = self._client._failures.get((self.table_name, self._operation))
        if failure:
            raise failure

        if self._operation == "insert":
            items = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for item in items:
                row = copy.deepcopy(item)
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
                self._rows.append(row)
                inserted.append(copy.deepcopy(row))
            return MockSupabaseResponse(data=inserted)

        if self._operation == "update":
            updated = []
            for row in self._rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self._payload))
                    updated.append(copy.deepcopy(row))
            return MockSupabaseResponse(data=updated)

        if self._operation == "delete":
            removed = [row for row in self._rows if self._matches(row)]
            self._client._data_store[self.table_name] = [row for row in self._rows if not self._matches(row)]
            return MockSupabaseResponse(data=copy.deepcopy(removed))

        data = [row for row in self._rows if self._matches(row)]
        if self._order_by:
            column, desc = self._order_by
            data = sorted(data, key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        if self._limit:
            data = data[:self._limit]
        return MockSupabaseResponse(data=copy.deepcopy(data))


class MockRpcCall:
    def __init__(self, client: "MockSupabaseClient", function_name: str):
        self._client = client
        self.function_name = function_name

    def execute(self) -> MockSupabaseResponse:
        failure = self._client._failures.get((self.function_name, "rpc"))
        if failure:
            raise failure
        return MockSupabaseResponse(data=copy.deepcopy(self._client._rpc_results.get(self.function_name, [])))


class MockStorageBucket:
    def __init__(self, storage: "MockSupabaseStorage", bucket: str):
        self._storage = storage
        self.bucket = bucket

    def upload(self, path: str, file: bytes, file_options: Optional[Dict] = None):
        self._storage.upload_attempts += 1
        if self._storage.upload_attempts in self._storage.failing_uploads:
            raise Exception("Storage upload failed")
        self._storage.files[(self.bucket, path)] = file
        return {"Key": f"{self.bucket}/{path}"}

    def get_public_url(self, path: str) -> str:
        return f"https://test.supabase.co/storage/v1/object/public/{self.bucket}/{path}"

    def remove(self, paths: List[str]):
        for path in paths:
            self._storage.files.pop((self.bucket, path), None)
        return paths


class MockSupabaseStorage:
    """In-memory Storage; ``failing_uploads`` holds 1-based attempt numbers that fail."""

    def __init__(self):
        self.files: Dict[tuple, bytes] = {}
        self.upload_attempts = 0
        self.failing_uploads = set()

    def from_(self, bucket: str) -> MockStorageBucket:
        return MockStorageBucket(self, bucket)


class MockAuthUser:
    def __init__(self, user_id: str, email: str):
        self.id = user_id
        self.email = email


class MockAuthSession:
    def __init__(self, user: MockAuthUser, access_token: str):
        self.user = user
        self.access_token = access_token


class MockAuthResponse:
    def __init__(self, user=None, session=None):
        self.user = user
        self.session = session


class MockSubscription:
    def __init__(self, auth: "MockSupabaseAuth", callback):
        self._auth = auth
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        self.active = False


class MockSupabaseAuth:
    """Email/password accounts, bearer tokens and auth-state listeners."""

    def __init__(self):
        self._accounts: Dict[str, tuple] = {}
        self._tokens: Dict[str, MockAuthUser] = {}
        self.current_session: Optional[MockAuthSession] = None
        self.subscriptions: List[MockSubscription] = []

    def add_user(self, user_id: str, email: str, password: str = "secret", token: Optional[str] = None) -> str:
        user = MockAuthUser(user_id, email)
        token = token or f"token-{user_id}"
        self._accounts[email] = (password, user, token)
        self._tokens[token] = user
        return token

    def _notify(self, event: str, session):
        for sub in list(self.subscriptions):
            if sub.active:
                sub.callback(event, session)

    def sign_in_with_password(self, credentials: Dict[str, str]) -> MockAuthResponse:
        account = self._accounts.get(credentials.get("email"))
        if account is None or account[0] != credentials.get("password"):
            raise AuthApiError("Invalid login credentials", 400, "invalid_credentials")
        _, user, token = account
        self.current_session = MockAuthSession(user, token)
        self._notify("SIGNED_IN", self.current_session)
        return MockAuthResponse(user=user, session=self.current_session)

    def get_session(self):
        return self.current_session

    def get_user(self, jwt: str) -> MockAuthResponse:
        user = self._tokens.get(jwt)
        if user is None:
            raise AuthApiError("invalid JWT: unable to parse or verify signature", 403, "bad_jwt")
        return MockAuthResponse(user=user)

    def sign_out(self):
        self.current_session = None
        self._notify("SIGNED_OUT", None)

    def on_auth_state_change(self, callback) -> MockSubscription:
        sub = MockSubscription(self, callback)
        self.subscriptions.append(sub)
        return sub


class MockSupabaseClient:
    """Mock Supabase client for testing."""

    def __init__(self):
        self._data_store: Dict[str, List[Dict]] = {}
        self._rpc_results: Dict[str, Any] = {}
        self._failures: Dict[tuple, Exception] = {}
        self._corruptions: Dict[tuple, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.storage = MockSupabaseStorage()
        self.auth = MockSupabaseAuth()

    def table(self, name: str) -> MockSupabaseTable:
        return MockSupabaseTable(name, self)

    def rpc(self, function_name: str, params: Dict = None) -> MockRpcCall:
        """Mock RPC call."""
        return MockRpcCall(self, function_name)

    def set_rpc_result(self, function_name: str, result: Any):
        """Set the result for an RPC call."""
        self._rpc_results[function_name] = result

    def fail_on(self, target: str, operation: str, message: str = "backend unavailable"):
        """Make ``operation`` (select/insert/update/delete/rpc) on ``target`` raise."""
        self._failures[(target, operation)] = Exception(message)

    def corrupt(self, target: str, operation: str, **fields):
        """Overwrite ``fields`` in the rows returned by ``operation`` on ``target``."""
        self._corruptions[(target, operation)] = fields

    def seed_data(self, table_name: str, data: List[Dict]):
        """Seed test data into a table."""
        self._data_store[table_name] = copy.deepcopy(data)

    def rows(self, table_name: str) -> List[Dict]:
        return self._data_store.get(table_name, [])

    def clear(self):
        """Clear all test data."""
        self._data_store.clear()
        self._rpc_results.clear()
        self._failures.clear()
        self._corruptions.clear()
        self.calls.clear()


@pytest.fixture(scope="function")
def mock_supabase() -> MockSupabaseClient:
    """
    Mock Supabase client for testing.

    Provides a fully functional mock that stores data in memory
    and supports select, insert, update, delete, RPC, Storage and Auth.
    """
    return MockSupabaseClient()


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop the cached config and Supabase client after every test."""
    yield
    reset_supabase_client()
    reset_config()


# ============== Seed Data ==============

BRANCHES = [
    {"id": "branch-jkt", "name": "Jakarta", "is_active": True, "created_at": "2025-01-01T00:00:00+00:00"},
    {"id": "branch-bdg", "name": "Bandung", "is_active": True, "created_at": "2025-01-02T00:00:00+00:00"},
    {"id": "branch-old", "name": "Closed Branch", "is_active": False, "created_at": "2025-01-03T00:00:00+00:00"},
]

FEATURES = [
    {"id": "feature-invoice", "name": "Invoice", "is_active": True, "created_at": "2025-01-01T00:00:00+00:00"},
    {"id": "feature-stock", "name": "Stock", "is_active": True, "created_at": "2025-01-02T00:00:00+00:00"},
    {"id": "feature-other", "name": "Lainnya", "is_active": True, "created_at": "2025-01-03T00:00:00+00:00"},
]


def profile_row(user_id: str, full_name: str, role: str, branch: Optional[Dict] = None, **extra) -> Dict[str, Any]:
    row = {
        "id": user_id,
        "full_name": full_name,
        "display_name": None,
        "email": f"{user_id}@example.com",
        "role": role,
        "branch_id": branch["id"] if branch else None,
        "branch": branch,
        "created_at": "2025-01-01T00:00:00+00:00",
    }
    row.update(extra)
    return row


def ticket_row(
    ticket_id: str,
    reporter_id: str = REQUESTER_ID,
    status: str = "open",
    priority: int = 2,
    feature: Optional[Dict] = None,
    feature_other: Optional[str] = None,
    created_at: str = "2025-03-01T08:00:00+00:00",
    description: str = "Wrong invoice total",
    **extra,
) -> Dict[str, Any]:
    """A ticket row as returned with its joins."""
    feature = FEATURES[0] if feature is None and not feature_other else feature
    row = {
        "id": ticket_id,
        "reporter_user_id": reporter_id,
        "reporter_name": None,
        "wrong_input_date": "2025-02-28",
        "issue_type": "wrong_value",
        "branch_id": BRANCHES[0]["id"],
        "feature_id": feature["id"] if feature else None,
        "feature_other": feature_other,
        "inputter_name": "Budi",
        "description": description,
        "fix_description": None,
        "status": status,
        "priority": priority,
        "assigned_to": None,
        "created_at": created_at,
        "updated_at": created_at,
        "branch": {"id": BRANCHES[0]["id"], "name": BRANCHES[0]["name"]},
        "feature": {"id": feature["id"], "name": feature["name"]} if feature else None,
        "reporter": {"id": reporter_id, "full_name": "Rina Requester"},
        "assignee": None,
    }
    row.update(extra)
    return row


@pytest.fixture
def seeded_supabase(mock_supabase) -> MockSupabaseClient:
    """Supabase mock with branches, features, profiles and tickets pre-loaded."""
    mock_supabase.seed_data("m_branches", BRANCHES)
    mock_supabase.seed_data("m_features", FEATURES)
    mock_supabase.seed_data("profiles", [
        profile_row(ADMIN_ID, "Ana Admin", "admin", BRANCHES[0]),
        profile_row(REQUESTER_ID, "Rina Requester", "requester", BRANCHES[1],
                    created_at="2025-02-01T00:00:00+00:00"),
        profile_row(OTHER_REQUESTER_ID, "Rudi Requester", "requester", None,
                    created_at="2025-03-01T00:00:00+00:00"),
    ])
    mock_supabase.seed_data("datafix_tickets", [
        ticket_row("ticket-1", created_at="2025-03-01T08:00:00+00:00"),
        ticket_row("ticket-2", status="in_progress", priority=1, created_at="2025-03-02T08:00:00+00:00",
                   feature=FEATURES[1], description="Stock count off by one"),
        ticket_row("ticket-3", reporter_id=OTHER_REQUESTER_ID, status="resolved", priority=3,
                   created_at="2025-03-03T08:00:00+00:00", feature=FEATURES[2], feature_other="Payroll",
                   reporter={"id": OTHER_REQUESTER_ID, "full_name": "Rudi Requester"}),
    ])
    mock_supabase.seed_data("ticket_detail_lines", [])
    mock_supabase.seed_data("ticket_attachments", [])
    mock_supabase.auth.add_user(ADMIN_ID, "ana@example.com", token=ADMIN_TOKEN)
    mock_supabase.auth.add_user(REQUESTER_ID, "rina@example.com", token=REQUESTER_TOKEN)
    return mock_supabase


# ============== Session Fixtures ==============

@pytest.fixture
def test_config() -> DataFixConfig:
    """Default configuration, independent of YAML files and environment."""
    return DataFixConfig()


@pytest.fixture
def admin_session() -> UserSession:
    profile = Profile.from_dict(profile_row(ADMIN_ID, "Ana Admin", "admin", BRANCHES[0]))
    return UserSession(user_id=ADMIN_ID, email="ana@example.com", profile=profile, access_token=ADMIN_TOKEN)


@pytest.fixture
def requester_session() -> UserSession:
    profile = Profile.from_dict(profile_row(REQUESTER_ID, "Rina Requester", "requester", BRANCHES[1]))
    return UserSession(user_id=REQUESTER_ID, email="rina@example.com", profile=profile, access_token=REQUESTER_TOKEN)


@pytest.fixture
def profileless_session() -> UserSession:
    """Signed in, but the profile could not be loaded."""
    return UserSession(user_id="user-ghost", email="ghost@example.com")


# ============== FastAPI Client Fixtures ==============

@pytest.fixture(scope="function")
def client(seeded_supabase) -> Generator[TestClient, None, None]:
    """
    FastAPI test client with mocked Supabase.

    Patches get_supabase_client() and create_supabase_client() to return the mock client.
    """
    with patch("src.datafix.infrastructure.supabase_client.get_supabase_client", return_value=seeded_supabase):
        with patch("src.datafix.infrastructure.supabase_client.create_supabase_client", return_value=seeded_supabase):
            with TestClient(app) as test_client:
                yield test_client


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def requester_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {REQUESTER_TOKEN}"}


# ============== Sample Data Factories ==============

@pytest.fixture
def png_bytes() -> bytes:
    """A few bytes standing in for a PNG screenshot."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# ============== Assertion Helpers ==============

@pytest.fixture
def assert_response_success():
    """Helper to assert successful API responses."""
    def _assert(response, status_code: int = 200):
        assert response.status_code == status_code, f"Expected {status_code}, got {response.status_code}: {response.text}"
        body = response.json()
        assert body["success"] is True
        return body
    return _assert


@pytest.fixture
def assert_response_error():
    """Helper to assert error API responses."""
    def _assert(response, status_code: int = 400, code: str = None):
        assert response.status_code == status_code, f"Expected {status_code}, got {response.status_code}: {response.text}"
        body = response.json()
        assert body["success"] is False
        if code:
            assert body["error"]["code"] == code
        return body
    return _assert

"""
Shared fixtures: in-memory stand-ins for the Supabase client, the Gemini model
and the enrichment dispatcher.
"""

import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from timecapsule.core.models import Session
from timecapsule.service.gateway import SupabaseGateway
from timecapsule.service.repository import CapsuleRepository

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count

class FakeQuery:
    """Chained query builder over a list of row dicts."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.filters = []
        self.order_by = None

    def select(self, *columns, **kwargs):
        self.action = "select"
        return self

    def insert(self, record):
        self.action = "insert"
        self.payload = record
        return self

    def update(self, values):
        self.action = "update"
        self.payload = values
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def _matches(self, row):
        return all(str(row.get(column)) == str(value) for column, value in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.action))
        if self.db.fail_on.get(self.action):
            raise RuntimeError(self.db.fail_on[self.action])

        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "insert":
            row = self.db.new_row(self.payload)
            rows.append(row)
            return FakeResponse([copy.deepcopy(row)])

        matched = [row for row in rows if self._matches(row)]

        if self.action == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([copy.deepcopy(row) for row in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row[column], reverse=desc)
        return FakeResponse([copy.deepcopy(row) for row in matched])

class FakeBucket:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def upload(self, path, file, file_options=None):
        self.db.calls.append((f"storage:{self.name}", "upload"))
        if self.db.fail_on.get("upload"):
            raise RuntimeError(self.db.fail_on["upload"])
        self.db.objects[f"{self.name}/{path}"] = (file, file_options)
        return SimpleNamespace(path=path)

    def create_signed_url(self, path, expires_in):
        self.db.calls.append((f"storage:{self.name}", "sign"))
        if self.db.fail_on.get("sign"):
            raise RuntimeError(self.db.fail_on["sign"])
        url = f"https://example.supabase.co/storage/v1/object/sign/{self.name}/{path}?token=t&ttl={expires_in}"
        return {"signedURL": url}

class FakeStorage:
    def __init__(self, db):
        self.db = db

    def from_(self, bucket):
        return FakeBucket(self.db, bucket)

class FakeAuth:
    def __init__(self, db):
        self.db = db
        self.sessions = []
        self.signed_out = False

    def set_session(self, access_token, refresh_token):
        if self.db.fail_on.get("set_session"):
            raise RuntimeError(self.db.fail_on["set_session"])
        self.sessions.append((access_token, refresh_token))

    def _response(self, email, with_session=True):
        user = SimpleNamespace(id="user-" + email.split("@")[0], email=email)
        session = SimpleNamespace(access_token=f"token-{email}", refresh_token="refresh", user=user)
        return SimpleNamespace(user=user, session=session if with_session else None)

    def sign_in_with_password(self, credentials):
        if credentials["password"] != "correct-horse":
            raise RuntimeError("Invalid login credentials")
        return self._response(credentials["email"])

    def sign_up(self, credentials):
        return self._response(credentials["email"], with_session=self.db.auto_confirm)

    def sign_out(self):
        self.signed_out = True

class FakeSupabase:
    """In-memory Supabase client shared by every session."""

    def __init__(self):
        self.tables = {}
        self.objects = {}
        self.calls = []
        self.fail_on = {}
        self.auto_confirm = True
        self._created = 0
        self.storage = FakeStorage(self)
        self.auth = FakeAuth(self)

    def table(self, name):
        return FakeQuery(self, name)

    def new_row(self, record):
        self._created += 1
        row = {
            "id": str(uuid.uuid4()),
            "created_at": (NOW + timedelta(seconds=self._created)).isoformat(),
            "file_url": None,
            "file_type": None,
            "ai_summary": None,
            "ai_future_reply": None,
            "ai_status": "pending",
            "is_public": False,
            "is_unlocked": False,
        }
        row.update(copy.deepcopy(record))
        return row

    def add_capsule(self, **fields):
        """Seed a stored capsule row directly."""
        record = {
            "user_id": "alice",
            "title": "Seeded",
            "content": "Seeded content",
            "release_date": (NOW + timedelta(days=30)).isoformat(),
        }
        record.update(fields)
        row = self.new_row(record)
        self.tables.setdefault("capsules", []).append(row)
        return row

    def row(self, capsule_id):
        return next(row for row in self.tables.get("capsules", []) if row["id"] == capsule_id)

class RecordingDispatcher:
    def __init__(self, fail=False):
        self.jobs = []
        self.fail = fail

    def submit(self, job):
        if self.fail:
            raise RuntimeError("dispatcher unavailable")
        self.jobs.append(job)
        return True

class FakeGeminiModel:
    """Stands in for GeminiModel; records calls and can fail a given step."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.calls = []

    def generate_summary(self, title, content):
        self.calls.append("summary")
        if self.fail_on == "summary":
            raise RuntimeError("Summary API call failed: Service Unavailable")
        return f"Summary of {title}"

    def generate_future_reply(self, title, content):
        self.calls.append("reply")
        if self.fail_on == "reply":
            raise RuntimeError("Future response API call failed: Too Many Requests")
        return f"Dear past self, about {title}"

@pytest.fixture
def fake_supabase():
    return FakeSupabase()

@pytest.fixture
def gateway(fake_supabase):
    return SupabaseGateway(
        anon_client_factory=lambda: fake_supabase,
        service_client_factory=lambda: fake_supabase
    )

@pytest.fixture
def dispatcher():
    return RecordingDispatcher()

@pytest.fixture
def repository(gateway, dispatcher):
    return CapsuleRepository(gateway, dispatcher=dispatcher, clock=lambda: NOW)

@pytest.fixture
def alice():
    return Session(user_id="alice", email="alice@example.com", access_token="alice-token")

@pytest.fixture
def bob():
    return Session(user_id="bob", email="bob@example.com", access_token="bob-token")

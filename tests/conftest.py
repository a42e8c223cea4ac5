"""
pytest 설정 및 공통 fixtures
"""
import json
import re

import httpx
import pytest

from backup_tracker.board import BackupBoard
from backup_tracker.client import BackupApiClient
from backup_tracker.schemas import BackupRecord, User
from backup_tracker.session import Session
from backup_tracker.settings import Settings
from backup_tracker.stages import STAGES

BASE_URL = "http://backup.test/api/v1"

USERS = [
    {"id": 3, "name": "Bob", "nickname": "bob"},
    {"id": 7, "name": "Alice", "nickname": "alice"},
    {"id": 9, "name": "Carol", "nickname": "carol"},
]


def make_row(record_id: int, **overrides) -> dict:
    """wire 포맷 항목 1개 (기본: 모든 단계 미완료)"""
    row = {
        "id": record_id,
        "event_name": "여름 수련회",
        "displayed_date": "2024-07-20T00:00:00Z",
        "name": f"item-{record_id}",
        "description": None,
        "created_at": "2024-07-01T09:00:00",
        "producers": ["Bob"],
    }
    for stage in STAGES:
        row[stage] = False
        row[f"{stage}_checker"] = None
        row[f"{stage}_checker_name"] = None
    row.update(overrides)
    return row


class FakeBackend:
    """
    테스트용 백업 현황 서버
    - PATCH는 body에 있는 키만 반영 (부분 수정)
    - 확인자 이름은 서버가 채움
    """

    def __init__(self):
        self.rows: dict[int, dict] = {}
        self.users = [dict(u) for u in USERS]
        self.requests: list[httpx.Request] = []
        self.login_response: object = {"user": USERS[1], "access_token": "tok"}
        self.fail_with: int | None = None
        self.raise_exc: Exception | None = None
        self._next_id = 100

    def add(self, row: dict) -> dict:
        self.rows[row["id"]] = row
        return row

    def _name(self, user_id):
        for u in self.users:
            if u["id"] == user_id:
                return u["name"]
        return None

    def body_of(self, request: httpx.Request) -> dict:
        return json.loads(request.content) if request.content else {}

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"detail": "fail"})

        path = request.url.path.removeprefix("/api/v1")
        body = self.body_of(request)

        if path == "/auth/login" and request.method == "POST":
            return httpx.Response(200, json=self.login_response)
        if path == "/auth/users":
            return httpx.Response(200, json=self.users)
        if path == "/backup-status" and request.method == "GET":
            return httpx.Response(200, json=list(self.rows.values()))
        if path == "/backup-status" and request.method == "POST":
            self._next_id += 1
            row = make_row(self._next_id, producers=[])
            row.update({k: v for k, v in body.items() if k != "user_ids"})
            row["producers"] = [self._name(uid) for uid in body.get("user_ids", [])]
            return httpx.Response(201, json=self.add(row))

        m = re.fullmatch(r"/backup-status/(\d+)", path)
        if not m:
            return httpx.Response(404, json={"detail": "no route"})
        row = self.rows.get(int(m.group(1)))
        if row is None:
            return httpx.Response(404, json={"detail": "not found"})

        if request.method == "GET":
            return httpx.Response(200, json=row)
        if request.method == "DELETE":
            del self.rows[row["id"]]
            return httpx.Response(204)
        if request.method == "PUT":
            for k in ("event_name", "displayed_date", "name", "description"):
                row[k] = body.get(k)
            if "user_ids" in body:
                row["producers"] = [self._name(uid) for uid in body["user_ids"]]
            return httpx.Response(200, json=row)
        if request.method == "PATCH":
            if "version" in body and row.get("version") is not None and body["version"] != row["version"]:
                return httpx.Response(409, json={"detail": "version mismatch"})
            for k, v in body.items():
                if k == "version":
                    continue
                row[k] = v
                if k.endswith("_checker"):
                    row[f"{k}_name"] = self._name(v)
            if row.get("version") is not None:
                row["version"] += 1
            return httpx.Response(200, json=row)
        return httpx.Response(405)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    http = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(backend.handle))
    c = BackupApiClient(Settings(), http=http)
    yield c
    c.close()


@pytest.fixture
def alice():
    return User(**USERS[1])


@pytest.fixture
def session(alice):
    return Session(user=alice, access_token="tok")


@pytest.fixture
def record():
    """id=1, cam 미완료 / master N/A"""
    return BackupRecord.model_validate(make_row(1, master=None))


@pytest.fixture
def board(backend, client, session):
    backend.add(make_row(1, master=None))
    backend.add(make_row(2, name="리허설", displayed_date="2024-07-21T00:00:00Z"))
    b = BackupBoard(client, session)
    b.load()
    b.load_users()
    return b

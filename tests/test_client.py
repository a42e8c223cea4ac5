"""
API 클라이언트 테스트 (상태코드 → 에러 변환)
"""
import httpx
import pytest

from backup_tracker.client import BackupApiClient
from backup_tracker.errors import (
    ConflictLost,
    NotFoundError,
    ResponseShapeError,
    TransportError,
    ValidationError,
)
from backup_tracker.settings import Settings
from tests.conftest import BASE_URL, make_row


def _client(handler) -> BackupApiClient:
    return BackupApiClient(Settings(), http=httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler)))


class TestErrorMapping:
    @pytest.mark.parametrize("status,exc", [
        (404, NotFoundError),
        (409, ConflictLost),
        (412, ConflictLost),
        (400, ValidationError),
        (422, ValidationError),
        (500, TransportError),
        (401, TransportError),
    ])
    def test_status(self, status, exc):
        c = _client(lambda req: httpx.Response(status, json={"detail": "x"}))
        with pytest.raises(exc):
            c.get_record(1)

    def test_timeout_notice(self):
        def handler(req):
            raise httpx.ConnectTimeout("slow")

        with pytest.raises(TransportError) as ei:
            _client(handler).list_records()
        assert ei.value.notice == "요청 시간이 초과되었습니다."

    def test_status_kept(self):
        c = _client(lambda req: httpx.Response(502))
        with pytest.raises(TransportError) as ei:
            c.list_users()
        assert ei.value.status == 502


class TestListRecords:
    def test_limit_param(self, backend, client):
        backend.add(make_row(1))
        client.list_records()
        assert backend.requests[0].url.params["limit"] == "9999"

    def test_non_list_body_is_empty(self):
        c = _client(lambda req: httpx.Response(200, json={"items": []}))
        assert c.list_records() == []

    def test_bad_row_skipped(self):
        """깨진 행은 건너뛰고 나머지는 반환"""
        rows = [{"id": 1}, "garbage", make_row(2), make_row(3, cam=True, cam_checker=None)]
        c = _client(lambda req: httpx.Response(200, json=rows))
        assert [r.id for r in c.list_records()] == [2]

    def test_bad_single_record(self):
        c = _client(lambda req: httpx.Response(200, json={"id": 1}))
        with pytest.raises(ResponseShapeError):
            c.get_record(1)

    def test_invalid_json(self):
        c = _client(lambda req: httpx.Response(200, content=b"<html>"))
        with pytest.raises(ResponseShapeError):
            c.list_records()


class TestUsers:
    def test_list_users(self, client):
        users = client.list_users()
        assert users[1].display() == "Alice (alice)"

    def test_users_not_list(self):
        c = _client(lambda req: httpx.Response(200, json={"users": []}))
        with pytest.raises(ResponseShapeError):
            c.list_users()

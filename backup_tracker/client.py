import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from .errors import ConflictLost, NotFoundError, ResponseShapeError, TransportError, ValidationError
from .schemas import BackupRecord, User
from .settings import Settings

log = logging.getLogger("backup_api")

BACKUP_STATUS = "/backup-status"
AUTH_LOGIN = "/auth/login"
AUTH_USERS = "/auth/users"


class BackupApiClient:
    """
    백업 현황 API 클라이언트
    - 요청 1회만 시도 (재시도 없음)
    - HTTP 상태코드 → 도메인 에러로 변환
    """

    def __init__(self, settings: Settings | None = None, http: httpx.Client | None = None):
        self.settings = settings or Settings()
        self.s = http or httpx.Client(
            base_url=self.settings.api_base_url,
            timeout=self.settings.api_timeout,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self.s.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, params: Optional[dict] = None, json: Optional[dict] = None) -> Any:
        try:
            r = self.s.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            log.warning("%s %s timeout: %s", method, path, e)
            raise TransportError(f"{method} {path} timed out", notice="요청 시간이 초과되었습니다.") from e
        except httpx.HTTPError as e:
            log.warning("%s %s failed: %s", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}") from e

        if r.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found")
        if r.status_code in (409, 412):
            raise ConflictLost(f"{method} {path}: version mismatch")
        if r.status_code in (400, 422):
            raise ValidationError(f"{method} {path}: {r.text[:200]}")
        if r.status_code >= 400:
            log.warning("%s %s HTTP %s: %s", method, path, r.status_code, r.text[:200])
            raise TransportError(f"HTTP error! status: {r.status_code}", status=r.status_code)

        if r.status_code == 204 or not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise ResponseShapeError(f"{method} {path}: invalid JSON body") from e

    def _record(self, data: Any) -> BackupRecord:
        try:
            return BackupRecord.model_validate(data)
        except PydanticValidationError as e:
            raise ResponseShapeError(f"invalid backup record: {e}") from e

    # ─────────────────────────────────────────────────
    # 백업 현황
    # ─────────────────────────────────────────────────

    def list_records(self, limit: int | None = None) -> List[BackupRecord]:
        data = self._request("GET", BACKUP_STATUS, params={"limit": limit or self.settings.list_limit})
        if not isinstance(data, list):
            # 배열이 아니면 빈 목록
            log.warning("Invalid response format: %r", data)
            return []
        records: List[BackupRecord] = []
        for row in data:
            # 깨진 행 하나 때문에 목록 전체를 버리지 않음
            try:
                records.append(BackupRecord.model_validate(row))
            except PydanticValidationError as e:
                row_id = row.get("id") if isinstance(row, dict) else None
                log.warning("skipping invalid backup record id=%s: %s", row_id, e)
        return records

    def get_record(self, record_id: int) -> BackupRecord:
        return self._record(self._request("GET", f"{BACKUP_STATUS}/{record_id}"))

    def create_record(self, payload: Dict[str, Any], user_id: int) -> BackupRecord:
        data = self._request("POST", BACKUP_STATUS, params={"user_id": user_id}, json=payload)
        return self._record(data)

    def update_record(self, record_id: int, payload: Dict[str, Any], user_id: int) -> BackupRecord:
        data = self._request("PUT", f"{BACKUP_STATUS}/{record_id}", params={"user_id": user_id}, json=payload)
        return self._record(data)

    def patch_record(self, record_id: int, changes: Dict[str, Any], user_id: int) -> BackupRecord:
        """부분 수정: body에 없는 필드는 서버에서 그대로 유지된다."""
        data = self._request("PATCH", f"{BACKUP_STATUS}/{record_id}", params={"user_id": user_id}, json=changes)
        return self._record(data)

    def delete_record(self, record_id: int, user_id: int) -> None:
        self._request("DELETE", f"{BACKUP_STATUS}/{record_id}", params={"user_id": user_id})

    # ─────────────────────────────────────────────────
    # 인증 / 유저
    # ─────────────────────────────────────────────────

    def login(self, nickname: str, password: str) -> Any:
        """원본 응답을 그대로 반환 (모양 판별은 schemas.parse_login_response)."""
        return self._request("POST", AUTH_LOGIN, json={"nickname": nickname, "password": password})

    def list_users(self) -> List[User]:
        data = self._request("GET", AUTH_USERS)
        if not isinstance(data, list):
            raise ResponseShapeError(f"users response is not a list: {type(data).__name__}")
        try:
            return [User.model_validate(u) for u in data]
        except PydanticValidationError as e:
            raise ResponseShapeError(f"invalid user row: {e}") from e

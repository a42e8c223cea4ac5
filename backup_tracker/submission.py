"""
백업 상태 변경 제출
- 바뀐 단계만 PATCH로 전송 (전체 덮어쓰기 금지)
- 완료로 바뀌는 단계에만 확인자 = 현재 로그인 유저
- 미완료로 바뀌는 단계는 확인자를 비운다
"""
import logging
from typing import Any, Dict, Mapping

from .client import BackupApiClient
from .errors import BackupTrackerError, ValidationError
from .schemas import BackupRecord
from .session import Session
from .stages import STAGES, StageState

log = logging.getLogger("submission")


def build_completion_patch(
    pending: Mapping[str, StageState],
    acting_user_id: int,
    version: int | None = None,
) -> Dict[str, Any]:
    if not pending:
        raise ValidationError("empty change set", notice="변경된 백업 상태가 없습니다.")

    body: Dict[str, Any] = {}
    for stage, state in pending.items():
        if stage not in STAGES:
            raise ValidationError(f"unknown stage: {stage}")
        if state is StageState.NOT_APPLICABLE:
            raise ValidationError(f"stage {stage} cannot be set to N/A after creation")
        body[stage] = state.to_wire()
        body[f"{stage}_checker"] = acting_user_id if state is StageState.COMPLETE else None
    if version is not None:
        body["version"] = version
    return body


class CompletionSubmitter:
    def __init__(self, client: BackupApiClient):
        self.client = client

    def submit(
        self,
        record_id: int,
        pending: Mapping[str, StageState],
        session: Session,
        synced_record: BackupRecord | None = None,
    ) -> BackupRecord:
        """
        pending 변경 제출

        Args:
            synced_record: 마지막 서버 스냅샷. version이 있으면 같이 보내서 충돌을 감지한다.
        Returns:
            서버가 돌려준 전체 항목 (확인자 이름 포함)
        Raises:
            ValidationError: pending이 비어있음 (네트워크 호출 없음)
            ConflictLost / NotFoundError / TransportError: 서버 거부 또는 통신 실패
        """
        if not pending:
            raise ValidationError("empty change set", notice="변경된 백업 상태가 없습니다.")
        user = session.require_user()
        version = synced_record.version if synced_record is not None else None
        body = build_completion_patch(pending, user.id, version=version)

        try:
            updated = self.client.patch_record(record_id, body, user.id)
        except BackupTrackerError as e:
            log.warning("record %s: stage update failed (%s): %s", record_id, type(e).__name__, e)
            raise

        log.info(
            "record %s: %s by user %s",
            record_id,
            ", ".join(f"{k}={v.value}" for k, v in pending.items()),
            user.id,
        )
        return updated

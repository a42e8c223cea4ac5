"""
체크박스 변경 추적 (ChangeSet)
- 항목별로 서버 스냅샷과 "다른" 단계만 보관
- 원래 값으로 되돌리면 키를 삭제 (no-op 저장 안 함)
- 서버 스냅샷(synced record)은 절대 수정하지 않음
"""
import logging
from typing import Dict, Mapping

from .errors import ValidationError
from .schemas import BackupRecord
from .stages import STAGES, StageState, toggle_state

log = logging.getLogger("tracker")


class ChangeSetTracker:
    def __init__(self):
        self._changes: Dict[int, Dict[str, StageState]] = {}

    def record_toggle(self, record_id: int, stage: str, synced_record: BackupRecord) -> Dict[str, StageState]:
        """
        단계 토글 기록

        Returns:
            토글 후 해당 항목의 pending 변경 (복사본)
        Raises:
            ValidationError: 알 수 없는 단계, N/A 단계, 항목 id 불일치
        """
        if synced_record.id != record_id:
            raise ValidationError(f"record id mismatch: {record_id} != {synced_record.id}")
        if stage not in STAGES:
            raise ValidationError(f"unknown stage: {stage}")

        synced = synced_record.stage(stage).state
        if synced is StageState.NOT_APPLICABLE:
            raise ValidationError(
                f"stage {stage} of record {record_id} is not tracked",
                notice="백업 대상이 아닌 단계는 변경할 수 없습니다.",
            )

        pending = self._changes.get(record_id, {})
        current = pending.get(stage, synced)
        proposed = toggle_state(current)

        item_changes = dict(pending)
        if proposed != synced:
            item_changes[stage] = proposed
        else:
            item_changes.pop(stage, None)

        if item_changes:
            self._changes[record_id] = item_changes
        else:
            self._changes.pop(record_id, None)
        return dict(item_changes)

    def pending_changes_for(self, record_id: int) -> Dict[str, StageState]:
        return dict(self._changes.get(record_id, {}))

    def has_pending(self, record_id: int) -> bool:
        return record_id in self._changes

    def pending_record_ids(self) -> list[int]:
        return list(self._changes)

    def proposed_state(self, record: BackupRecord, stage: str) -> StageState:
        """화면 표시용: pending 값이 있으면 그것, 없으면 서버 값"""
        return self._changes.get(record.id, {}).get(stage, record.stage(stage).state)

    def clear(self, record_id: int) -> None:
        self._changes.pop(record_id, None)

    def clear_all(self) -> None:
        self._changes.clear()

    def settle(self, record_id: int, submitted: Mapping[str, StageState], synced_record: BackupRecord) -> None:
        """
        제출 성공 후 정리

        제출한 값 그대로인 키는 삭제하고, 새 서버 값과 같아진 키도 삭제한다.
        제출 중에 새로 토글한 단계는 남겨서 다음 제출 때 보낸다.
        """
        pending = self._changes.get(record_id)
        if not pending:
            return
        remaining = {
            stage: state
            for stage, state in pending.items()
            if submitted.get(stage) != state and synced_record.stage(stage).state != state
        }
        if remaining:
            log.info("record %s keeps %d pending change(s) after submit", record_id, len(remaining))
            self._changes[record_id] = remaining
        else:
            self._changes.pop(record_id, None)

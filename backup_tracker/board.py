"""
백업 현황 보드
- 화면 하나(세션 하나)가 들고 있는 상태: 항목 목록, 유저 목록, 변경 추적, 편집 중 항목
- 목록은 서버 기준 스냅샷. 성공한 조회/변경 뒤에만 통째로 교체
- 변경 실패 시 notice 하나만 남기고 pending 상태는 유지 (재시도 없음)
"""
import logging
from enum import Enum
from typing import Dict, List

from .client import BackupApiClient
from .editor import RecordEditor
from .errors import BackupTrackerError, ConflictLost, NotFoundError, NotLoggedInError, ValidationError
from .schemas import BackupRecord, RecordDraft, RecordUpdate, User
from .session import Session
from .stages import StageState
from .submission import CompletionSubmitter
from .tracker import ChangeSetTracker

log = logging.getLogger("board")

LOAD_FAILED = "데이터를 불러오는데 실패했습니다."
SUBMIT_FAILED = "백업 상태 변경에 실패했습니다."
UPDATE_FAILED = "수정에 실패했습니다."
CREATE_FAILED = "생성에 실패했습니다."
DELETE_FAILED = "삭제에 실패했습니다."


class ViewState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    VIEWING_WITH_PENDING = "viewing_with_pending"


class BackupBoard:
    def __init__(self, client: BackupApiClient, session: Session):
        self.client = client
        self.session = session
        self.tracker = ChangeSetTracker()
        self.submitter = CompletionSubmitter(client)
        self.editor = RecordEditor(client, self.tracker)

        self.records: List[BackupRecord] = []
        self.users: List[User] = []
        self.load_error: str = ""
        self.notice: str = ""

    # ─────────────────────────────────────────────────
    # 조회
    # ─────────────────────────────────────────────────

    def load(self) -> bool:
        self.load_error = ""
        try:
            records = self.client.list_records()
        except BackupTrackerError as e:
            log.error("record list load failed: %s", e)
            self.records = []
            self.tracker.clear_all()
            self.load_error = LOAD_FAILED
            return False
        self.records = records
        self.tracker.clear_all()
        return True

    def load_users(self) -> bool:
        try:
            self.users = self.client.list_users()
        except BackupTrackerError as e:
            log.error("Failed to load users: %s", e)
            return False
        return True

    def users_by_id(self) -> Dict[int, User]:
        return {u.id: u for u in self.users}

    def get(self, record_id: int) -> BackupRecord:
        for r in self.records:
            if r.id == record_id:
                return r
        raise NotFoundError(f"record {record_id} not in list")

    def view_state(self, record_id: int) -> ViewState:
        if self.editor.editing_id == record_id:
            return ViewState.EDITING
        if self.tracker.has_pending(record_id):
            return ViewState.VIEWING_WITH_PENDING
        return ViewState.VIEWING

    # ─────────────────────────────────────────────────
    # 체크박스 (단계 상태)
    # ─────────────────────────────────────────────────

    def toggle(self, record_id: int, stage: str) -> Dict[str, StageState]:
        if self.editor.editing_id == record_id:
            raise ValidationError(f"record {record_id} is being edited")
        return self.tracker.record_toggle(record_id, stage, self.get(record_id))

    def proposed(self, record_id: int, stage: str) -> StageState:
        return self.tracker.proposed_state(self.get(record_id), stage)

    def can_submit(self, record_id: int) -> bool:
        return self.tracker.has_pending(record_id)

    def discard(self, record_id: int) -> None:
        self.tracker.clear(record_id)

    def submit(self, record_id: int) -> bool:
        """
        pending 변경 제출

        성공: 목록의 해당 항목을 서버 응답으로 교체하고 제출한 변경을 비운다.
        실패: notice만 남기고 pending 유지.
        빈 변경으로 호출하면 ValidationError (제출 버튼이 비활성이어야 하는 상황).
        """
        self.notice = ""
        pending = self.tracker.pending_changes_for(record_id)
        synced = self.get(record_id)
        try:
            updated = self.submitter.submit(record_id, pending, self.session, synced_record=synced)
        except ValidationError:
            if not pending:
                raise
            self.notice = SUBMIT_FAILED
            return False
        except (ConflictLost, NotLoggedInError) as e:
            self.notice = e.notice
            return False
        except BackupTrackerError:
            self.notice = SUBMIT_FAILED
            return False

        self.records = [updated if r.id == record_id else r for r in self.records]
        self.tracker.settle(record_id, pending, updated)
        return True

    # ─────────────────────────────────────────────────
    # 생성 / 수정 / 삭제
    # ─────────────────────────────────────────────────

    def begin_edit(self, record_id: int) -> RecordUpdate:
        return self.editor.begin_edit(self.get(record_id))

    def cancel_edit(self) -> None:
        self.editor.cancel_edit()

    def save_edit(self, data: RecordUpdate) -> bool:
        self.notice = ""
        record_id = self.editor.editing_id
        if record_id is None:
            raise ValidationError("no record is being edited")
        try:
            self.editor.update(record_id, data, self.session)
        except BackupTrackerError as e:
            log.warning("record %s update failed: %s", record_id, e)
            self.notice = e.notice if isinstance(e, ValidationError) else UPDATE_FAILED
            return False
        self.load()
        return True

    def create(self, draft: RecordDraft) -> bool:
        self.notice = ""
        try:
            self.editor.create(draft, self.session)
        except BackupTrackerError as e:
            log.warning("record create failed: %s", e)
            self.notice = e.notice if isinstance(e, ValidationError) else CREATE_FAILED
            return False
        self.load()
        return True

    def delete(self, record_id: int) -> bool:
        self.notice = ""
        try:
            self.editor.delete(record_id, self.session)
        except BackupTrackerError as e:
            log.warning("record %s delete failed: %s", record_id, e)
            self.notice = DELETE_FAILED
            return False
        self.load()
        return True

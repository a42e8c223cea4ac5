import logging

from .client import BackupApiClient
from .errors import PendingChangesError, ValidationError
from .schemas import BackupRecord, RecordDraft, RecordUpdate
from .session import Session
from .tracker import ChangeSetTracker

log = logging.getLogger("editor")


class RecordEditor:
    """
    항목 생성/수정/삭제 (전체 필드)

    단계 상태는 여기서 다루지 않는다. 체크박스 변경이 남아있는 항목은
    수정 시작/저장 모두 거부 (전체 덮어쓰기가 pending 변경을 덮지 않도록).
    """

    def __init__(self, client: BackupApiClient, tracker: ChangeSetTracker):
        self.client = client
        self.tracker = tracker
        self.editing_id: int | None = None
        self.edit_data: RecordUpdate | None = None

    def can_edit(self, record_id: int) -> bool:
        return not self.tracker.has_pending(record_id)

    def _guard(self, record_id: int) -> None:
        if not self.can_edit(record_id):
            raise PendingChangesError(f"record {record_id} has pending stage changes")

    def begin_edit(self, record: BackupRecord) -> RecordUpdate:
        self._guard(record.id)
        self.editing_id = record.id
        self.edit_data = RecordUpdate.from_record(record)
        return self.edit_data

    def cancel_edit(self) -> None:
        self.editing_id = None
        self.edit_data = None

    def create(self, draft: RecordDraft, session: Session) -> BackupRecord:
        user = session.require_user()
        created = self.client.create_record(draft.to_payload(), user.id)
        log.info("record %s created by user %s", created.id, user.id)
        return created

    def update(self, record_id: int, data: RecordUpdate, session: Session) -> BackupRecord:
        user = session.require_user()
        self._guard(record_id)
        if self.editing_id is not None and self.editing_id != record_id:
            raise ValidationError(f"record {self.editing_id} is being edited, not {record_id}")
        updated = self.client.update_record(record_id, data.to_payload(), user.id)
        self.cancel_edit()
        log.info("record %s updated by user %s", record_id, user.id)
        return updated

    def delete(self, record_id: int, session: Session) -> None:
        user = session.require_user()
        self.client.delete_record(record_id, user.id)
        if self.editing_id == record_id:
            self.cancel_edit()
        self.tracker.clear(record_id)
        log.info("record %s deleted by user %s", record_id, user.id)

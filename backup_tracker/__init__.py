from .board import BackupBoard, ViewState
from .client import BackupApiClient
from .schemas import BackupRecord, RecordDraft, RecordUpdate, User
from .session import Session, SessionStore, login
from .stages import STAGES, StageState, StageStatus, toggle, toggle_state
from .submission import CompletionSubmitter, build_completion_patch
from .tracker import ChangeSetTracker

__all__ = [
    "BackupBoard",
    "ViewState",
    "BackupApiClient",
    "BackupRecord",
    "RecordDraft",
    "RecordUpdate",
    "User",
    "Session",
    "SessionStore",
    "login",
    "STAGES",
    "StageState",
    "StageStatus",
    "toggle",
    "toggle_state",
    "CompletionSubmitter",
    "build_completion_patch",
    "ChangeSetTracker",
]

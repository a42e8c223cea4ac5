"""
백업 트래커 에러 정의
- 모든 에러는 사용자에게 보여줄 notice 문구를 하나씩 가진다
- 자동 재시도 없음 (호출자가 notice를 띄우고 사용자가 재시도)
"""


class BackupTrackerError(Exception):
    notice = "요청 처리에 실패했습니다."

    def __init__(self, message: str = "", notice: str | None = None):
        super().__init__(message or self.notice)
        if notice:
            self.notice = notice


class NotFoundError(BackupTrackerError):
    notice = "항목을 찾을 수 없습니다."


class ValidationError(BackupTrackerError):
    notice = "입력값을 확인해주세요."


class PendingChangesError(ValidationError):
    notice = "저장하지 않은 백업 상태 변경이 있습니다."


class ConflictLost(BackupTrackerError):
    notice = "데이터가 변경되었습니다. 새로고침 후 다시 시도해주세요."


class TransportError(BackupTrackerError):
    notice = "서버와 통신하지 못했습니다."

    def __init__(self, message: str = "", status: int | None = None, notice: str | None = None):
        super().__init__(message, notice=notice)
        self.status = status


class ResponseShapeError(BackupTrackerError):
    notice = "서버 응답 형식을 알 수 없습니다."


class NotLoggedInError(BackupTrackerError):
    notice = "로그인이 필요합니다."

"""
백업 단계 상태 모델
- 단계: cam / master / clean / final_product
- 상태: N/A(추적 제외) / 미완료 / 완료 (3상태)
- 확인자(verified_by)는 완료 상태일 때만 존재
"""
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

StageName = Literal["cam", "master", "clean", "final_product"]

STAGES: tuple[str, ...] = ("cam", "master", "clean", "final_product")

STAGE_LABELS = {
    "cam": "CAM",
    "master": "Master",
    "clean": "Clean",
    "final_product": "Final Product",
}


class StageState(str, Enum):
    NOT_APPLICABLE = "not_applicable"
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"

    @classmethod
    def from_wire(cls, value: bool | None) -> "StageState":
        if value is None:
            return cls.NOT_APPLICABLE
        return cls.COMPLETE if value else cls.INCOMPLETE

    def to_wire(self) -> bool | None:
        if self is StageState.NOT_APPLICABLE:
            return None
        return self is StageState.COMPLETE


def toggle_state(state: StageState) -> StageState:
    """미완료 ⇄ 완료. N/A는 그대로."""
    if state is StageState.INCOMPLETE:
        return StageState.COMPLETE
    if state is StageState.COMPLETE:
        return StageState.INCOMPLETE
    return state


class StageStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: StageState
    verified_by: int | None = None
    verified_by_name: str | None = None  # 서버가 채워주는 표시용 이름

    @model_validator(mode="after")
    def _check_verifier(self):
        if self.state is StageState.COMPLETE and self.verified_by is None:
            raise ValueError("완료 상태에는 확인자가 필요합니다")
        if self.state is not StageState.COMPLETE and (
            self.verified_by is not None or self.verified_by_name is not None
        ):
            raise ValueError(f"{self.state.value} 상태에는 확인자를 둘 수 없습니다")
        return self

    @property
    def is_trackable(self) -> bool:
        return self.state is not StageState.NOT_APPLICABLE

    def label(self) -> str:
        if self.state is StageState.NOT_APPLICABLE:
            return "N/A"
        if self.state is StageState.INCOMPLETE:
            return "미완료"
        name = self.verified_by_name or str(self.verified_by)
        return f"완료 / 확인자: {name}"


def toggle(status: StageStatus, acting_user_id: int) -> StageStatus:
    """
    단계 상태 토글

    완료로 바뀌면 acting_user_id가 확인자로 찍히고, 미완료로 바뀌면 확인자가 지워진다.
    N/A는 변경 불가 (그대로 반환).
    """
    new_state = toggle_state(status.state)
    if new_state is status.state:
        return status
    if new_state is StageState.COMPLETE:
        return StageStatus(state=new_state, verified_by=acting_user_id)
    return StageStatus(state=new_state)

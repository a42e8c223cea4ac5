from datetime import date, datetime
from typing import Any, Dict, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ResponseShapeError, ValidationError
from .stages import STAGES, StageState, StageStatus


def _parse_day(value: Any) -> Any:
    # 서버는 ISO datetime("2024-05-01T00:00:00Z")으로 내려줄 수 있음 → 날짜만 사용
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        if not value.strip():
            return None
        return date.fromisoformat(value[:10])
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    nickname: str | None = None

    def display(self) -> str:
        return f"{self.name} ({self.nickname})" if self.nickname else self.name


class BackupRecord(BaseModel):
    """
    백업 현황 항목 (서버 기준 스냅샷)

    wire 포맷은 평평한 행(cam, cam_checker, cam_checker_name, ...)이고
    여기서는 단계별 StageStatus로 묶어서 보관한다.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    event_name: str | None = None
    displayed_date: date | None = None
    name: str
    description: str | None = None
    cam: StageStatus
    master: StageStatus
    clean: StageStatus
    final_product: StageStatus
    producers: Tuple[str, ...] = ()
    created_at: datetime | None = None
    version: int | None = None  # 서버가 주면 충돌 감지에 사용

    @model_validator(mode="before")
    @classmethod
    def _from_wire(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for stage in STAGES:
            raw = data.get(stage)
            if isinstance(raw, (StageStatus, dict)):
                continue
            state = StageState.from_wire(raw)
            checker = data.pop(f"{stage}_checker", None)
            checker_name = data.pop(f"{stage}_checker_name", None)
            if state is StageState.COMPLETE:
                data[stage] = {"state": state, "verified_by": checker, "verified_by_name": checker_name}
            else:
                # 완료가 아니면 남아있는 확인자 값은 버린다
                data[stage] = {"state": state}
        return data

    @field_validator("displayed_date", mode="before")
    @classmethod
    def _day(cls, v):
        return _parse_day(v)

    @field_validator("producers", mode="before")
    @classmethod
    def _producers(cls, v):
        if v is None:
            return ()
        seen: List[str] = []
        for p in v:
            if p not in seen:
                seen.append(p)
        return tuple(seen)

    def stage(self, name: str) -> StageStatus:
        if name not in STAGES:
            raise ValidationError(f"unknown stage: {name}")
        return getattr(self, name)

    def stages(self) -> Dict[str, StageStatus]:
        return {s: getattr(self, s) for s in STAGES}

    def to_wire(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "id": self.id,
            "event_name": self.event_name,
            "displayed_date": self.displayed_date.isoformat() if self.displayed_date else None,
            "name": self.name,
            "description": self.description,
        }
        for stage, st in self.stages().items():
            row[stage] = st.state.to_wire()
            row[f"{stage}_checker"] = st.verified_by
            row[f"{stage}_checker_name"] = st.verified_by_name
        row["created_at"] = self.created_at.isoformat() if self.created_at else None
        row["producers"] = list(self.producers)
        if self.version is not None:
            row["version"] = self.version
        return row


def _require_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError("name is required", notice="이름은 필수입니다.")
    return name.strip()


def _date_to_wire(d: date | None) -> str | None:
    return f"{d.isoformat()}T00:00:00Z" if d else None


class RecordDraft(BaseModel):
    """새 항목 생성 입력. track_* = False 인 단계는 N/A로 생성된다."""
    event_name: str | None = None
    displayed_date: date | None = Field(default_factory=date.today)
    name: str = ""
    description: str | None = None
    track_cam: bool = True
    track_master: bool = True
    track_clean: bool = True
    track_final_product: bool = True
    user_ids: List[int] = Field(default_factory=list)

    @field_validator("displayed_date", mode="before")
    @classmethod
    def _day(cls, v):
        return _parse_day(v)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "event_name": _blank_to_none(self.event_name),
            "displayed_date": _date_to_wire(self.displayed_date),
            "name": _require_name(self.name),
            "description": _blank_to_none(self.description),
        }
        for stage in STAGES:
            state = StageState.INCOMPLETE if getattr(self, f"track_{stage}") else StageState.NOT_APPLICABLE
            payload[stage] = state.to_wire()
            payload[f"{stage}_checker"] = None
        payload["user_ids"] = list(self.user_ids)
        return payload


class RecordUpdate(BaseModel):
    """
    전체 필드 수정 입력 (단계 상태는 포함하지 않음)
    user_ids=None 이면 제작자 목록은 건드리지 않는다.
    """
    event_name: str | None = None
    displayed_date: date | None = None
    name: str = ""
    description: str | None = None
    user_ids: List[int] | None = None

    @field_validator("displayed_date", mode="before")
    @classmethod
    def _day(cls, v):
        return _parse_day(v)

    @classmethod
    def from_record(cls, record: BackupRecord) -> "RecordUpdate":
        return cls(
            event_name=record.event_name,
            displayed_date=record.displayed_date,
            name=record.name,
            description=record.description,
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "event_name": _blank_to_none(self.event_name),
            "displayed_date": _date_to_wire(self.displayed_date),
            "name": _require_name(self.name),
            "description": _blank_to_none(self.description),
        }
        if self.user_ids is not None:
            payload["user_ids"] = list(self.user_ids)
        return payload


# ===== 로그인 응답 =====
# 서버 버전에 따라 응답 모양이 다름. 아는 모양만 받고 나머지는 거부.

class NestedLogin(BaseModel):
    kind: Literal["nested"] = "nested"
    user: User
    access_token: str | None = None


class FlatLogin(BaseModel):
    kind: Literal["flat"] = "flat"
    id: int
    name: str
    nickname: str | None = None
    access_token: str | None = None

    @property
    def user(self) -> User:
        return User(id=self.id, name=self.name, nickname=self.nickname)


class LoginRejected(BaseModel):
    kind: Literal["rejected"] = "rejected"
    message: str = "로그인에 실패했습니다."


LoginResponse = NestedLogin | FlatLogin | LoginRejected


def parse_login_response(payload: Any) -> LoginResponse:
    try:
        return _parse_login(payload)
    except PydanticValidationError as e:
        raise ResponseShapeError(f"malformed login response: {e}") from e


def _parse_login(payload: Any) -> LoginResponse:
    if not isinstance(payload, dict):
        raise ResponseShapeError(f"login response is not an object: {type(payload).__name__}")
    if isinstance(payload.get("user"), dict):
        return NestedLogin(user=payload["user"], access_token=payload.get("access_token"))
    if "id" in payload and "name" in payload:
        return FlatLogin(
            id=payload["id"],
            name=payload["name"],
            nickname=payload.get("nickname"),
            access_token=payload.get("access_token"),
        )
    if payload.get("success") is False:
        return LoginRejected(message=payload.get("message") or "로그인에 실패했습니다.")
    raise ResponseShapeError(f"unrecognized login response keys: {sorted(payload)}")

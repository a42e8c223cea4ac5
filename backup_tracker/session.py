"""
로그인 세션
- 전역 저장소 대신 Session 객체를 명시적으로 넘긴다
- 세션 경계에서만 load / save / clear
"""
import logging
from pathlib import Path

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .client import BackupApiClient
from .errors import NotLoggedInError, TransportError, ValidationError
from .schemas import FlatLogin, LoginRejected, NestedLogin, User, parse_login_response

log = logging.getLogger("session")


class Session(BaseModel):
    user: User | None = None
    access_token: str | None = None

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None

    def require_user(self) -> User:
        if self.user is None:
            raise NotLoggedInError("no logged-in user in session")
        return self.user


class SessionStore:
    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def load(self) -> Session:
        if not self.path.exists():
            return Session()
        try:
            return Session.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, PydanticValidationError) as e:
            # 깨진 세션 파일은 로그아웃 상태로 취급
            log.warning("session file %s unreadable: %s", self.path, e)
            return Session()

    def save(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(session.model_dump_json(), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def login(client: BackupApiClient, nickname: str, password: str) -> Session:
    try:
        payload = client.login(nickname, password)
    except TransportError as e:
        if e.status == 401:
            raise ValidationError("login rejected", notice="닉네임 또는 비밀번호가 올바르지 않습니다.") from e
        raise

    resp = parse_login_response(payload)
    if isinstance(resp, NestedLogin):
        session = Session(user=resp.user, access_token=resp.access_token)
    elif isinstance(resp, FlatLogin):
        session = Session(user=resp.user, access_token=resp.access_token)
    elif isinstance(resp, LoginRejected):
        raise ValidationError(f"login rejected: {resp.message}", notice=resp.message)
    else:
        raise AssertionError(f"unhandled login response: {resp!r}")

    log.info("logged in as %s (id=%s)", session.user.name, session.user.id)
    return session

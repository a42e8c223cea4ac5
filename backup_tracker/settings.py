import os
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # API
    api_base_url: str = Field(default="http://localhost:8000/api/v1", alias="BACKUP_API_BASE_URL")
    api_timeout: float = Field(default=30.0, alias="BACKUP_API_TIMEOUT")
    list_limit: int = Field(default=9999, alias="BACKUP_LIST_LIMIT")

    # 로그인 세션 파일
    session_file: str = Field(default="~/.backup_tracker/session.json", alias="BACKUP_SESSION_FILE")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


def load_env(dotenv_path: str | None = None) -> None:
    # .env 로드 (이미 설정된 환경변수가 우선)
    load_dotenv(dotenv_path=dotenv_path, override=False)


def require(name: str) -> str:
    v = os.getenv(name)
    if not v:
        raise RuntimeError(f"Missing env: {name}")
    return v

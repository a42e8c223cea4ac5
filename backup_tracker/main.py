import logging
import os
import sys
from typing import Iterable, List

from .board import BackupBoard
from .client import BackupApiClient
from .errors import BackupTrackerError
from .filters import group_by_date
from .logging_ import configure_logging
from .schemas import BackupRecord
from .session import SessionStore, login
from .settings import Settings, load_env, require
from .stages import STAGE_LABELS, STAGES

log = logging.getLogger("backup_tracker")


def render_summary(records: Iterable[BackupRecord]) -> List[str]:
    """날짜별 백업 현황 텍스트"""
    lines: List[str] = []
    for day, items in group_by_date(records).items():
        lines.append(f"== {day.isoformat() if day else '날짜 없음'}")
        for r in items:
            title = f"[{r.event_name}] {r.name}" if r.event_name else r.name
            lines.append(f"  #{r.id} {title}")
            for stage in STAGES:
                lines.append(f"    {STAGE_LABELS[stage]}: {r.stage(stage).label()}")
    return lines


def main() -> int:
    load_env()
    settings = Settings()
    configure_logging(settings.log_level)

    store = SessionStore(settings.session_file)
    session = store.load()
    with BackupApiClient(settings) as client:
        if not session.is_logged_in:
            nickname = require("BACKUP_NICKNAME")
            try:
                session = login(client, nickname, require("BACKUP_PASSWORD"))
            except BackupTrackerError as e:
                log.error("login failed: %s", e)
                print(e.notice, file=sys.stderr)
                return 1
            store.save(session)

        board = BackupBoard(client, session)
        if not board.load():
            print(board.load_error, file=sys.stderr)
            return 1
        for line in render_summary(board.records):
            print(line)

    if os.getenv("BACKUP_LOGOUT") == "1":
        store.clear()
    return 0


if __name__ == "__main__":
    sys.exit(main())

from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List

from .errors import ValidationError
from .schemas import BackupRecord
from .stages import STAGES, StageState


def filter_records(
    records: Iterable[BackupRecord],
    event_name: str | None = None,
    name: str | None = None,
    **stage_states: StageState,
) -> List[BackupRecord]:
    """
    클라이언트 사이드 필터링

    event_name / name: 대소문자 무시 부분일치 (이벤트명 없는 항목은 통과)
    stage_states: cam=StageState.COMPLETE 처럼 단계별 정확히 일치
    """
    unknown = set(stage_states) - set(STAGES)
    if unknown:
        raise ValidationError(f"unknown stage filter(s): {sorted(unknown)}")

    event_q = event_name.lower() if event_name else None
    name_q = name.lower() if name else None

    out = []
    for item in records:
        # 이벤트명이 없는 항목은 이벤트 필터에서 제외하지 않음
        if event_q and item.event_name and event_q not in item.event_name.lower():
            continue
        if name_q and name_q not in item.name.lower():
            continue
        if any(item.stage(s).state is not st for s, st in stage_states.items()):
            continue
        out.append(item)
    return out


def group_by_date(records: Iterable[BackupRecord]) -> Dict[date | None, List[BackupRecord]]:
    """displayed_date 기준 그룹 (최신 날짜 먼저, 날짜 없는 항목은 맨 뒤)"""
    groups: Dict[date | None, List[BackupRecord]] = {}
    for r in records:
        groups.setdefault(r.displayed_date, []).append(r)

    dated = sorted((d for d in groups if d is not None), reverse=True)
    ordered: Dict[date | None, List[BackupRecord]] = OrderedDict((d, groups[d]) for d in dated)
    if None in groups:
        ordered[None] = groups[None]
    return ordered

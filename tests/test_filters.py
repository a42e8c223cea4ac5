"""
필터 / 날짜 그룹 테스트
"""
from datetime import date

import pytest

from backup_tracker.errors import ValidationError
from backup_tracker.filters import filter_records, group_by_date
from backup_tracker.schemas import BackupRecord
from backup_tracker.stages import StageState
from tests.conftest import make_row


@pytest.fixture
def records():
    rows = [
        make_row(1, name="Opening", cam=True, cam_checker=7),
        make_row(2, name="리허설", event_name=None, displayed_date=None),
        make_row(3, name="Closing", event_name="겨울 캠프", displayed_date="2024-12-24T00:00:00Z", master=None),
        make_row(4, name="opening 2", displayed_date="2024-07-19"),
    ]
    return [BackupRecord.model_validate(r) for r in rows]


class TestFilterRecords:
    def test_name_case_insensitive(self, records):
        assert [r.id for r in filter_records(records, name="OPEN")] == [1, 4]

    def test_event_name_passes_missing(self, records):
        assert [r.id for r in filter_records(records, event_name="수련회")] == [1, 2, 4]

    def test_stage_state(self, records):
        assert [r.id for r in filter_records(records, cam=StageState.COMPLETE)] == [1]
        assert [r.id for r in filter_records(records, master=StageState.NOT_APPLICABLE)] == [3]

    def test_unknown_stage(self, records):
        with pytest.raises(ValidationError):
            filter_records(records, audio=StageState.COMPLETE)


class TestGroupByDate:
    def test_newest_first_undated_last(self, records):
        groups = group_by_date(records)
        assert list(groups) == [date(2024, 12, 24), date(2024, 7, 20), date(2024, 7, 19), None]
        assert [r.id for r in groups[None]] == [2]

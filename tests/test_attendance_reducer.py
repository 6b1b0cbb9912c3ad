"""출퇴근 상태 리듀서 테스트 — 현재 상태, strict/legacy 근무시간 집계.

Attendance reducer tests — current state, strict session pairing and the
legacy positional aggregation.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from ponto.services.attendance_reducer import (
    AggregationMode,
    AttendanceState,
    count_days_worked,
    current_state,
    latest_record,
    summarize,
)


@dataclass
class Rec:
    type: str
    timestamp: datetime


def at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 3, day, hour, minute, tzinfo=timezone.utc)


def full_day(day: int) -> list[Rec]:
    return [
        Rec("entrada", at(day, 8)),
        Rec("pausa", at(day, 12)),
        Rec("retorno", at(day, 13)),
        Rec("saida", at(day, 17)),
    ]


class TestCurrentState:
    """현재 상태 — 최신 기록 하나로 결정."""

    def test_no_records_is_off_shift(self):
        assert current_state([]) is AttendanceState.OFF_SHIFT

    @pytest.mark.parametrize("record_type,expected", [
        ("entrada", AttendanceState.WORKING),
        ("retorno", AttendanceState.WORKING),
        ("pausa", AttendanceState.ON_BREAK),
        ("saida", AttendanceState.OFF_SHIFT),
    ])
    def test_latest_type_decides(self, record_type, expected):
        records = [Rec("entrada", at(1, 8)), Rec(record_type, at(1, 9))]
        assert current_state(records) is expected

    def test_latest_by_timestamp_not_position(self):
        records = [Rec("pausa", at(1, 12)), Rec("entrada", at(1, 8))]
        assert current_state(records) is AttendanceState.ON_BREAK

    def test_equal_timestamps_later_insertion_wins(self):
        first, second = Rec("entrada", at(1, 8)), Rec("saida", at(1, 8))
        assert latest_record([first, second]) is second
        assert current_state([first, second]) is AttendanceState.OFF_SHIFT

    def test_naive_timestamps_treated_as_utc(self):
        records = [Rec("entrada", datetime(2024, 3, 1, 8)), Rec("pausa", at(1, 9))]
        assert current_state(records) is AttendanceState.ON_BREAK


class TestStrictMode:
    """strict 집계 — 세션 상태 기계."""

    def test_empty_window(self):
        summary = summarize([])
        assert summary.total_hours == 0
        assert summary.days_worked == 0
        assert summary.average_hours_per_day == 0
        assert summary.mode is AggregationMode.STRICT

    def test_two_full_days(self):
        summary = summarize(full_day(1) + full_day(2))
        assert summary.total_hours == pytest.approx(18.0)
        assert summary.days_worked == 2
        assert summary.average_hours_per_day == pytest.approx(9.0)
        assert len(summary.sessions) == 2
        assert summary.sessions[0].break_hours == pytest.approx(1.0)
        assert not summary.needs_review

    def test_session_without_break(self):
        summary = summarize([Rec("entrada", at(1, 9)), Rec("saida", at(1, 15, 30))])
        assert summary.total_hours == pytest.approx(6.5)

    def test_missing_pausa_does_not_shift_pairs(self):
        # 하루에 pausa가 빠져도 다음 날 집계가 어긋나지 않음
        records = [
            Rec("entrada", at(1, 8)),
            Rec("retorno", at(1, 13)),
            Rec("saida", at(1, 17)),
        ] + full_day(2)
        summary = summarize(records)
        assert summary.total_hours == pytest.approx(18.0)
        assert [a.kind for a in summary.anomalies] == ["unexpected_retorno"]
        assert summary.needs_review

    def test_unclosed_session_not_counted(self):
        summary = summarize(full_day(1) + [Rec("entrada", at(2, 8))])
        assert summary.total_hours == pytest.approx(9.0)
        assert summary.days_worked == 2
        assert summary.anomalies[-1].kind == "unclosed_session"

    def test_orphaned_saida_flagged(self):
        summary = summarize([Rec("saida", at(1, 17))])
        assert summary.total_hours == 0
        assert summary.anomalies[0].kind == "orphaned_saida"

    def test_double_entrada_keeps_latest(self):
        records = [Rec("entrada", at(1, 7)), Rec("entrada", at(1, 8)), Rec("saida", at(1, 16))]
        summary = summarize(records)
        assert summary.total_hours == pytest.approx(8.0)
        assert summary.anomalies[0].kind == "orphaned_entrada"
        assert summary.anomalies[0].index == 0

    def test_saida_during_break_closes_break(self):
        records = [Rec("entrada", at(1, 8)), Rec("pausa", at(1, 12)), Rec("saida", at(1, 13))]
        summary = summarize(records)
        assert summary.total_hours == pytest.approx(5.0)
        assert summary.sessions[0].break_hours == pytest.approx(1.0)
        assert summary.anomalies[0].kind == "saida_during_break"

    def test_out_of_order_flagged(self):
        records = [Rec("entrada", at(1, 8)), Rec("saida", at(1, 7))]
        summary = summarize(records)
        assert "out_of_order" in [a.kind for a in summary.anomalies]

    def test_to_dict_rounds(self):
        summary = summarize([Rec("entrada", at(1, 8)), Rec("saida", at(1, 8, 20))])
        data = summary.to_dict()
        assert data["total_hours"] == 0.33
        assert data["mode"] == "strict"
        assert data["record_count"] == 2
        assert data["sessions"][0]["hours"] == 0.33


class TestLegacyMode:
    """legacy 집계 — 4개 단위 그룹의 첫/마지막 차이."""

    def test_full_groups(self):
        summary = summarize(full_day(1) + full_day(2), mode="legacy")
        assert summary.total_hours == pytest.approx(18.0)
        assert summary.mode is AggregationMode.LEGACY
        assert summary.sessions == []

    def test_incomplete_trailing_group_ignored(self):
        records = full_day(1) + [Rec("entrada", at(2, 8)), Rec("pausa", at(2, 12))]
        assert summarize(records, AggregationMode.LEGACY).total_hours == pytest.approx(9.0)

    def test_missing_event_shifts_groups(self):
        # legacy는 위치 기반이라 누락 시 다음 그룹이 어긋남
        records = full_day(1)[:3] + full_day(2)
        legacy = summarize(records, "legacy")
        strict = summarize(records, "strict")
        assert legacy.total_hours != pytest.approx(strict.total_hours)

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            summarize([], mode="weekly")


def test_days_worked_counts_distinct_utc_dates():
    records = [Rec("entrada", at(1, 8)), Rec("saida", at(1, 17)), Rec("entrada", at(3, 8))]
    assert count_days_worked(records) == 2

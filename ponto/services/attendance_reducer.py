"""출퇴근 상태 리듀서 — 기록 목록으로 현재 상태와 근무시간을 계산.

Attendance state reducer. Folds one employee's time records into:

* the current state (working, on_break, off_shift) from the latest record;
* a worked-hours summary over a window.

Two aggregation modes exist:

``strict`` (default)
    A session state machine::

        off_shift --entrada--> working --pausa--> on_break --retorno--> working --saida--> off_shift

    Each entrada is paired with the next saida. Events that do not fit the
    machine are reported as anomalies instead of being counted silently.

``legacy``
    Records are consumed positionally in groups of four and each complete
    group contributes ``group[3] - group[0]``. Kept for reports that must
    match historical numbers.

Records must arrive sorted ascending by (timestamp, insertion order). The
reducer does not re-sort; it flags regressions as ``out_of_order``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, Sequence

from ponto.services.attendance_validator import RecordType
from ponto.utils.dates import ensure_utc

_SECONDS_PER_HOUR: float = 3600.0


class RecordLike(Protocol):
    type: str
    timestamp: datetime


class AttendanceState(str, Enum):
    """직원 현재 상태 — Employee's current state."""

    WORKING = "working"
    ON_BREAK = "on_break"
    OFF_SHIFT = "off_shift"


class AggregationMode(str, Enum):
    STRICT = "strict"
    LEGACY = "legacy"


_STATE_AFTER: dict[RecordType, AttendanceState] = {
    RecordType.ENTRADA: AttendanceState.WORKING,
    RecordType.RETORNO: AttendanceState.WORKING,
    RecordType.PAUSA: AttendanceState.ON_BREAK,
    RecordType.SAIDA: AttendanceState.OFF_SHIFT,
}


@dataclass
class WorkSession:
    """근무 세션 — One entrada..saida pairing."""

    start: datetime
    end: datetime | None = None
    break_hours: float = 0.0

    @property
    def hours(self) -> float:
        if self.end is None:
            return 0.0
        return (self.end - self.start).total_seconds() / _SECONDS_PER_HOUR

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "hours": round(self.hours, 2),
            "break_hours": round(self.break_hours, 2),
        }


@dataclass(frozen=True)
class AggregationAnomaly:
    """집계 이상 — An event that did not fit the session state machine."""

    kind: str
    index: int
    record_type: str
    timestamp: datetime
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "index": self.index,
            "record_type": self.record_type,
            "timestamp": self.timestamp,
            "message": self.message,
        }


@dataclass
class AttendanceSummary:
    """근무시간 요약 — Worked-hours summary for a window."""

    total_hours: float
    days_worked: int
    average_hours_per_day: float
    mode: AggregationMode
    record_count: int = 0
    sessions: list[WorkSession] = field(default_factory=list)
    anomalies: list[AggregationAnomaly] = field(default_factory=list)

    @property
    def needs_review(self) -> bool:
        return bool(self.anomalies)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "record_count": self.record_count,
            "total_hours": round(self.total_hours, 2),
            "days_worked": self.days_worked,
            "average_hours_per_day": round(self.average_hours_per_day, 2),
            "needs_review": self.needs_review,
            "sessions": [s.to_dict() for s in self.sessions],
            "anomalies": [a.to_dict() for a in self.anomalies],
        }


def latest_record(records: Sequence[RecordLike]) -> RecordLike | None:
    """가장 최근 기록 — 동일 시각이면 나중에 삽입된 기록.

    The record with the greatest timestamp; ties go to the later position in
    ``records`` (insertion order).
    """
    if not records:
        return None
    best_index = max(range(len(records)), key=lambda i: (ensure_utc(records[i].timestamp), i))
    return records[best_index]


def current_state(records: Sequence[RecordLike]) -> AttendanceState:
    """현재 상태 — 가장 최근 기록 하나만으로 결정.

    entrada/retorno -> working, pausa -> on_break, saida or no records -> off_shift.
    """
    latest = latest_record(records)
    if latest is None:
        return AttendanceState.OFF_SHIFT
    return _STATE_AFTER.get(_record_type(latest), AttendanceState.OFF_SHIFT)


def count_days_worked(records: Sequence[RecordLike]) -> int:
    """근무일 수 — Distinct UTC calendar dates among the records."""
    return len({ensure_utc(r.timestamp).date() for r in records})


def summarize(
    records: Sequence[RecordLike],
    mode: AggregationMode | str = AggregationMode.STRICT,
) -> AttendanceSummary:
    """기간 내 기록을 근무시간 요약으로 집계합니다.

    Aggregate a window of one employee's records into a worked-hours summary.

    Args:
        records: 시각 오름차순 정렬된 기록 (Records sorted ascending by timestamp)
        mode: 집계 방식 (Aggregation mode, strict by default)

    Returns:
        AttendanceSummary: total hours, distinct days worked, average hours
        per worked day (0 when no day was worked), sessions and anomalies.
    """
    mode = AggregationMode(mode)
    if mode is AggregationMode.LEGACY:
        total_hours, sessions, anomalies = _aggregate_positional(records), [], []
    else:
        sessions, anomalies = _aggregate_sessions(records)
        total_hours = sum(s.hours for s in sessions)

    days_worked = count_days_worked(records)
    average = total_hours / days_worked if days_worked > 0 else 0.0

    return AttendanceSummary(
        total_hours=total_hours,
        days_worked=days_worked,
        average_hours_per_day=average,
        mode=mode,
        record_count=len(records),
        sessions=sessions,
        anomalies=anomalies,
    )


def _record_type(record: RecordLike) -> RecordType | None:
    try:
        return RecordType(record.type)
    except ValueError:
        return None


def _aggregate_positional(records: Sequence[RecordLike]) -> float:
    # 4개 단위 그룹 — incomplete trailing group contributes nothing
    total_seconds = 0.0
    for i in range(0, len(records) - 3, 4):
        first = ensure_utc(records[i].timestamp)
        last = ensure_utc(records[i + 3].timestamp)
        total_seconds += (last - first).total_seconds()
    return total_seconds / _SECONDS_PER_HOUR


def _aggregate_sessions(
    records: Sequence[RecordLike],
) -> tuple[list[WorkSession], list[AggregationAnomaly]]:
    sessions: list[WorkSession] = []
    anomalies: list[AggregationAnomaly] = []
    state = AttendanceState.OFF_SHIFT
    session: WorkSession | None = None
    session_index = -1
    break_started: datetime | None = None
    previous: datetime | None = None

    def flag(kind: str, index: int, record: RecordLike, message: str) -> None:
        anomalies.append(
            AggregationAnomaly(
                kind=kind,
                index=index,
                record_type=str(record.type),
                timestamp=ensure_utc(record.timestamp),
                message=message,
            )
        )

    for index, record in enumerate(records):
        ts = ensure_utc(record.timestamp)
        if previous is not None and ts < previous:
            flag("out_of_order", index, record, "Timestamp earlier than the previous record")
        previous = ts

        record_type = _record_type(record)
        if record_type is RecordType.ENTRADA:
            if session is not None:
                flag("orphaned_entrada", session_index, records[session_index], "Entrada without a matching saida")
            session, session_index = WorkSession(start=ts), index
            break_started = None
            state = AttendanceState.WORKING

        elif record_type is RecordType.PAUSA:
            if state is not AttendanceState.WORKING:
                flag("unexpected_pausa", index, record, "Pausa outside of a working period")
                continue
            break_started = ts
            state = AttendanceState.ON_BREAK

        elif record_type is RecordType.RETORNO:
            if state is not AttendanceState.ON_BREAK or session is None or break_started is None:
                flag("unexpected_retorno", index, record, "Retorno without a preceding pausa")
                continue
            session.break_hours += (ts - break_started).total_seconds() / _SECONDS_PER_HOUR
            break_started = None
            state = AttendanceState.WORKING

        elif record_type is RecordType.SAIDA:
            if session is None:
                flag("orphaned_saida", index, record, "Saida without a matching entrada")
                continue
            if state is AttendanceState.ON_BREAK and break_started is not None:
                flag("saida_during_break", index, record, "Saida while on break; break closed at saida")
                session.break_hours += (ts - break_started).total_seconds() / _SECONDS_PER_HOUR
            session.end = ts
            sessions.append(session)
            session, session_index, break_started = None, -1, None
            state = AttendanceState.OFF_SHIFT

        else:
            flag("unknown_type", index, record, f"Unknown record type '{record.type}'")

    if session is not None:
        flag("unclosed_session", session_index, records[session_index], "Entrada with no saida in the window")

    return sessions, anomalies

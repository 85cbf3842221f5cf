from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date

from studymate.schemas import SessionRecord, SubjectProgress

UPCOMING_LIMIT = 4
SUBJECT_PROGRESS_LIMIT = 3
RECENT_DOUBTS_LOADED = 5
RECENT_DOUBTS_SHOWN = 2

_HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:hours?|hrs?|h)\b", re.IGNORECASE)
_MINUTES_RE = re.compile(r"(\d+)\s*(?:minutes?|mins?|m)\b", re.IGNORECASE)


def session_contribution(session: SessionRecord) -> float:
    """A completed session counts 1, anything else counts progress/100."""
    if session.completed:
        return 1.0
    return max(0, session.progress) / 100


def compute_subject_progress(subject: str, sessions: Iterable[SessionRecord]) -> SubjectProgress:
    total = 0
    done = 0.0
    for s in sessions:
        if s.subject != subject:
            continue
        total += 1
        done += session_contribution(s)

    progress = round(100 * done / total) if total else 0
    return SubjectProgress(
        subject=subject,
        progress=progress,
        total_sessions=total,
        completed_sessions=round(done),
    )


def rank_subject_progress(items: Iterable[SubjectProgress], limit: int = SUBJECT_PROGRESS_LIMIT) -> list[SubjectProgress]:
    return sorted(items, key=lambda p: p.progress, reverse=True)[:limit]


def aggregate_subject_progress(
    sessions: Iterable[SessionRecord],
    limit: int = SUBJECT_PROGRESS_LIMIT,
) -> list[SubjectProgress]:
    sessions = list(sessions)
    subjects: list[str] = []
    for s in sessions:
        if s.subject not in subjects:
            subjects.append(s.subject)
    return rank_subject_progress((compute_subject_progress(sub, sessions) for sub in subjects), limit)


def _start_minutes(start_time: str) -> int:
    parts = (start_time or "").split(":")
    try:
        hours = int(parts[0])
        minutes = int(parts[1]) if len(parts) > 1 else 0
    except (ValueError, IndexError):
        return 0
    return hours * 60 + minutes


def schedule_key(session: SessionRecord) -> tuple[date, int]:
    return session.date, _start_minutes(session.start_time)


def is_upcoming(session: SessionRecord, today: date) -> bool:
    return not session.completed and session.date >= today


def select_upcoming(
    sessions: Iterable[SessionRecord],
    today: date,
    limit: int = UPCOMING_LIMIT,
) -> list[SessionRecord]:
    upcoming = [s for s in sessions if is_upcoming(s, today)]
    return sorted(upcoming, key=schedule_key)[:limit]


def parse_duration_minutes(duration: str, default: int = 60) -> int:
    """
    "1.5 hours" -> 90, "2 hours 15 minutes" -> 135, "45 min" -> 45.
    Unparseable input falls back to `default`.
    """
    text = duration or ""
    total = 0.0
    m = _HOURS_RE.search(text)
    if m:
        total += float(m.group(1)) * 60
    m = _MINUTES_RE.search(text)
    if m:
        total += int(m.group(1))
    return int(round(total)) or default

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from exam_api.services.best_attempt import best_by_paper, best_of, is_completed

T0 = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)


@dataclass
class FakeAttempt:
    paper_id: int
    total_points_earned: float
    percentage: int
    submitted_at: datetime | None = T0
    status: str = "submitted"
    name: str = ""


def test_more_points_wins() -> None:
    low = FakeAttempt(1, 5, 50, name="low")
    high = FakeAttempt(1, 8, 40, name="high")
    assert best_of([low, high]).name == "high"


def test_percentage_breaks_point_tie() -> None:
    a = FakeAttempt(1, 5, 50, name="a")
    b = FakeAttempt(1, 5, 60, name="b")
    assert best_of([a, b]).name == "b"


def test_later_submission_breaks_full_tie() -> None:
    earlier = FakeAttempt(1, 5, 50, T0, name="earlier")
    later = FakeAttempt(1, 5, 50, T0 + timedelta(minutes=5), name="later")
    assert best_of([later, earlier]).name == "later"
    assert best_of([earlier, later]).name == "later"


def test_naive_and_aware_timestamps_compare() -> None:
    naive = FakeAttempt(1, 5, 50, datetime(2025, 3, 1, 11, 0), name="naive")
    aware = FakeAttempt(1, 5, 50, T0, name="aware")
    assert best_of([aware, naive]).name == "naive"


def test_in_progress_attempts_are_skipped() -> None:
    running = FakeAttempt(1, 99, 100, None, status="in_progress")
    assert not is_completed(running)
    assert best_of([running]) is None

    done = FakeAttempt(1, 1, 10, name="done")
    assert best_of([running, done]).name == "done"


def test_best_by_paper_groups_independently() -> None:
    attempts = [
        FakeAttempt(1, 5, 50, name="p1-a"),
        FakeAttempt(1, 7, 70, name="p1-b"),
        FakeAttempt(2, 3, 30, name="p2"),
        FakeAttempt(3, 9, 90, None, status="in_progress"),
    ]
    best = best_by_paper(attempts)
    assert set(best) == {1, 2}
    assert best[1].name == "p1-b"
    assert best[2].name == "p2"

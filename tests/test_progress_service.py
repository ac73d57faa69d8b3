import pytest

from exam_api.models.db import ProgressState
from exam_api.services import progress_service
from exam_api.services.progress_service import apply_high_water_mark, compute_raw_progress


def test_below_gate_only_base_counts() -> None:
    breakdown = compute_raw_progress(3, 20, 40, 100)
    assert breakdown.base == pytest.approx(0.09)
    assert breakdown.extra == 0.0
    assert breakdown.raw_progress == pytest.approx(0.09)


def test_at_gate_extra_tier_unlocks() -> None:
    breakdown = compute_raw_progress(10, 20, 50, 100)
    assert breakdown.base == pytest.approx(0.30)
    assert breakdown.completion_ratio == pytest.approx(0.5)
    assert breakdown.points_ratio == pytest.approx(0.5)
    assert breakdown.extra == pytest.approx(0.35)
    assert breakdown.raw_progress == pytest.approx(0.65)


def test_everything_done_is_full_progress() -> None:
    assert compute_raw_progress(12, 12, 300, 300).raw_progress == pytest.approx(1.0)


def test_ratios_are_clamped_and_guarded() -> None:
    over = compute_raw_progress(15, 10, 500, 100)
    assert over.completion_ratio == 1.0
    assert over.points_ratio == 1.0
    assert over.raw_progress == pytest.approx(1.0)

    empty = compute_raw_progress(0, 0, 0, 0)
    assert empty.completion_ratio == 0.0
    assert empty.points_ratio == 0.0
    assert empty.raw_progress == 0.0


def test_apply_high_water_mark() -> None:
    assert apply_high_water_mark(0.42, 0.09) == 0.42
    assert apply_high_water_mark(0.42, 0.5) == 0.5
    assert apply_high_water_mark(None, 0.2) == 0.2


def test_reported_progress_never_drops(db, make_student) -> None:
    student = make_student()
    assert progress_service.raise_high_water_mark(db, student.id, 0.42) is True
    assert progress_service.raise_high_water_mark(db, student.id, 0.10) is False

    result = progress_service.get_progress(db, student.id)
    assert result["progress"] == 0.42
    assert result["meta"]["rawProgress"] == 0.0
    assert progress_service.get_high_water_mark(db, student.id) == 0.42


def test_progress_counts_practice_completions(
    db, make_student, make_paper, complete_attempt
) -> None:
    student = make_student()
    free = make_paper(title="Free")
    practice = make_paper(payment_type="practice", title="Practice")
    make_paper(title="Untouched")

    complete_attempt(student, free, {0: [0]})
    complete_attempt(student, practice, {0: [0]})

    result = progress_service.get_progress(db, student.id)
    meta = result["meta"]
    assert meta["completedCountAll"] == 2
    assert meta["totalAvailableAll"] == 3
    assert meta["coinsPoints"] == 5.0
    assert meta["maxCoinsPossible"] == 20.0
    assert meta["extra"] == 0.0
    assert result["progress"] == 0.06
    assert progress_service.get_high_water_mark(db, student.id) == pytest.approx(0.06)


@pytest.mark.parametrize(
    ("other_value", "value", "raised", "stored"),
    [(0.5, 0.2, False, 0.5), (0.1, 0.3, True, 0.3)],
)
def test_first_write_survives_concurrent_insert(
    session_factory, make_student, other_value, value, raised, stored
) -> None:
    student = make_student()
    first = session_factory()
    second = session_factory()
    try:
        # Both requests see no stored mark yet.
        assert first.get(ProgressState, student.id) is None

        second.add(ProgressState(student_id=student.id, high_water_mark=other_value))
        second.commit()

        assert progress_service.raise_high_water_mark(first, student.id, value) is raised
        assert progress_service.get_high_water_mark(first, student.id) == stored
    finally:
        first.close()
        second.close()

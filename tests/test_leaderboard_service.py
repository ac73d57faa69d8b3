from datetime import datetime, timedelta, timezone

from exam_api.services import leaderboard_service
from exam_api.services.leaderboard_service import Standing, clamp_limit, composite_score, dense_rank

T0 = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)


def test_dense_rank_ties_share_rank_without_gaps() -> None:
    standings = [
        Standing(student_id=3, total_coins=80, total_finished_exams=2, last_submitted_at=T0),
        Standing(student_id=2, total_coins=100, total_finished_exams=2, last_submitted_at=T0),
        Standing(student_id=1, total_coins=100, total_finished_exams=2, last_submitted_at=T0),
    ]
    ranked = dense_rank(standings)
    assert [s.student_id for s in ranked] == [1, 2, 3]
    assert [s.rank for s in ranked] == [1, 1, 2]


def test_coins_outweigh_exam_count() -> None:
    assert composite_score(101, 1, T0) > composite_score(100, 5, T0)


def test_exam_count_outweighs_recency() -> None:
    assert composite_score(100, 3, T0) > composite_score(100, 2, T0 + timedelta(days=365))


def test_later_submission_ranks_higher_on_equal_totals() -> None:
    ranked = dense_rank([
        Standing(student_id=1, total_coins=50, total_finished_exams=1, last_submitted_at=T0),
        Standing(
            student_id=2,
            total_coins=50,
            total_finished_exams=1,
            last_submitted_at=T0 + timedelta(seconds=30),
        ),
    ])
    assert [(s.student_id, s.rank) for s in ranked] == [(2, 1), (1, 2)]


def test_clamp_limit() -> None:
    assert clamp_limit(None) == 50
    assert clamp_limit(0) == 1
    assert clamp_limit(-5) == 1
    assert clamp_limit(10) == 10
    assert clamp_limit(5000) == 200


def test_leaderboard_from_attempts(db, make_student, make_paper, complete_attempt) -> None:
    leader = make_student("Leader")
    runner_up = make_student()
    practice_only = make_student("Practice Fan")
    free = make_paper(title="Free")
    practice = make_paper(payment_type="practice", title="Practice")

    complete_attempt(leader, free, {0: [0], 1: [0]})
    complete_attempt(runner_up, free, {0: [0]})
    complete_attempt(practice_only, practice, {0: [0], 1: [0]})

    board = leaderboard_service.get_leaderboard(db, runner_up.id, limit=1)
    assert [row["name"] for row in board["top"]] == ["Leader"]
    assert board["top"][0]["totalCoins"] == 10.0
    assert board["top"][0]["rank"] == 1

    me = board["me"]
    assert me["studentId"] == runner_up.id
    assert me["rank"] == 2
    assert me["name"] == runner_up.username
    assert me["totalFinishedExams"] == 1


def test_student_without_coin_attempts_is_unranked(
    db, make_student, make_paper, complete_attempt
) -> None:
    student = make_student("Practice Fan")
    practice = make_paper(payment_type="practice")
    complete_attempt(student, practice, {0: [0]})

    board = leaderboard_service.get_leaderboard(db, student.id)
    assert board["top"] == []
    assert board["me"] == {
        "studentId": student.id,
        "name": "Practice Fan",
        "totalCoins": 0,
        "totalFinishedExams": 0,
        "lastSubmittedAt": None,
        "rank": 0,
    }


def test_student_inside_top_is_named_once(db, make_student, make_paper, complete_attempt) -> None:
    leader = make_student("Leader")
    runner_up = make_student("Runner Up")
    free = make_paper(title="Free")

    complete_attempt(leader, free, {0: [0], 1: [0]})
    complete_attempt(runner_up, free, {0: [0]})

    board = leaderboard_service.get_leaderboard(db, runner_up.id, limit=5)
    assert [row["studentId"] for row in board["top"]] == [leader.id, runner_up.id]
    assert [row["name"] for row in board["top"]] == ["Leader", "Runner Up"]
    assert board["me"] == board["top"][1]

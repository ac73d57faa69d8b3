"""Serialization helpers for attempt payloads."""
from exam_api.models.db.attempt import Attempt, AttemptAnswer
from exam_api.models.db.paper import Paper, Question
from exam_api.utils.time_utils import isoformat_utc


def serialize_attempt(attempt: Attempt) -> dict[str, object]:
    """Serialize attempt row for API responses."""
    return {
        "id": attempt.id,
        "paperId": attempt.paper_id,
        "studentId": attempt.student_id,
        "attemptNo": attempt.attempt_no,
        "status": attempt.status,
        "paymentType": attempt.payment_type,
        "questionCount": attempt.question_count,
        "answersPerQuestion": attempt.answers_per_question,
        "timeMinutes": attempt.time_minutes,
        "totalPossiblePoints": attempt.total_possible_points,
        "totalPointsEarned": attempt.total_points_earned,
        "correctCount": attempt.correct_count,
        "wrongCount": attempt.wrong_count,
        "percentage": attempt.percentage,
        "startedAt": isoformat_utc(attempt.started_at),
        "submittedAt": isoformat_utc(attempt.submitted_at),
    }


def serialize_answer(answer: AttemptAnswer) -> dict[str, object]:
    """Serialize saved answer for API responses."""
    return {
        "id": answer.id,
        "attemptId": answer.attempt_id,
        "paperId": answer.paper_id,
        "questionId": answer.question_id,
        "questionNumber": answer.question_number,
        "selectedIndexes": answer.selected_indexes,
        "isCorrect": answer.is_correct,
        "earnedPoints": answer.earned_points,
        "answeredAt": isoformat_utc(answer.answered_at),
    }


def serialize_question_sheet(
    question: Question, answer: AttemptAnswer | None
) -> dict[str, object]:
    """Question as shown while the attempt runs (never includes correct answers)."""
    return {
        "id": question.id,
        "questionNumber": question.question_number,
        "lessonName": question.lesson_name,
        "question": question.question,
        "answers": question.answers,
        "imageUrl": question.image_url,
        "point": question.point,
        "selectedIndexes": answer.selected_indexes if answer else [],
    }


def serialize_review_row(question: Question, answer: AttemptAnswer) -> dict[str, object]:
    """Graded answer with the correct solution, for review screens."""
    answers = question.answers
    selected = answer.selected_indexes
    return {
        "id": answer.id,
        "questionId": question.id,
        "questionNumber": question.question_number,
        "question": question.question,
        "answers": answers,
        "selectedIndexes": selected,
        "selectedAnswers": [answers[i] for i in selected if 0 <= i < len(answers)],
        "correctAnswers": question.correct_answers,
        "isCorrect": answer.is_correct,
        "point": question.point,
        "earnedPoints": answer.earned_points,
        "explanationText": question.explanation_text,
        "explanationVideoUrl": question.explanation_video_url,
        "imageUrl": question.image_url,
        "lessonName": question.lesson_name,
    }


def serialize_paper_brief(paper: Paper) -> dict[str, object]:
    """Paper fields a student needs when starting an attempt."""
    return {
        "id": paper.id,
        "paperTitle": paper.paper_title,
        "paymentType": paper.payment_type,
        "timeMinutes": paper.time_minutes,
        "questionCount": paper.question_count,
        "attemptsAllowed": paper.attempts_allowed,
    }

"""
Scoring of quiz submissions.

`evaluate_submission` is a pure function of the answer key and the
submission: it never reads or writes storage.
"""
from typing import Dict, List, Optional, Set

from src.domain.models.api_models import EvaluatedAnswer, QuizResult, QuizSubmission
from src.domain.models.db_models import Answer, Question
from src.services.answer_key_service import AnswerKey
from src.utils.rounding import score_percentage
from qh_utils.logger_utils import logger


def evaluate_submission(key: Optional[AnswerKey], submission: QuizSubmission) -> Optional[QuizResult]:
    """
    Score a submission against a resolved answer key.

    Items that cannot be resolved (unknown question, unknown answer, an
    answer from another question, no correct answer on record, or a repeat
    of an already scored question) are kept in the result as incorrect
    with zero points.

    The maximum score covers every question of the quiz, answered or not.

    :return: None when the quiz does not exist or has no questions.
    """
    if key is None or not key.questions:
        return None

    questions: Dict[str, Question] = {q.id: q for q in key.questions}
    answers: Dict[str, Answer] = {a.id: a for a in key.answers}
    seen: Set[str] = set()

    evaluated: List[EvaluatedAnswer] = []
    score = 0
    correct_count = 0

    for item in submission.answers:
        question = questions.get(item.question_id)
        selected = answers.get(item.answer_id)
        correct_id = key.correct_answer_by_question.get(item.question_id, "")

        resolvable = (
            question is not None
            and selected is not None
            and selected.question_id == item.question_id
            and bool(correct_id)
            and item.question_id not in seen
        )
        if not resolvable:
            logger.debug(
                "Unresolvable submission item scored as incorrect",
                extra={
                    "quiz_id": key.quiz.id,
                    "question_id": item.question_id,
                    "answer_id": item.answer_id,
                    "component": "evaluation_service",
                },
            )
            evaluated.append(
                EvaluatedAnswer(
                    question_id=item.question_id,
                    selected_answer_id=item.answer_id,
                    correct_answer_id=correct_id,
                )
            )
            continue

        seen.add(item.question_id)
        is_correct = selected.is_correct
        points = question.points if is_correct else 0
        score += points
        if is_correct:
            correct_count += 1

        evaluated.append(
            EvaluatedAnswer(
                question_id=item.question_id,
                selected_answer_id=item.answer_id,
                correct_answer_id=correct_id,
                is_correct=is_correct,
                points=points,
            )
        )

    max_score = sum(q.points for q in key.questions)

    return QuizResult(
        quiz_id=key.quiz.id,
        score=score,
        max_score=max_score,
        percentage=float(score_percentage(score, max_score, places=2)),
        correct_answers=correct_count,
        total_questions=len(key.questions),
        answers=evaluated,
    )

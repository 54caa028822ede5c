from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.domain.models.api_models import (
    KeyedAnswer,
    KeyedQuestion,
    TakingAnswer,
    TakingQuestion,
    TakingQuiz,
)
from src.domain.models.db_models import Answer, Question, Quiz
from src.domain.repositories import IQuizRepository
from qh_utils.logger_utils import logger


@dataclass(frozen=True)
class AnswerKey:
    """Everything needed to score a quiz, read in one pass."""
    quiz: Quiz
    questions: List[Question]
    answers: List[Answer]
    correct_answer_by_question: Dict[str, str] = field(default_factory=dict)

    def answers_for(self, question_id: str) -> List[Answer]:
        return [a for a in self.answers if a.question_id == question_id]


def build_correct_answer_map(questions: List[Question], answers: List[Answer]) -> Dict[str, str]:
    """
    Map each question to the id of its correct answer.

    Stored data is trusted rather than validated: a question with no flagged
    answer is left out of the map, and a question with several flagged
    answers resolves to the one with the lowest display order (the first
    one read when orders tie).
    """
    flagged: Dict[str, List[Answer]] = {q.id: [] for q in questions}
    for answer in answers:
        if answer.is_correct and answer.question_id in flagged:
            flagged[answer.question_id].append(answer)

    correct: Dict[str, str] = {}
    for question_id, candidates in flagged.items():
        if not candidates:
            logger.warning(
                "Question has no correct answer",
                extra={"question_id": question_id, "component": "answer_key_service"},
            )
            continue
        if len(candidates) > 1:
            logger.warning(
                "Question has several correct answers; using the lowest order",
                extra={
                    "question_id": question_id,
                    "candidates": len(candidates),
                    "component": "answer_key_service",
                },
            )
        correct[question_id] = min(candidates, key=lambda a: a.order).id
    return correct


class AnswerKeyService:
    """Loads quizzes with their answer key, or without it for quiz-taking."""

    def __init__(self, quiz_repository: IQuizRepository):
        self.quiz_repository = quiz_repository

    def resolve_key(self, quiz_id: str) -> Optional[AnswerKey]:
        """
        Load a quiz's questions, answers and correct-answer map.

        :return: None when the quiz does not exist. An existing quiz with no
                 questions yields a key with empty lists.
        """
        quiz = self.quiz_repository.get_by_id(quiz_id)
        if quiz is None:
            return None

        questions = self.quiz_repository.get_questions(quiz_id)
        answers = self.quiz_repository.get_answers_for_questions([q.id for q in questions])

        return AnswerKey(
            quiz=quiz,
            questions=questions,
            answers=answers,
            correct_answer_by_question=build_correct_answer_map(questions, answers),
        )

    def get_quiz_for_taking(self, quiz_id: str) -> Optional[TakingQuiz]:
        """The quiz as a learner sees it before submitting: no correctness flags."""
        key = self.resolve_key(quiz_id)
        if key is None:
            return None
        return TakingQuiz(
            id=key.quiz.id,
            title=key.quiz.title,
            description=key.quiz.description,
            questions=strip_key(key),
        )


def strip_key(key: AnswerKey) -> List[TakingQuestion]:
    return [
        TakingQuestion(
            id=q.id,
            text=q.text,
            order=q.order,
            points=q.points,
            answers=[TakingAnswer(id=a.id, text=a.text, order=a.order) for a in key.answers_for(q.id)],
        )
        for q in key.questions
    ]


def keyed_questions(key: AnswerKey) -> List[KeyedQuestion]:
    return [
        KeyedQuestion(
            id=q.id,
            text=q.text,
            order=q.order,
            points=q.points,
            answers=[
                KeyedAnswer(id=a.id, text=a.text, order=a.order, is_correct=a.is_correct)
                for a in key.answers_for(q.id)
            ],
        )
        for q in key.questions
    ]

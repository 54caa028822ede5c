import os
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

import pytest

# Required environment variables must exist before any src import reads settings.
os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ.setdefault('MONGO_URI', 'mongodb://localhost:27017/test')
os.environ.setdefault('FLASK_ENV', 'testing')

from src.domain.errors import StorageError  # noqa: E402
from src.domain.filters import QuizFilter  # noqa: E402
from src.domain.models.db_models import Answer, Question, Quiz, QuizAttempt  # noqa: E402
from src.domain.repositories import AttemptAggregate, IAttemptRepository, IQuizRepository  # noqa: E402
from src.services.registry import build_services  # noqa: E402

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


class InMemoryQuizRepository(IQuizRepository):
    """Dict-backed quiz store used in place of MongoDB."""

    def __init__(self):
        self.quizzes: Dict[str, Quiz] = {}
        self.questions: Dict[str, Question] = {}
        self.answers: Dict[str, Answer] = {}
        self.reads = 0

    # --- seeding helpers ---

    def add_quiz(self, quiz_id: str, owner: str = "owner-1", is_public: bool = True,
                 minutes: int = 0, title: Optional[str] = None, **fields) -> Quiz:
        quiz = Quiz(
            _id=quiz_id,
            title=title or f"Quiz {quiz_id}",
            user_id=owner,
            is_public=is_public,
            created_at=BASE_TIME + timedelta(minutes=minutes),
            updated_at=BASE_TIME + timedelta(minutes=minutes),
            **fields,
        )
        self.quizzes[quiz_id] = quiz
        return quiz

    def add_question(self, quiz_id: str, question_id: str, order: int, points: int = 1,
                     answers: Iterable = ()) -> Question:
        """`answers` is an iterable of (answer_id, is_correct) or (answer_id, is_correct, order)."""
        question = Question(_id=question_id, quiz_id=quiz_id, text=f"Question {question_id}",
                            order=order, points=points)
        self.questions[question_id] = question
        for index, entry in enumerate(answers):
            answer_id, is_correct = entry[0], entry[1]
            answer_order = entry[2] if len(entry) > 2 else index
            self.answers[answer_id] = Answer(_id=answer_id, question_id=question_id,
                                             text=f"Answer {answer_id}", is_correct=is_correct,
                                             order=answer_order)
        return question

    # --- IQuizRepository ---

    def get_by_id(self, quiz_id: str) -> Optional[Quiz]:
        self.reads += 1
        return self.quizzes.get(quiz_id)

    def get_questions(self, quiz_id: str) -> List[Question]:
        return sorted((q for q in self.questions.values() if q.quiz_id == quiz_id), key=lambda q: q.order)

    def get_answers_by_question(self, question_id: str) -> List[Answer]:
        return sorted((a for a in self.answers.values() if a.question_id == question_id), key=lambda a: a.order)

    def get_answers_for_questions(self, question_ids: Iterable[str]) -> List[Answer]:
        ids = set(question_ids)
        return sorted((a for a in self.answers.values() if a.question_id in ids), key=lambda a: a.order)

    def find(self, quiz_filter: QuizFilter, skip: int = 0, limit: Optional[int] = None) -> List[Quiz]:
        matching = [q for q in self.quizzes.values() if quiz_filter.matches(q)]
        matching.sort(key=lambda q: q.id)
        matching.sort(key=lambda q: q.created_at, reverse=True)
        end = None if limit is None else skip + limit
        return matching[skip:end]

    def count(self, quiz_filter: QuizFilter) -> int:
        return sum(1 for q in self.quizzes.values() if quiz_filter.matches(q))


class InMemoryAttemptRepository(IAttemptRepository):
    """List-backed attempt log; aggregates the way the Mongo pipeline does."""

    def __init__(self, quiz_repository: Optional[InMemoryQuizRepository] = None):
        self.quiz_repository = quiz_repository
        self.attempts: List[QuizAttempt] = []
        self.aggregate_calls = 0

    def add(self, quiz_id: str, user_id: Optional[str], percentage: int,
            score: Optional[int] = None, max_score: int = 100, minutes: int = 0) -> QuizAttempt:
        attempt = QuizAttempt(
            _id=f"attempt-{len(self.attempts) + 1}",
            quiz_id=quiz_id,
            user_id=user_id,
            score=percentage if score is None else score,
            max_score=max_score,
            percentage=percentage,
            completed_at=BASE_TIME + timedelta(minutes=minutes),
        )
        self.attempts.append(attempt)
        return attempt

    def create(self, attempt: QuizAttempt) -> None:
        if self.quiz_repository is not None and attempt.quiz_id not in self.quiz_repository.quizzes:
            raise StorageError(f"Quiz {attempt.quiz_id} does not exist.")
        self.attempts.append(attempt)

    def list_by_quiz(self, quiz_id: str) -> List[QuizAttempt]:
        return sorted((a for a in self.attempts if a.quiz_id == quiz_id),
                      key=lambda a: a.completed_at, reverse=True)

    def list_by_user(self, user_id: str) -> List[QuizAttempt]:
        return sorted((a for a in self.attempts if a.user_id == user_id),
                      key=lambda a: a.completed_at, reverse=True)

    def get_best_for_user(self, quiz_id: str, user_id: str) -> Optional[QuizAttempt]:
        mine = [a for a in self.attempts if a.quiz_id == quiz_id and a.user_id == user_id]
        if not mine:
            return None
        return max(mine, key=lambda a: (a.score, a.completed_at))

    def aggregate_stats(self, quiz_ids: Iterable[str]) -> List[AttemptAggregate]:
        self.aggregate_calls += 1
        ids = set(quiz_ids)
        grouped: Dict[str, List[QuizAttempt]] = {}
        for attempt in self.attempts:
            if attempt.quiz_id in ids:
                grouped.setdefault(attempt.quiz_id, []).append(attempt)

        rows = []
        for quiz_id, attempts in grouped.items():
            completers = {a.user_id if a.user_id is not None else f"anonymous:{a.id}" for a in attempts}
            rows.append(AttemptAggregate(
                quiz_id=quiz_id,
                completion_count=len(completers),
                average_percentage=sum(a.percentage for a in attempts) / len(attempts),
            ))
        return rows


@pytest.fixture
def quiz_repo():
    return InMemoryQuizRepository()


@pytest.fixture
def attempt_repo(quiz_repo):
    return InMemoryAttemptRepository(quiz_repo)


@pytest.fixture
def services(quiz_repo, attempt_repo):
    return build_services(quiz_repo, attempt_repo)


@pytest.fixture
def app(services):
    """Create and configure a new app instance backed by in-memory repositories."""
    from app import create_app
    app = create_app(services=services)
    app.config.update({
        "TESTING": True,
        "SECRET_KEY": "test-secret-key",
    })
    yield app


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def two_question_quiz(quiz_repo):
    """A public quiz with two ten-point questions; q1's answer a1 and q2's answer b1 are correct."""
    quiz = quiz_repo.add_quiz("quiz-1")
    quiz_repo.add_question("quiz-1", "q1", order=1, points=10,
                           answers=[("a1", True), ("a2", False)])
    quiz_repo.add_question("quiz-1", "q2", order=2, points=10,
                           answers=[("b1", True), ("b2", False)])
    return quiz

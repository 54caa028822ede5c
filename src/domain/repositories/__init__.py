from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..filters import QuizFilter
from ..models.db_models import Answer, Question, Quiz, QuizAttempt


@dataclass(frozen=True)
class AttemptAggregate:
    """Grouped attempt figures for one quiz, as read from the store."""
    quiz_id: str
    completion_count: int
    average_percentage: Optional[float]


class IQuizRepository(ABC):
    """Read-only access to quizzes, their questions and answers."""
    @abstractmethod
    def get_by_id(self, quiz_id: str) -> Optional[Quiz]:
        pass

    @abstractmethod
    def get_questions(self, quiz_id: str) -> List[Question]:
        """Questions of a quiz ordered by `order` ascending."""
        pass

    @abstractmethod
    def get_answers_by_question(self, question_id: str) -> List[Answer]:
        """Answers of a question ordered by `order` ascending."""
        pass

    @abstractmethod
    def get_answers_for_questions(self, question_ids: Iterable[str]) -> List[Answer]:
        """Answers of several questions in one read, ordered by `order` ascending."""
        pass

    @abstractmethod
    def find(self, quiz_filter: QuizFilter, skip: int = 0, limit: Optional[int] = None) -> List[Quiz]:
        """Quizzes matching the filter, newest first."""
        pass

    @abstractmethod
    def count(self, quiz_filter: QuizFilter) -> int:
        pass


class IAttemptRepository(ABC):
    """Append-only access to quiz attempts."""
    @abstractmethod
    def create(self, attempt: QuizAttempt) -> None:
        pass

    @abstractmethod
    def list_by_quiz(self, quiz_id: str) -> List[QuizAttempt]:
        pass

    @abstractmethod
    def list_by_user(self, user_id: str) -> List[QuizAttempt]:
        pass

    @abstractmethod
    def get_best_for_user(self, quiz_id: str, user_id: str) -> Optional[QuizAttempt]:
        pass

    @abstractmethod
    def aggregate_stats(self, quiz_ids: Iterable[str]) -> List[AttemptAggregate]:
        """
        One grouped read over the attempts of the given quizzes.

        Quizzes without attempts are simply absent from the result.
        """
        pass

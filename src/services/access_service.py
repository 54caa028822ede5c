from enum import Enum
from typing import Optional, Tuple

from src.domain.models.db_models import Quiz
from src.domain.repositories import IQuizRepository


class AccessDecision(str, Enum):
    ALLOWED = "ALLOWED"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"


def can_access(quiz: Optional[Quiz], user_id: Optional[str] = None) -> bool:
    """
    Public quizzes are open to everyone; private ones only to their owner.

    A missing quiz is simply inaccessible. Callers that need to tell
    "not found" from "forbidden" check existence first.
    """
    if quiz is None:
        return False
    if quiz.is_public:
        return True
    return user_id is not None and user_id == quiz.user_id


class AccessService:
    def __init__(self, quiz_repository: IQuizRepository):
        self.quiz_repository = quiz_repository

    def can_access_quiz(self, quiz_id: str, user_id: Optional[str] = None) -> bool:
        return can_access(self.quiz_repository.get_by_id(quiz_id), user_id)

    def check_quiz(self, quiz_id: str, user_id: Optional[str] = None) -> Tuple[Optional[Quiz], AccessDecision]:
        """
        Load a quiz and decide whether `user_id` may use it.

        Existence is checked before visibility, so a missing quiz is
        NOT_FOUND for everyone. The quiz is returned only when ALLOWED.
        """
        quiz = self.quiz_repository.get_by_id(quiz_id)
        if quiz is None:
            return None, AccessDecision.NOT_FOUND
        if not can_access(quiz, user_id):
            return None, AccessDecision.FORBIDDEN
        return quiz, AccessDecision.ALLOWED

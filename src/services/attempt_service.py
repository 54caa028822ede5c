from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from src.domain.models.db_models import QuizAttempt
from src.domain.repositories import IAttemptRepository
from src.utils.rounding import score_percentage
from qh_utils.logger_utils import logger


def whole_percentage(score: int, max_score: int) -> int:
    """The whole-number percentage stored on an attempt."""
    return int(score_percentage(score, max_score, places=0))


class AttemptService:
    """Records attempts and reads the attempt history."""

    def __init__(self, attempt_repository: IAttemptRepository):
        self.attempt_repository = attempt_repository

    def record(
        self,
        quiz_id: str,
        user_id: Optional[str],
        score: int,
        max_score: int,
        percentage: int,
    ) -> str:
        """
        Append one attempt and return its ID.

        Every call creates a new row; repeated attempts by the same user
        are all kept. Storage failures propagate to the caller.

        :param user_id: None for anonymous attempts.
        :param percentage: Whole-number percentage, 0-100.
        """
        if isinstance(percentage, bool) or not isinstance(percentage, int) or not 0 <= percentage <= 100:
            raise ValueError(f"percentage must be a whole number between 0 and 100, got {percentage!r}")

        attempt = QuizAttempt(
            _id=str(uuid.uuid4()),
            quiz_id=quiz_id,
            user_id=user_id,
            score=score,
            max_score=max_score,
            percentage=percentage,
            completed_at=datetime.now(timezone.utc),
        )
        self.attempt_repository.create(attempt)

        logger.info(
            "Recorded quiz attempt",
            extra={
                "attempt_id": attempt.id,
                "quiz_id": quiz_id,
                "anonymous": user_id is None,
                "component": "attempt_service",
            },
        )
        return attempt.id

    def list_for_quiz(self, quiz_id: str) -> List[QuizAttempt]:
        return self.attempt_repository.list_by_quiz(quiz_id)

    def list_for_user(self, user_id: str) -> List[QuizAttempt]:
        return self.attempt_repository.list_by_user(user_id)

    def best_for_user(self, quiz_id: str, user_id: str) -> Optional[QuizAttempt]:
        return self.attempt_repository.get_best_for_user(quiz_id, user_id)

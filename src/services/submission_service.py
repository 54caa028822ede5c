from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.domain.errors import InvalidSubmissionError
from src.domain.models.api_models import QuizResult, QuizSubmission
from src.services.access_service import AccessDecision, AccessService
from src.services.answer_key_service import AnswerKeyService
from src.services.attempt_service import AttemptService, whole_percentage
from src.services.evaluation_service import evaluate_submission
from qh_utils.logger_utils import logger
from qh_utils.validation import ERROR_MESSAGES


class SubmissionStatus(str, Enum):
    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"


@dataclass(frozen=True)
class SubmissionOutcome:
    status: SubmissionStatus
    result: Optional[QuizResult] = None
    attempt_id: Optional[str] = None


class SubmissionService:
    """
    Runs a submission through the whole pipeline:
    access check, answer key, scoring, then (optionally) recording the attempt.
    """

    def __init__(
        self,
        access: AccessService,
        answer_keys: AnswerKeyService,
        attempts: AttemptService,
        record_attempts: bool = True,
    ):
        self.access = access
        self.answer_keys = answer_keys
        self.attempts = attempts
        self.record_attempts = record_attempts

    def submit(
        self,
        quiz_id: str,
        submission: QuizSubmission,
        user_id: Optional[str] = None,
    ) -> SubmissionOutcome:
        """
        Evaluate a submission for `quiz_id`.

        :raises InvalidSubmissionError: when the payload names another quiz.
        """
        if submission.quiz_id != quiz_id:
            raise InvalidSubmissionError(ERROR_MESSAGES["quiz_mismatch"])

        _, decision = self.access.check_quiz(quiz_id, user_id)
        if decision == AccessDecision.NOT_FOUND:
            logger.warning("Submission for unknown quiz", extra={"quiz_id": quiz_id, "component": "submission_service"})
            return SubmissionOutcome(SubmissionStatus.NOT_FOUND)

        if decision == AccessDecision.FORBIDDEN:
            logger.warning(
                "Submission for inaccessible quiz",
                extra={"quiz_id": quiz_id, "user_id": user_id, "component": "submission_service"},
            )
            return SubmissionOutcome(SubmissionStatus.FORBIDDEN)

        # The quiz may disappear between the access check and the key read.
        result = evaluate_submission(self.answer_keys.resolve_key(quiz_id), submission)
        if result is None:
            logger.warning("Quiz has nothing to evaluate", extra={"quiz_id": quiz_id, "component": "submission_service"})
            return SubmissionOutcome(SubmissionStatus.NOT_FOUND)

        logger.info(
            "Evaluated submission",
            extra={
                "quiz_id": quiz_id,
                "score": result.score,
                "max_score": result.max_score,
                "component": "submission_service",
            },
        )

        attempt_id = None
        if self.record_attempts:
            attempt_id = self.attempts.record(
                quiz_id,
                user_id,
                result.score,
                result.max_score,
                whole_percentage(result.score, result.max_score),
            )

        return SubmissionOutcome(SubmissionStatus.OK, result=result, attempt_id=attempt_id)

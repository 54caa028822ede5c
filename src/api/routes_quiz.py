from __future__ import annotations

from typing import Tuple, Union

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from src.domain.errors import InvalidSubmissionError
from src.domain.models.api_models import QuizDetail, QuizSubmission
from src.infrastructure.identity import current_user_id
from src.services.access_service import AccessDecision
from src.services.answer_key_service import keyed_questions, strip_key
from src.services.ranking_service import summarize
from src.services.registry import get_services
from src.services.submission_service import SubmissionStatus
from qh_utils.formatting import format_completion_count
from qh_utils.logger_utils import logger
from qh_utils.validation import ERROR_MESSAGES

quiz_bp = Blueprint('quiz_bp', __name__)

RouteResult = Union[Response, Tuple[Response, int]]

NOT_FOUND_BODY = {"error": "Quiz not found", "message": "The requested quiz does not exist"}
FORBIDDEN_BODY = {
    "error": "Access denied",
    "message": "This quiz is not available or you do not have permission to access it",
}


def _gate(quiz_id: str):
    """Load the quiz and check access. Returns (quiz, error_response)."""
    quiz, decision = get_services().access.check_quiz(quiz_id, current_user_id())
    if decision == AccessDecision.NOT_FOUND:
        logger.warning("Quiz not found", extra={"quiz_id": quiz_id, "route": request.endpoint})
        return None, (jsonify(NOT_FOUND_BODY), 404)
    if decision == AccessDecision.FORBIDDEN:
        logger.warning("Quiz access denied", extra={"quiz_id": quiz_id, "route": request.endpoint})
        return None, (jsonify(FORBIDDEN_BODY), 403)
    return quiz, None


@quiz_bp.route('/<string:quiz_id>', methods=['GET'])
def get_quiz(quiz_id: str) -> RouteResult:
    """Quiz detail with statistics. Only the owner sees which answers are correct."""
    try:
        quiz, error = _gate(quiz_id)
        if error:
            return error

        services = get_services()
        key = services.answer_keys.resolve_key(quiz_id)
        if key is None:
            return jsonify(NOT_FOUND_BODY), 404

        is_owner = current_user_id() == quiz.user_id
        detail = QuizDetail(
            **summarize(quiz, services.stats.stats_for(quiz_id)).model_dump(),
            questions=keyed_questions(key) if is_owner else strip_key(key),
        )
        return jsonify(detail.to_dict())
    except Exception:
        logger.exception("Failed to fetch quiz", extra={"quiz_id": quiz_id, "route": "get_quiz"})
        return jsonify({"error": "Failed to fetch quiz"}), 500


@quiz_bp.route('/<string:quiz_id>/take', methods=['GET'])
def take_quiz(quiz_id: str) -> RouteResult:
    """The quiz as presented for taking, without the answer key."""
    try:
        _, error = _gate(quiz_id)
        if error:
            return error

        quiz_data = get_services().answer_keys.get_quiz_for_taking(quiz_id)
        if quiz_data is None:
            return jsonify(NOT_FOUND_BODY), 404
        return jsonify(quiz_data.to_dict())
    except Exception:
        logger.exception("Failed to fetch quiz for taking", extra={"quiz_id": quiz_id, "route": "take_quiz"})
        return jsonify({"error": "Failed to fetch quiz"}), 500


@quiz_bp.route('/<string:quiz_id>/submit', methods=['POST'])
def submit_quiz(quiz_id: str) -> RouteResult:
    """Scores a submission and records the attempt."""
    # Existence and access are decided before the body is looked at.
    try:
        _, error = _gate(quiz_id)
    except Exception:
        logger.exception("Failed to submit quiz", extra={"quiz_id": quiz_id, "route": "submit_quiz"})
        return jsonify({"error": "Failed to submit quiz"}), 500
    if error:
        return error

    try:
        submission = QuizSubmission.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jsonify({"error": ERROR_MESSAGES["bad_submission"], "details": e.errors(include_url=False, include_context=False)}), 400

    try:
        outcome = get_services().submissions.submit(quiz_id, submission, user_id=current_user_id())
    except InvalidSubmissionError as e:
        return jsonify({"error": ERROR_MESSAGES["bad_submission"], "message": str(e)}), 400
    except Exception:
        logger.exception("Failed to submit quiz", extra={"quiz_id": quiz_id, "route": "submit_quiz"})
        return jsonify({"error": "Failed to submit quiz"}), 500

    if outcome.status == SubmissionStatus.NOT_FOUND:
        return jsonify(NOT_FOUND_BODY), 404
    if outcome.status == SubmissionStatus.FORBIDDEN:
        return jsonify(FORBIDDEN_BODY), 403
    return jsonify(outcome.result.to_dict())


@quiz_bp.route('/<string:quiz_id>/stats', methods=['GET'])
def quiz_stats(quiz_id: str) -> RouteResult:
    try:
        _, error = _gate(quiz_id)
        if error:
            return error

        stats = get_services().stats.stats_for(quiz_id)
        body = stats.to_dict()
        body["formattedCompletionCount"] = format_completion_count(stats.completion_count)
        return jsonify(body)
    except Exception:
        logger.exception("Failed to fetch quiz stats", extra={"quiz_id": quiz_id, "route": "quiz_stats"})
        return jsonify({"error": "Failed to fetch quiz stats"}), 500

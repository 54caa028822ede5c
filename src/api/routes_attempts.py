from typing import Tuple, Union

from flask import Blueprint, Response, jsonify
from flask_login import login_required

from src.domain.models.api_models import AttemptView
from src.infrastructure.identity import current_user_id
from src.services.registry import get_services
from qh_utils.logger_utils import logger

attempts_bp = Blueprint('attempts_bp', __name__)


@attempts_bp.route('/me', methods=['GET'])
@login_required
def my_attempts() -> Union[Response, Tuple[Response, int]]:
    """The signed-in user's attempts, newest first."""
    user_id = current_user_id()
    try:
        attempts = get_services().attempts.list_for_user(user_id)
    except Exception:
        logger.exception("Failed to fetch attempts", extra={"user_id": user_id, "route": "my_attempts"})
        return jsonify({"error": "Failed to fetch attempts"}), 500

    return jsonify([AttemptView(**a.model_dump()).to_dict() for a in attempts])


@attempts_bp.route('/quiz/<string:quiz_id>/best', methods=['GET'])
@login_required
def my_best_attempt(quiz_id: str) -> Union[Response, Tuple[Response, int]]:
    """The signed-in user's highest-scoring attempt at a quiz."""
    user_id = current_user_id()
    try:
        attempt = get_services().attempts.best_for_user(quiz_id, user_id)
    except Exception:
        logger.exception(
            "Failed to fetch best attempt",
            extra={"user_id": user_id, "quiz_id": quiz_id, "route": "my_best_attempt"},
        )
        return jsonify({"error": "Failed to fetch attempt"}), 500

    if attempt is None:
        return jsonify({"error": "No attempts found"}), 404
    return jsonify(AttemptView(**attempt.model_dump()).to_dict())


@attempts_bp.route('/quiz/<string:quiz_id>', methods=['GET'])
@login_required
def quiz_attempts(quiz_id: str) -> Union[Response, Tuple[Response, int]]:
    """All attempts at a quiz, newest first. Only the quiz owner may read them."""
    user_id = current_user_id()
    services = get_services()
    try:
        quiz = services.quiz_repository.get_by_id(quiz_id)
        if quiz is None:
            return jsonify({"error": "Quiz not found"}), 404
        if quiz.user_id != user_id:
            logger.warning(
                "Attempt history requested by non-owner",
                extra={"user_id": user_id, "quiz_id": quiz_id, "route": "quiz_attempts"},
            )
            return jsonify({"error": "Access denied"}), 403
        attempts = services.attempts.list_for_quiz(quiz_id)
    except Exception:
        logger.exception("Failed to fetch quiz attempts", extra={"quiz_id": quiz_id, "route": "quiz_attempts"})
        return jsonify({"error": "Failed to fetch attempts"}), 500

    return jsonify([AttemptView(**a.model_dump()).to_dict() for a in attempts])

from __future__ import annotations

from typing import Optional, Tuple, Union

from flask import Blueprint, Response, jsonify, request
from flask_login import login_required
from pydantic import ValidationError

from src.domain.filters import QuizFilter
from src.domain.models.api_models import ListingQuery
from src.infrastructure.identity import current_user_id
from src.services.registry import get_services
from qh_utils.logger_utils import logger
from qh_utils.validation import ERROR_MESSAGES, clean_query_args

listing_bp = Blueprint('listing_bp', __name__)

RouteResult = Union[Response, Tuple[Response, int]]


def _parse_query() -> Tuple[Optional[ListingQuery], Optional[Tuple[Response, int]]]:
    try:
        return ListingQuery.model_validate(clean_query_args(request.args)), None
    except ValidationError as e:
        return None, (jsonify({"error": ERROR_MESSAGES["bad_query"], "details": e.errors(include_url=False, include_context=False)}), 400)


def _list(quiz_filter: QuizFilter, query: ListingQuery) -> Response:
    page = get_services().ranking.list_quizzes(
        quiz_filter,
        sort_by=query.sort_by,
        page=query.page,
        limit=query.limit,
    )
    return jsonify(page.to_dict())


@listing_bp.route('/public-quizzes', methods=['GET'])
def public_quizzes() -> RouteResult:
    """Public quizzes, optionally searched, tag-filtered and ranked."""
    query, error = _parse_query()
    if error:
        return error

    quiz_filter = QuizFilter(
        is_public=True,
        search=query.search,
        tag_ids=tuple(query.tag_ids),
        exclude_owner_id=query.exclude_user_id,
    )
    try:
        return _list(quiz_filter, query)
    except Exception:
        logger.exception("Failed to fetch public quizzes", extra={"route": "public_quizzes"})
        return jsonify({"error": "Failed to fetch public quizzes"}), 500


@listing_bp.route('/user-quizzes', methods=['GET'])
@login_required
def user_quizzes() -> RouteResult:
    """The signed-in user's own quizzes, public and private."""
    query, error = _parse_query()
    if error:
        return error

    quiz_filter = QuizFilter(
        owner_id=current_user_id(),
        is_public=query.is_public,
        search=query.search,
        tag_ids=tuple(query.tag_ids),
    )
    try:
        return _list(quiz_filter, query)
    except Exception:
        logger.exception("Failed to fetch user quizzes", extra={"route": "user_quizzes"})
        return jsonify({"error": "Failed to fetch user quizzes"}), 500

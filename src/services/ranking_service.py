from __future__ import annotations

import math
from typing import Dict, List, Sequence, Tuple

from src.domain.filters import QuizFilter, SortKey
from src.domain.models.api_models import PaginatedQuizzes, Pagination, QuizStats, QuizSummary
from src.domain.models.db_models import Quiz
from src.domain.repositories import IQuizRepository
from src.services.stats_service import StatsService
from qh_utils.logger_utils import logger

RankedEntry = Tuple[Quiz, QuizStats]


def summarize(quiz: Quiz, stats: QuizStats) -> QuizSummary:
    return QuizSummary(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        user_id=quiz.user_id,
        is_public=quiz.is_public,
        tag_ids=quiz.tag_ids,
        created_at=quiz.created_at,
        updated_at=quiz.updated_at,
        stats=stats,
    )


def rank_by_popularity(entries: Sequence[RankedEntry]) -> List[RankedEntry]:
    """Most completions first; ties keep their incoming (newest first) order."""
    return sorted(entries, key=lambda entry: -entry[1].completion_count)


def rank_by_difficulty(entries: Sequence[RankedEntry]) -> List[RankedEntry]:
    """
    Lowest average score first, over quizzes someone has attempted.

    Ties keep their incoming (newest first) order.
    """
    attempted = [entry for entry in entries if entry[1].completion_count > 0]
    return sorted(attempted, key=lambda entry: entry[1].average_score)


def page_slice(items: Sequence, page: int, limit: int) -> list:
    offset = (page - 1) * limit
    return list(items[offset:offset + limit])


def build_pagination(total: int, page: int, limit: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))


class RankingService:
    """Paginated quiz listings ordered by recency, popularity or difficulty."""

    def __init__(self, quiz_repository: IQuizRepository, stats_service: StatsService):
        self.quiz_repository = quiz_repository
        self.stats_service = stats_service

    def list_quizzes(
        self,
        quiz_filter: QuizFilter,
        sort_by: SortKey = SortKey.LATEST,
        page: int = 1,
        limit: int = 10,
    ) -> PaginatedQuizzes:
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")

        logger.debug(
            "Listing quizzes",
            extra={"sort_by": sort_by.value, "page": page, "limit": limit, "component": "ranking_service"},
        )

        if sort_by == SortKey.LATEST:
            return self._list_latest(quiz_filter, page, limit)
        return self._list_by_aggregate(quiz_filter, sort_by, page, limit)

    def _list_latest(self, quiz_filter: QuizFilter, page: int, limit: int) -> PaginatedQuizzes:
        # Recency is a stored field, so the store paginates and stats are attached per page.
        total = self.quiz_repository.count(quiz_filter)
        quizzes = self.quiz_repository.find(quiz_filter, skip=(page - 1) * limit, limit=limit)
        stats = self.stats_service.stats_for_many(q.id for q in quizzes)

        return PaginatedQuizzes(
            data=[summarize(q, stats[q.id]) for q in quizzes],
            pagination=build_pagination(total, page, limit),
        )

    def _list_by_aggregate(
        self,
        quiz_filter: QuizFilter,
        sort_by: SortKey,
        page: int,
        limit: int,
    ) -> PaginatedQuizzes:
        # The sort key is derived from attempts, so every candidate is loaded,
        # ranked in memory, then sliced.
        quizzes = self.quiz_repository.find(quiz_filter)
        stats: Dict[str, QuizStats] = self.stats_service.stats_for_many(q.id for q in quizzes)
        entries = [(q, stats[q.id]) for q in quizzes]

        if sort_by == SortKey.POPULAR:
            ranked = rank_by_popularity(entries)
        else:
            ranked = rank_by_difficulty(entries)

        return PaginatedQuizzes(
            data=[summarize(q, s) for q, s in page_slice(ranked, page, limit)],
            pagination=build_pagination(len(ranked), page, limit),
        )

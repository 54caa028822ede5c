from typing import Dict, Iterable

from src.domain.models.api_models import QuizStats
from src.domain.repositories import IAttemptRepository
from src.utils.rounding import round_half_up


class StatsService:
    """
    Completion counts and average scores, recomputed from the attempt log
    on every read.

    completion_count counts each distinct signed-in user once and each
    anonymous attempt once. average_score is the mean stored percentage
    rounded to the nearest whole number. Both are 0 without attempts.
    """

    def __init__(self, attempt_repository: IAttemptRepository):
        self.attempt_repository = attempt_repository

    def stats_for(self, quiz_id: str) -> QuizStats:
        return self.stats_for_many([quiz_id])[quiz_id]

    def stats_for_many(self, quiz_ids: Iterable[str]) -> Dict[str, QuizStats]:
        """Stats for every requested quiz, zeroed where there are no attempts."""
        ids = list(dict.fromkeys(quiz_ids))
        if not ids:
            return {}

        stats = {quiz_id: QuizStats() for quiz_id in ids}
        for row in self.attempt_repository.aggregate_stats(ids):
            if row.quiz_id not in stats:
                continue
            average = row.average_percentage or 0
            stats[row.quiz_id] = QuizStats(
                completion_count=row.completion_count,
                average_score=int(round_half_up(average)),
            )
        return stats

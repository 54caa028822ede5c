"""Wires the quiz services to the repositories they read and write."""
from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from pymongo.database import Database

from src.domain.repositories import IAttemptRepository, IQuizRepository
from src.infrastructure.repositories import MongoAttemptRepository, MongoQuizRepository
from src.services.access_service import AccessService
from src.services.answer_key_service import AnswerKeyService
from src.services.attempt_service import AttemptService
from src.services.ranking_service import RankingService
from src.services.stats_service import StatsService
from src.services.submission_service import SubmissionService

EXTENSION_KEY = "quizhub"


@dataclass
class QuizServices:
    quiz_repository: IQuizRepository
    attempt_repository: IAttemptRepository
    answer_keys: AnswerKeyService
    access: AccessService
    attempts: AttemptService
    stats: StatsService
    ranking: RankingService
    submissions: SubmissionService


def build_services(
    quiz_repository: IQuizRepository,
    attempt_repository: IAttemptRepository,
    record_attempts: bool = True,
) -> QuizServices:
    answer_keys = AnswerKeyService(quiz_repository)
    access = AccessService(quiz_repository)
    attempts = AttemptService(attempt_repository)
    stats = StatsService(attempt_repository)
    return QuizServices(
        quiz_repository=quiz_repository,
        attempt_repository=attempt_repository,
        answer_keys=answer_keys,
        access=access,
        attempts=attempts,
        stats=stats,
        ranking=RankingService(quiz_repository, stats),
        submissions=SubmissionService(access, answer_keys, attempts, record_attempts=record_attempts),
    )


def build_mongo_services(db: Database, record_attempts: bool = True) -> QuizServices:
    return build_services(MongoQuizRepository(db), MongoAttemptRepository(db), record_attempts=record_attempts)


def get_services() -> QuizServices:
    """The services bound to the current Flask app."""
    return current_app.extensions[EXTENSION_KEY]

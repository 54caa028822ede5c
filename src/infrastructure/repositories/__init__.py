import re
from typing import Any, Dict, Iterable, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from src.domain.errors import StorageError
from src.domain.filters import QuizFilter
from src.domain.models.db_models import Answer, Question, Quiz, QuizAttempt
from src.domain.repositories import AttemptAggregate, IAttemptRepository, IQuizRepository
from qh_utils.logger_utils import logger


def quiz_filter_to_query(quiz_filter: QuizFilter) -> Dict[str, Any]:
    """Translate a QuizFilter into a MongoDB query document."""
    clauses: List[Dict[str, Any]] = []

    if quiz_filter.owner_id is not None:
        clauses.append({"user_id": quiz_filter.owner_id})
    if quiz_filter.exclude_owner_id is not None:
        clauses.append({"user_id": {"$ne": quiz_filter.exclude_owner_id}})
    if quiz_filter.is_public is not None:
        clauses.append({"is_public": quiz_filter.is_public})
    if quiz_filter.tag_ids:
        clauses.append({"tag_ids": {"$in": list(quiz_filter.tag_ids)}})

    term = quiz_filter.search_text
    if term is not None:
        pattern = {"$regex": re.escape(term), "$options": "i"}
        clauses.append({"$or": [{"title": pattern}, {"description": pattern}]})

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


class MongoQuizRepository(IQuizRepository):
    """MongoDB implementation of the quiz repository."""

    def __init__(self, db: Database):
        self.db = db
        self.quizzes = self.db.quizzes
        self.questions = self.db.questions
        self.answers = self.db.answers

    def get_by_id(self, quiz_id: str) -> Optional[Quiz]:
        quiz_data = self.quizzes.find_one({"_id": quiz_id})
        if not quiz_data:
            logger.debug(
                "MongoQuizRepository.get_by_id.missing",
                extra={"quiz_id": quiz_id},
            )
            return None
        return Quiz(**quiz_data)

    def get_questions(self, quiz_id: str) -> List[Question]:
        cursor = self.questions.find({"quiz_id": quiz_id}).sort("order", ASCENDING)
        return [Question(**data) for data in cursor]

    def get_answers_by_question(self, question_id: str) -> List[Answer]:
        cursor = self.answers.find({"question_id": question_id}).sort("order", ASCENDING)
        return [Answer(**data) for data in cursor]

    def get_answers_for_questions(self, question_ids: Iterable[str]) -> List[Answer]:
        ids = list(question_ids)
        if not ids:
            return []
        cursor = self.answers.find({"question_id": {"$in": ids}}).sort("order", ASCENDING)
        return [Answer(**data) for data in cursor]

    def find(self, quiz_filter: QuizFilter, skip: int = 0, limit: Optional[int] = None) -> List[Quiz]:
        cursor = self.quizzes.find(quiz_filter_to_query(quiz_filter)).sort(
            [("created_at", DESCENDING), ("_id", ASCENDING)]
        )
        if skip:
            cursor = cursor.skip(skip)
        if limit is not None:
            cursor = cursor.limit(limit)
        return [Quiz(**data) for data in cursor]

    def count(self, quiz_filter: QuizFilter) -> int:
        return self.quizzes.count_documents(quiz_filter_to_query(quiz_filter))


class MongoAttemptRepository(IAttemptRepository):
    """MongoDB implementation of the attempt repository."""

    def __init__(self, db: Database):
        self.db = db
        self.collection = self.db.quiz_attempts

    def _ensure_references(self, attempt: QuizAttempt) -> None:
        # MongoDB has no foreign keys; check the referenced documents instead.
        if self.db.quizzes.count_documents({"_id": attempt.quiz_id}, limit=1) == 0:
            raise StorageError(f"Quiz {attempt.quiz_id} does not exist.")
        if attempt.user_id is not None and self.db.users.count_documents({"_id": attempt.user_id}, limit=1) == 0:
            raise StorageError(f"User {attempt.user_id} does not exist.")

    def create(self, attempt: QuizAttempt) -> None:
        self._ensure_references(attempt)
        self.collection.insert_one(attempt.to_dict())
        logger.info(
            "MongoAttemptRepository.create.ok",
            extra={"attempt_id": attempt.id, "quiz_id": attempt.quiz_id},
        )

    def list_by_quiz(self, quiz_id: str) -> List[QuizAttempt]:
        cursor = self.collection.find({"quiz_id": quiz_id}).sort("completed_at", DESCENDING)
        return [QuizAttempt(**data) for data in cursor]

    def list_by_user(self, user_id: str) -> List[QuizAttempt]:
        cursor = self.collection.find({"user_id": user_id}).sort("completed_at", DESCENDING)
        return [QuizAttempt(**data) for data in cursor]

    def get_best_for_user(self, quiz_id: str, user_id: str) -> Optional[QuizAttempt]:
        data = self.collection.find_one(
            {"quiz_id": quiz_id, "user_id": user_id},
            sort=[("score", DESCENDING), ("completed_at", DESCENDING)],
        )
        return QuizAttempt(**data) if data else None

    def aggregate_stats(self, quiz_ids: Iterable[str]) -> List[AttemptAggregate]:
        ids = list(quiz_ids)
        if not ids:
            return []

        pipeline = [
            {"$match": {"quiz_id": {"$in": ids}}},
            {
                "$group": {
                    "_id": "$quiz_id",
                    # anonymous attempts count once each, keyed by their own id
                    "completers": {
                        "$addToSet": {
                            "$ifNull": ["$user_id", {"$concat": ["anonymous:", "$_id"]}]
                        }
                    },
                    "average_percentage": {"$avg": "$percentage"},
                }
            },
            {
                "$project": {
                    "completion_count": {"$size": "$completers"},
                    "average_percentage": 1,
                }
            },
        ]
        return [
            AttemptAggregate(
                quiz_id=row["_id"],
                completion_count=row["completion_count"],
                average_percentage=row.get("average_percentage"),
            )
            for row in self.collection.aggregate(pipeline)
        ]

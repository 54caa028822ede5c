from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.domain.filters import SortKey
from src.infrastructure.config import settings


class CamelModel(BaseModel):
    """Base model for API payloads; fields travel as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self):
        """Convert model to a JSON-ready dictionary."""
        return self.model_dump(by_alias=True, mode="json")


# --- Evaluation ---

class SubmittedAnswer(CamelModel):
    question_id: str
    answer_id: str


class QuizSubmission(CamelModel):
    """Request body for the submit endpoint."""
    quiz_id: str = Field(..., min_length=1)
    answers: List[SubmittedAnswer]


class EvaluatedAnswer(CamelModel):
    question_id: str
    selected_answer_id: str
    correct_answer_id: str = ""  # Empty when the key has no correct answer
    is_correct: bool = False
    points: int = 0


class QuizResult(CamelModel):
    quiz_id: str
    score: int
    max_score: int
    percentage: float  # Two decimal places
    correct_answers: int
    total_questions: int
    answers: List[EvaluatedAnswer]


# --- Statistics ---

class QuizStats(CamelModel):
    completion_count: int = 0
    average_score: int = 0


# --- Quiz views ---

class TakingAnswer(CamelModel):
    """An answer option as shown before submission; carries no correctness flag."""
    id: str
    text: str
    order: int


class TakingQuestion(CamelModel):
    id: str
    text: str
    order: int
    points: int
    answers: List[TakingAnswer]


class TakingQuiz(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    questions: List[TakingQuestion]


class KeyedAnswer(TakingAnswer):
    is_correct: bool


class KeyedQuestion(TakingQuestion):
    answers: List[KeyedAnswer]


class QuizSummary(CamelModel):
    """A quiz as listed, annotated with its statistics."""
    id: str
    title: str
    description: Optional[str] = None
    user_id: str
    is_public: bool
    tag_ids: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    stats: QuizStats = Field(default_factory=QuizStats)


class QuizDetail(QuizSummary):
    # KeyedQuestion entries for the owner, TakingQuestion for everyone else
    questions: List[Union[KeyedQuestion, TakingQuestion]] = Field(default_factory=list)


# --- Listing ---

class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedQuizzes(CamelModel):
    data: List[QuizSummary]
    pagination: Pagination


class ListingQuery(CamelModel):
    """Query-string parameters accepted by the listing endpoints."""
    page: int = Field(1, ge=1)
    limit: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
    search: Optional[str] = None
    tag_ids: List[str] = Field(default_factory=list)
    sort_by: SortKey = SortKey.LATEST
    exclude_user_id: Optional[str] = None
    is_public: Optional[bool] = None

    @field_validator("tag_ids", mode="before")
    @classmethod
    def split_tag_ids(cls, value):
        if isinstance(value, str):
            return [tag for tag in value.split(",") if tag.strip()]
        return value


# --- Attempts ---

class AttemptView(CamelModel):
    id: str
    quiz_id: str
    user_id: Optional[str] = None
    score: int
    max_score: int
    percentage: int
    completed_at: datetime

from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime, timezone

# Points awarded for a question created without an explicit weight
DEFAULT_QUESTION_POINTS = 1


def _utc_now():
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class Quiz(BaseModel):
    """A quiz owned by exactly one user."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    title: str
    description: Optional[str] = None
    user_id: str  # Owner of this quiz
    is_public: bool = False
    tag_ids: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    def to_dict(self):
        """Convert model to dictionary for MongoDB."""
        return self.model_dump(by_alias=True)


class Question(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    quiz_id: str
    text: str
    order: int  # Unique within the quiz
    points: int = Field(DEFAULT_QUESTION_POINTS, ge=0)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    def to_dict(self):
        """Convert model to dictionary for MongoDB."""
        return self.model_dump(by_alias=True)


class Answer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    question_id: str
    text: str
    is_correct: bool = False
    order: int  # Unique within the question
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    def to_dict(self):
        """Convert model to dictionary for MongoDB."""
        return self.model_dump(by_alias=True)


class QuizAttempt(BaseModel):
    """
    One recorded completion of a quiz.

    Attempts are append-only: they are never updated once written.
    `percentage` is a whole number, unlike the two-decimal percentage
    returned to the learner with the evaluation result.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., alias="_id")
    quiz_id: str
    user_id: Optional[str] = None  # None for anonymous attempts
    score: int = Field(..., ge=0)
    max_score: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)
    completed_at: datetime = Field(default_factory=_utc_now)

    def to_dict(self):
        """Convert model to dictionary for MongoDB."""
        return self.model_dump(by_alias=True)

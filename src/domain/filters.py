"""
Quiz listing filters expressed as plain data.

A `QuizFilter` is a set of optional predicates combined with logical AND.
Repositories translate it into their own query language; `matches` is the
reference semantics every translation must agree with.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from src.domain.models.db_models import Quiz


class SortKey(str, Enum):
    LATEST = "latest"
    POPULAR = "popular"
    HARDEST = "hardest"


@dataclass(frozen=True)
class QuizFilter:
    owner_id: Optional[str] = None
    exclude_owner_id: Optional[str] = None
    is_public: Optional[bool] = None
    search: Optional[str] = None
    tag_ids: Tuple[str, ...] = ()

    @property
    def search_text(self) -> Optional[str]:
        """The search term, or None when it is blank."""
        if self.search is None or not self.search.strip():
            return None
        return self.search

    def matches(self, quiz: Quiz) -> bool:
        if self.owner_id is not None and quiz.user_id != self.owner_id:
            return False
        if self.exclude_owner_id is not None and quiz.user_id == self.exclude_owner_id:
            return False
        if self.is_public is not None and quiz.is_public != self.is_public:
            return False
        if self.tag_ids and not set(self.tag_ids) & set(quiz.tag_ids):
            return False

        term = self.search_text
        if term is not None:
            # case-insensitive substring match on title or description
            needle = term.casefold()
            haystacks = (quiz.title, quiz.description or "")
            if not any(needle in h.casefold() for h in haystacks):
                return False
        return True

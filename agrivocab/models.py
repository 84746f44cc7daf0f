from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agrivocab.config import Settings

SESSION_TYPES = ("new", "review")


@dataclass(frozen=True)
class WordRecord:
    index: int  # catalog index, assigned at parse time
    category: str
    english: str
    korean: str
    example1: str = ""
    example2: str = ""
    example3: str = ""
    frequency: str = ""
    difficulty: int = 2

    @property
    def examples(self) -> list[str]:
        return [self.example1, self.example2, self.example3]

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "category": self.category,
            "english": self.english,
            "korean": self.korean,
            "example1": self.example1,
            "example2": self.example2,
            "example3": self.example3,
            "frequency": self.frequency,
            "difficulty": self.difficulty,
        }


@dataclass(frozen=True)
class SessionRecord:
    date: str  # ISO-8601, UTC
    type: str  # new | review
    correct: int
    total: int

    def __post_init__(self):
        if self.type not in SESSION_TYPES:
            raise ValueError(f"Unknown session type: {self.type}")
        if self.correct < 0 or self.total < self.correct:
            raise ValueError(
                f"Invalid session counts: correct={self.correct}, total={self.total}"
            )

    @classmethod
    def now(cls, type: str, correct: int, total: int) -> SessionRecord:
        return cls(
            date=datetime.now(timezone.utc).isoformat(),
            type=type,
            correct=correct,
            total=total,
        )

    @property
    def accuracy(self) -> int:
        return percent(self.correct, self.total) if self.total else 0

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "type": self.type,
            "correct": self.correct,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> SessionRecord:
        return cls(
            date=raw["date"],
            type=raw.get("type", "review"),
            correct=int(raw.get("correct", 0)),
            total=int(raw.get("total", 0)),
        )


@dataclass
class QuizResult:
    word: WordRecord
    user_answer: str  # trimmed, lower-cased
    is_correct: bool


@dataclass
class ProgressState:
    learned: set[int] = field(default_factory=set)
    mastered: set[int] = field(default_factory=set)
    review_pool: set[int] = field(default_factory=set)
    history: list[SessionRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Persisted shape (camelCase keys kept from the browser version)."""
        return {
            "learned": sorted(self.learned),
            "mastered": sorted(self.mastered),
            "reviewPool": sorted(self.review_pool),
            "history": [h.to_dict() for h in self.history],
        }

    @classmethod
    def from_dict(cls, raw: dict) -> ProgressState:
        return cls(
            learned={int(i) for i in raw.get("learned") or []},
            mastered={int(i) for i in raw.get("mastered") or []},
            review_pool={int(i) for i in raw.get("reviewPool") or []},
            history=[SessionRecord.from_dict(h) for h in raw.get("history") or []],
        )


@dataclass
class ReviewSummary:
    correct: int
    total: int
    accuracy: int
    mastered: bool
    passed: bool

    @property
    def wrong(self) -> int:
        return self.total - self.correct

    def to_dict(self) -> dict:
        return {
            "correct": self.correct,
            "wrong": self.wrong,
            "total": self.total,
            "accuracy": self.accuracy,
            "mastered": self.mastered,
            "passed": self.passed,
        }


@dataclass
class StudyContext:
    """Everything one engine call needs: catalog snapshot, progress, settings."""

    catalog: list[WordRecord]
    progress: ProgressState
    settings: Settings


def percent(part: int, whole: int) -> int:
    """Rounded percentage, halves rounded up (not banker's rounding)."""
    return int(part * 100 / whole + 0.5)

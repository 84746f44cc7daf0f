"""Progress engine: which words are new, learned, mastered or due for review."""
from __future__ import annotations

import logging
import random
from datetime import date, datetime
from typing import TYPE_CHECKING

from agrivocab.errors import EmptyBatchError, IncompleteReviewError
from agrivocab.models import (
    ProgressState,
    QuizResult,
    ReviewSummary,
    SessionRecord,
    WordRecord,
    percent,
)

if TYPE_CHECKING:
    from agrivocab.config import Settings
    from agrivocab.db import Database

DEFAULT_BATCH_SIZE = 15

log = logging.getLogger("agrivocab.srs")


def _check_batch_size(batch_size: int) -> None:
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")


def select_learning_batch(
    catalog: list[WordRecord],
    progress: ProgressState,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[WordRecord]:
    """Next unlearned words in catalog order. Empty means everything is learned."""
    _check_batch_size(batch_size)
    unlearned = [w for w in catalog if w.index not in progress.learned]
    return unlearned[:batch_size]


def select_review_batch(
    catalog: list[WordRecord],
    progress: ProgressState,
    batch_size: int = DEFAULT_BATCH_SIZE,
    rng: random.Random | None = None,
) -> list[WordRecord]:
    """Shuffled quiz batch, drawn from the review pool or else from learned words.

    Indices with no record in the current catalog are dropped.
    Empty means there is nothing to review yet.
    """
    _check_batch_size(batch_size)
    if progress.review_pool:
        indices = sorted(progress.review_pool)
    else:
        indices = sorted(progress.learned)[:batch_size]

    words = [catalog[i] for i in indices if 0 <= i < len(catalog)]
    words = words[:batch_size]
    (rng or random).shuffle(words)
    return words


def _meets(accuracy: int, rate: float) -> bool:
    # 0.9 * 100 is 90.00000000000001 in floating point
    return accuracy >= round(rate * 100, 6)


def complete_learning(db: Database, progress: ProgressState, batch: list[WordRecord]) -> None:
    for word in batch:
        progress.learned.add(word.index)
    db.save_progress(progress)
    log.info("Learning session finished: %d words, %d learned in total",
             len(batch), len(progress.learned))


def complete_review(
    db: Database,
    progress: ProgressState,
    settings: Settings,
    batch: list[WordRecord],
    results: list[QuizResult],
) -> ReviewSummary:
    """Fold a finished quiz into progress and persist it.

    Missed words go to the review pool. When accuracy reaches master_rate
    (inclusive) every word of the batch is mastered and leaves the pool.
    pass_rate is only reported back, it does not change classification.
    """
    if not batch or not results:
        raise EmptyBatchError("Cannot score a review without answered questions.")
    if len(results) != len(batch):
        raise IncompleteReviewError(
            f"Review has {len(results)} answers for {len(batch)} questions."
        )

    total = len(results)
    correct = sum(1 for r in results if r.is_correct)
    accuracy = percent(correct, total)

    for r in results:
        if not r.is_correct:
            progress.review_pool.add(r.word.index)

    mastered = _meets(accuracy, settings.master_rate)
    if mastered:
        for word in batch:
            progress.mastered.add(word.index)
            progress.review_pool.discard(word.index)

    progress.history.append(SessionRecord.now("review", correct=correct, total=total))
    db.save_progress(progress)
    log.info("Review scored %d/%d (%d%%)%s", correct, total, accuracy,
             ", batch mastered" if mastered else "")

    return ReviewSummary(
        correct=correct,
        total=total,
        accuracy=accuracy,
        mastered=mastered,
        passed=_meets(accuracy, settings.pass_rate),
    )


def normalize_answer(text: str) -> str:
    return text.strip().lower()


def check_answer(word: WordRecord, raw_input: str) -> bool:
    """Exact match after trimming and lower-casing. No partial credit."""
    return normalize_answer(raw_input) == normalize_answer(word.english)


def grade_answer(word: WordRecord, raw_input: str) -> QuizResult:
    return QuizResult(
        word=word,
        user_answer=normalize_answer(raw_input),
        is_correct=check_answer(word, raw_input),
    )


# ── Dashboard ─────────────────────────────────────────────────────────────

def _local_day(iso: str) -> date:
    return datetime.fromisoformat(iso).astimezone().date()


def progress_stats(catalog_size: int, progress: ProgressState, today: date | None = None) -> dict:
    today = today or date.today()
    history = progress.history
    total_questions = sum(h.total for h in history)
    total_correct = sum(h.correct for h in history)
    return {
        "total_words": catalog_size,
        "learned_words": len(progress.learned),
        "mastered_words": len(progress.mastered),
        "review_pool_size": len(progress.review_pool),
        "today_sessions": sum(1 for h in history if _local_day(h.date) == today),
        "total_sessions": len(history),
        "total_questions_answered": total_questions,
        "total_correct": total_correct,
        "accuracy": percent(total_correct, total_questions) if total_questions else 0,
    }


def recent_history(progress: ProgressState, limit: int = 5) -> list[dict]:
    """Newest sessions first, with their accuracy."""
    recent = progress.history[-limit:] if limit > 0 else []
    return [
        {**h.to_dict(), "accuracy": h.accuracy}
        for h in reversed(recent)
    ]

"""
Quiz engine core logic for the Adaptive Trivia Quiz.
Handles performance tracking and difficulty-driven question ordering.
"""
import random
import logging
import time
from typing import List, Optional, Sequence

from .models import Question, Difficulty

logger = logging.getLogger(__name__)

# Ratios strictly above these thresholds move the target up a level
HARD_THRESHOLD = 0.7
MEDIUM_THRESHOLD = 0.4


def calculate_difficulty_level(performance_score: float) -> Difficulty:
    """
    Calculate which difficulty the next questions should target.

    Args:
        performance_score: Ratio of correct answers to answers given, 0.0-1.0

    Returns:
        HARD above 0.7, MEDIUM above 0.4, EASY otherwise
    """
    if performance_score > HARD_THRESHOLD:
        return Difficulty.HARD
    if performance_score > MEDIUM_THRESHOLD:
        return Difficulty.MEDIUM
    return Difficulty.EASY


class PerformanceTracker:
    """Running count of questions answered versus answered correctly."""

    def __init__(self):
        self.answered = 0
        self.correct = 0

    def record_outcome(self, was_correct: bool) -> None:
        """Record one scored answer."""
        self.answered += 1
        if was_correct:
            self.correct += 1

    @property
    def ratio(self) -> float:
        """Correct answers divided by answers given, 0.0 before any answer."""
        if self.answered == 0:
            return 0.0
        return self.correct / self.answered

    def target_difficulty(self) -> Difficulty:
        return calculate_difficulty_level(self.ratio)

    def reset(self) -> None:
        self.answered = 0
        self.correct = 0


class ReorderingPolicy:
    """Orders the unanswered tail of a batch so the target difficulty comes first."""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize the policy.

        Args:
            rng: Random source used for shuffling, a fresh unseeded one if None
        """
        self._rng = rng or random.Random()

    def reorder(self, tail: Sequence[Question], target: Difficulty) -> List[Question]:
        """
        Reorder questions so those matching the target difficulty lead.

        Both partitions are shuffled independently on every call, so the
        upcoming order is never stable between answers.

        Args:
            tail: Remaining unanswered questions
            target: Difficulty to prioritize

        Returns:
            New list holding the same questions in the new order
        """
        if not tail:
            return []

        matching = [q for q in tail if q.difficulty == target]
        others = [q for q in tail if q.difficulty != target]

        self._rng.shuffle(matching)
        self._rng.shuffle(others)

        logger.debug(
            f"Reordered {len(tail)} remaining questions, {len(matching)} match {target.value}",
            extra={
                'event_type': 'tail_reordered',
                'target_difficulty': target.value,
                'matching': len(matching),
                'remaining': len(tail),
                'timestamp': time.time()
            }
        )
        return matching + others


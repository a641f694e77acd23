"""
Player record for the Adaptive Trivia Quiz.
Keeps the history of completed attempts for the lifetime of the process.
"""
import logging
import math
import time
from datetime import datetime
from typing import List, Optional, Tuple

from .models import AttemptResult


def calculate_percentage(score: int, total: int) -> int:
    """
    Convert a score to a whole percentage, rounding halves up.

    Raises:
        ZeroDivisionError: If total is zero
    """
    if total == 0:
        raise ZeroDivisionError("Cannot compute a percentage for a quiz with no questions")
    return int(math.floor(score / total * 100 + 0.5))


class Player:
    """Tracks the user's name and the history of their quiz attempts."""

    def __init__(self, username: str = "Player"):
        self.logger = logging.getLogger(__name__)
        self.username = username
        self._history: List[AttemptResult] = []

    def record_attempt(self, score: int, total: int) -> AttemptResult:
        """
        Record a completed quiz attempt in the history.

        Args:
            score: Number of correct answers
            total: Number of questions in the attempt

        Returns:
            The new history entry

        Raises:
            ZeroDivisionError: If total is zero
            ValueError: If score or total are negative, or score exceeds total
        """
        if total < 0 or score < 0:
            raise ValueError(f"Score and total must be non-negative, got {score}/{total}")
        if score > total:
            raise ValueError(f"Score {score} cannot exceed total {total}")

        attempt = AttemptResult(
            score=score,
            total=total,
            percentage=calculate_percentage(score, total),
            completed_at=datetime.now()
        )
        self._history.append(attempt)

        self.logger.info(
            f"Recorded attempt for {self.username}: {score}/{total} ({attempt.percentage}%)",
            extra={
                'event_type': 'attempt_recorded',
                'username': self.username,
                'score': score,
                'total': total,
                'percentage': attempt.percentage,
                'timestamp': time.time()
            }
        )
        return attempt

    @property
    def history(self) -> Tuple[AttemptResult, ...]:
        """Completed attempts, oldest first."""
        return tuple(self._history)

    @property
    def attempt_count(self) -> int:
        return len(self._history)

    def best_attempt(self) -> Optional[AttemptResult]:
        """Highest-percentage attempt, the earliest one on ties."""
        if not self._history:
            return None
        return max(self._history, key=lambda attempt: attempt.percentage)

    def average_percentage(self) -> Optional[float]:
        if not self._history:
            return None
        return sum(attempt.percentage for attempt in self._history) / len(self._history)

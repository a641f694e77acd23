"""
Core data models for the Adaptive Trivia Quiz.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from datetime import datetime
from enum import Enum


class Difficulty(Enum):
    """Difficulty tag carried by every question."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Difficulty":
        """Map a provider difficulty string to a Difficulty, defaulting to MEDIUM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MEDIUM


@dataclass(frozen=True)
class Question:
    """Represents a single trivia question with its shuffled choices."""
    prompt: str
    choices: Tuple[str, ...]
    correct_choice: str
    difficulty: Difficulty = Difficulty.MEDIUM

    def __post_init__(self):
        object.__setattr__(self, 'choices', tuple(self.choices))
        if len(set(self.choices)) != len(self.choices):
            raise ValueError(f"Duplicate choices in question: {self.prompt!r}")
        if self.correct_choice not in self.choices:
            raise ValueError(
                f"Correct choice {self.correct_choice!r} is not one of the choices for {self.prompt!r}"
            )

    def validate(self, candidate_answer: str) -> bool:
        """Check if the candidate answer matches the correct choice exactly."""
        return candidate_answer == self.correct_choice


@dataclass(frozen=True)
class RawQuestion:
    """Question record as returned by a provider, before unescaping and shuffling."""
    prompt: str
    correct_choice: str
    incorrect_choices: List[str] = field(default_factory=list)
    difficulty: str = Difficulty.MEDIUM.value


@dataclass(frozen=True)
class AttemptResult:
    """One completed quiz attempt in a player's history."""
    score: int
    total: int
    percentage: int
    completed_at: datetime


@dataclass(frozen=True)
class AnswerScored:
    """Payload of the answer-scored event."""
    was_correct: bool
    correct_choice: str


@dataclass(frozen=True)
class QuizCompletion:
    """Payload of the quiz-complete event."""
    score: int
    total: int


@dataclass
class QuizSettings:
    """Configuration settings for quiz attempts."""
    question_count: int = 10
    category: Optional[int] = None
    question_source: str = "opentdb"
    request_timeout: int = 10
    finalize_delay: float = 1.2


@dataclass
class QuizSession:
    """State of one quiz attempt, mutated only by the QuizController."""
    questions: List[Question]
    position: int = 0
    score: int = 0
    running: bool = True
    start_time: datetime = field(default_factory=datetime.now)

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def remaining(self) -> int:
        return len(self.questions) - self.position

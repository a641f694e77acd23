"""
Quiz flow controller for the Adaptive Trivia Quiz.
Sequences questions one at a time, scores answers and re-ranks the
remaining questions after every answer based on player performance.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from enum import Enum

from .models import QuizSession, Question, AnswerScored, QuizCompletion, AttemptResult
from .quiz_engine import PerformanceTracker, ReorderingPolicy
from .player import Player


class SessionState(Enum):
    """Enumeration of possible quiz controller states."""
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class QuizEvent(Enum):
    """Lifecycle events emitted by the controller."""
    QUESTION_READY = "question_ready"
    ANSWER_SCORED = "answer_scored"
    QUIZ_COMPLETE = "quiz_complete"


class QuizControllerError(Exception):
    """Base exception for quiz controller errors."""
    pass


class EmptyBatchError(QuizControllerError):
    """Raised when attempting to start a quiz with no questions."""
    pass


class InvalidStateError(QuizControllerError):
    """Raised when the controller is in the wrong state for the requested operation."""
    pass


class QuizController:
    """
    Drives a single quiz attempt through IDLE -> IN_PROGRESS -> COMPLETE.

    The controller is driven by ``start`` and ``submit_answer`` commands and
    observed through listeners registered per QuizEvent. Events are delivered
    synchronously, in order, inside the command that triggers them.
    """

    def __init__(
        self,
        player: Optional[Player] = None,
        reordering_policy: Optional[ReorderingPolicy] = None
    ):
        """
        Initialize the quiz controller.

        Args:
            player: Player whose history receives completed attempts
            reordering_policy: Policy used to re-rank the remaining questions
        """
        self.logger = logging.getLogger(__name__)
        self.player = player
        self.reordering_policy = reordering_policy or ReorderingPolicy()
        self.performance = PerformanceTracker()

        self._session: Optional[QuizSession] = None
        self._listeners: Dict[QuizEvent, List[Callable[[Any], Any]]] = {
            event: [] for event in QuizEvent
        }

        self.logger.info("QuizController initialized")

    def add_listener(self, event: QuizEvent, callback: Callable[[Any], Any]) -> None:
        """
        Register a callback for a lifecycle event.

        QUESTION_READY callbacks receive the Question, ANSWER_SCORED callbacks
        an AnswerScored and QUIZ_COMPLETE callbacks a QuizCompletion.
        """
        self._listeners[event].append(callback)

    def remove_listener(self, event: QuizEvent, callback: Callable[[Any], Any]) -> bool:
        try:
            self._listeners[event].remove(callback)
            return True
        except ValueError:
            return False

    def _emit(self, event: QuizEvent, payload: Any) -> None:
        for callback in list(self._listeners[event]):
            callback(payload)

    @property
    def session(self) -> Optional[QuizSession]:
        return self._session

    @property
    def state(self) -> SessionState:
        """Current state of the controller."""
        if self._session is None:
            return SessionState.IDLE
        if self._session.running:
            return SessionState.IN_PROGRESS
        return SessionState.COMPLETE

    @property
    def current_question(self) -> Question:
        """
        Question awaiting an answer.

        Raises:
            InvalidStateError: If no quiz is in progress
        """
        session = self._session
        if session is None or not session.running or session.position >= session.total:
            raise InvalidStateError(f"No question available while {self.state.value}")
        return session.questions[session.position]

    def start(self, batch: Sequence[Question]) -> None:
        """
        Start a new quiz attempt, replacing any previous session.

        Args:
            batch: Questions for this attempt

        Raises:
            EmptyBatchError: If the batch has no questions
            TypeError: If the batch contains anything other than Question objects
        """
        questions = list(batch)
        if not questions:
            raise EmptyBatchError("Cannot start a quiz without questions")
        for index, question in enumerate(questions):
            if not isinstance(question, Question):
                raise TypeError(f"Batch item {index} is {type(question).__name__}, expected Question")

        previous_state = self.state
        self.performance.reset()
        self._session = QuizSession(questions=questions)

        self.logger.info(
            f"Quiz started with {len(questions)} questions (previous state: {previous_state.value})",
            extra={
                'event_type': 'quiz_started',
                'total_questions': len(questions),
                'previous_state': previous_state.value,
                'timestamp': time.time()
            }
        )
        self._emit(QuizEvent.QUESTION_READY, questions[0])

    def submit_answer(self, answer: str) -> bool:
        """
        Score an answer to the current question and advance.

        Answers arriving while no quiz is in progress are ignored; a late
        click after the last question is a normal race with the UI.

        Args:
            answer: Choice selected by the player

        Returns:
            True if the answer was scored, False if it was ignored
        """
        session = self._session
        if session is None or not session.running or session.position >= session.total:
            self.logger.warning(
                f"Ignoring answer submitted while {self.state.value}",
                extra={
                    'event_type': 'answer_ignored',
                    'state': self.state.value,
                    'timestamp': time.time()
                }
            )
            return False

        question = session.questions[session.position]
        was_correct = question.validate(answer)
        if was_correct:
            session.score += 1
        self.performance.record_outcome(was_correct)

        self.logger.info(
            f"Question {session.position + 1}/{session.total} answered "
            f"{'correctly' if was_correct else 'incorrectly'}, score {session.score}",
            extra={
                'event_type': 'answer_scored',
                'position': session.position,
                'was_correct': was_correct,
                'score': session.score,
                'timestamp': time.time()
            }
        )
        self._emit(QuizEvent.ANSWER_SCORED, AnswerScored(was_correct, question.correct_choice))

        session.position += 1

        if session.position < session.total:
            self._reorder_remaining(session)
            self._emit(QuizEvent.QUESTION_READY, session.questions[session.position])
        else:
            self._finish(session)

        return True

    def _reorder_remaining(self, session: QuizSession) -> None:
        """Re-rank the unanswered tail in place for the current performance."""
        target = self.performance.target_difficulty()
        tail = session.questions[session.position:]
        session.questions[session.position:] = self.reordering_policy.reorder(tail, target)

        self.logger.debug(
            f"Performance: {self.performance.ratio * 100:.0f}% --> Targeting {target.value} next",
            extra={
                'event_type': 'difficulty_targeted',
                'performance_ratio': self.performance.ratio,
                'target_difficulty': target.value,
                'remaining': len(tail),
                'timestamp': time.time()
            }
        )

    def _finish(self, session: QuizSession) -> None:
        session.running = False

        if self.player is not None:
            self.player.record_attempt(session.score, session.total)

        self.logger.info(
            f"Quiz complete: {session.score}/{session.total}",
            extra={
                'event_type': 'quiz_complete',
                'score': session.score,
                'total': session.total,
                'timestamp': time.time()
            }
        )
        self._emit(QuizEvent.QUIZ_COMPLETE, QuizCompletion(session.score, session.total))

    def abandon(self) -> bool:
        """
        Discard the current session without recording an attempt.

        Returns:
            True if a session was discarded, False if there was none
        """
        if self._session is None:
            return False

        self.logger.info(
            f"Abandoned quiz at question {self._session.position + 1}/{self._session.total}",
            extra={
                'event_type': 'quiz_abandoned',
                'state': self.state.value,
                'position': self._session.position,
                'timestamp': time.time()
            }
        )
        self._session = None
        self.performance.reset()
        return True

    def player_history(self) -> Tuple[AttemptResult, ...]:
        """Completed attempts of the attached player, oldest first."""
        if self.player is None:
            return ()
        return self.player.history

    def get_session_progress(self) -> Optional[Dict[str, Any]]:
        """
        Get progress information for the current session.

        Returns:
            Dictionary with progress info, None if no session exists
        """
        session = self._session
        if session is None:
            return None

        return {
            'state': self.state.value,
            'current_question': min(session.position + 1, session.total),
            'answered': session.position,
            'total_questions': session.total,
            'score': session.score,
            'performance_ratio': self.performance.ratio,
            'target_difficulty': self.performance.target_difficulty().value,
            'start_time': session.start_time
        }

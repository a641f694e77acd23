"""
Application context for the Adaptive Trivia Quiz.
Owns one controller, one player and the question provider, and wires
provider results into the controller.
"""
import asyncio
import logging
import random
import time
from typing import Any, Dict, List, Optional, Tuple

from .config_manager import ConfigManager
from .data_manager import DataManager
from .models import Question, AttemptResult
from .player import Player
from .quiz_controller import QuizController, EmptyBatchError, SessionState
from .trivia_provider import OpenTriviaProvider, ProviderError, build_batch


class QuizApp:
    """Composition root: one player and one controller for the process lifetime."""

    def __init__(self, config_manager: Optional[ConfigManager] = None, provider=None,
                 rng: Optional[random.Random] = None):
        """
        Initialize the application context.

        Args:
            config_manager: Settings source, defaults are used if None
            provider: Object with a ``fetch_batch()`` method, built from settings if None
            rng: Random source for shuffling answer choices
        """
        self.logger = logging.getLogger(__name__)
        self.config_manager = config_manager or ConfigManager()
        self.player = Player(self.config_manager.get_username())
        self.controller = QuizController(self.player)
        self.provider = provider or self.create_provider()
        self._rng = rng or random.Random()

    def create_provider(self):
        """Build the question provider selected in the settings."""
        settings = self.config_manager.get_quiz_settings()
        if settings.question_source == "local":
            return DataManager(self.config_manager.get_quiz_directory(), amount=settings.question_count)
        return OpenTriviaProvider(
            amount=settings.question_count,
            category=settings.category,
            timeout=settings.request_timeout
        )

    async def load_batch(self) -> List[Question]:
        """
        Fetch one batch from the provider and build questions from it.

        The provider call runs in a worker thread so the event loop is not blocked.

        Raises:
            ProviderError: If the provider fails
        """
        raw_questions = await asyncio.to_thread(self.provider.fetch_batch)
        return build_batch(raw_questions, self._rng)

    async def start_new_quiz(self) -> Dict[str, Any]:
        """
        Fetch a fresh batch and start (or restart) the quiz with it.

        A failed fetch or an empty batch leaves the current session untouched.

        Returns:
            Dictionary with operation result and session info
        """
        result: Dict[str, Any] = {
            'success': False,
            'message': '',
            'session_info': None
        }

        try:
            batch = await self.load_batch()
            self.controller.start(batch)
        except ProviderError as e:
            self.logger.error(
                f"Question provider failed: {e}",
                extra={
                    'event_type': 'quiz_start_failed',
                    'reason': 'provider_error',
                    'timestamp': time.time()
                }
            )
            result['message'] = "Oops, couldn't load the questions. Try again in a moment."
            return result
        except EmptyBatchError as e:
            self.logger.error(
                f"Question provider returned no usable questions: {e}",
                extra={
                    'event_type': 'quiz_start_failed',
                    'reason': 'empty_batch',
                    'timestamp': time.time()
                }
            )
            result['message'] = "No questions were available. Try again or change the settings."
            return result

        session_info = self.controller.get_session_progress()
        result.update({
            'success': True,
            'message': f"Quiz started with {session_info['total_questions']} questions.",
            'session_info': session_info
        })
        return result

    def submit_answer(self, answer: str) -> bool:
        return self.controller.submit_answer(answer)

    def stop_quiz(self) -> bool:
        """Abandon a quiz in progress. A finished quiz is kept so its progress can still be reported."""
        if self.controller.state is not SessionState.IN_PROGRESS:
            return False
        return self.controller.abandon()

    def player_history(self) -> Tuple[AttemptResult, ...]:
        return self.controller.player_history()

    def close(self) -> None:
        """Release resources held by the question provider."""
        close = getattr(self.provider, 'close', None)
        if close is not None:
            close()

"""
Question provider backed by the Open Trivia Database.
"""
import html
import logging
import random
import time
from typing import Dict, List, Optional, Sequence

import requests

from .models import Question, RawQuestion, Difficulty

logger = logging.getLogger(__name__)

OPEN_TRIVIA_URL = "https://opentdb.com/api.php"

# Open Trivia DB response codes other than 0 (success)
RESPONSE_CODE_MESSAGES = {
    1: "Not enough questions available for the requested settings",
    2: "Invalid parameter sent to the trivia API",
    3: "Session token not found",
    4: "Session token has returned all possible questions",
    5: "Too many requests, the trivia API is rate limiting",
}


class ProviderError(Exception):
    """Raised when a question provider cannot return a batch."""
    pass


def build_question(raw: RawQuestion, rng: Optional[random.Random] = None) -> Question:
    """
    Turn a provider record into a Question.

    HTML entities in the prompt and choices are unescaped and the choices
    are shuffled once here, fixing their display order.

    Args:
        raw: Record returned by a provider
        rng: Random source for the choice shuffle

    Returns:
        Question ready to be handed to the controller
    """
    rng = rng or random
    correct = html.unescape(raw.correct_choice)
    choices = [html.unescape(choice) for choice in raw.incorrect_choices]
    choices.append(correct)
    rng.shuffle(choices)

    return Question(
        prompt=html.unescape(raw.prompt),
        choices=tuple(choices),
        correct_choice=correct,
        difficulty=Difficulty.parse(raw.difficulty)
    )


def build_batch(raw_questions: Sequence[RawQuestion], rng: Optional[random.Random] = None) -> List[Question]:
    """Build questions for every record, skipping records that cannot form a valid question."""
    questions = []
    for index, raw in enumerate(raw_questions):
        try:
            questions.append(build_question(raw, rng))
        except ValueError as e:
            logger.warning(f"Skipping question {index} from provider: {e}")
    return questions


def parse_raw_question(data: Dict) -> RawQuestion:
    """
    Parse one question object in the Open Trivia result shape.

    Raises:
        ProviderError: If a required field is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise ProviderError("Question record must be an object")

    for key in ("question", "correct_answer"):
        if not isinstance(data.get(key), str):
            raise ProviderError(f"Question record field '{key}' must be a string")

    incorrect = data.get("incorrect_answers", [])
    if not isinstance(incorrect, list) or not all(isinstance(choice, str) for choice in incorrect):
        raise ProviderError("Question record field 'incorrect_answers' must be an array of strings")

    return RawQuestion(
        prompt=data["question"],
        correct_choice=data["correct_answer"],
        incorrect_choices=list(incorrect),
        difficulty=str(data.get("difficulty", Difficulty.MEDIUM.value))
    )


class OpenTriviaProvider:
    """Fetches multiple-choice question batches from the Open Trivia Database."""

    def __init__(
        self,
        amount: int = 10,
        category: Optional[int] = None,
        difficulty: Optional[str] = None,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
        url: str = OPEN_TRIVIA_URL
    ):
        self.amount = amount
        self.category = category
        self.difficulty = difficulty
        self.timeout = timeout
        self.url = url
        self._owns_session = session is None
        self._session = session or requests.Session()

    def close(self) -> None:
        """Close the HTTP session if this provider created it."""
        if self._owns_session:
            self._session.close()

    def _build_params(self) -> Dict[str, object]:
        params: Dict[str, object] = {'amount': self.amount, 'type': 'multiple'}
        if self.category is not None:
            params['category'] = self.category
        if self.difficulty is not None:
            params['difficulty'] = self.difficulty
        return params

    def fetch_batch(self) -> List[RawQuestion]:
        """
        Fetch one batch of questions. Makes exactly one request, no retries.

        Returns:
            Raw question records in API order

        Raises:
            ProviderError: If the request fails or the response is unusable
        """
        fetch_start_time = time.time()
        try:
            response = self._session.get(self.url, params=self._build_params(), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error(
                f"Failed to fetch from trivia API: {e}",
                extra={
                    'event_type': 'provider_fetch_failed',
                    'url': self.url,
                    'timestamp': time.time()
                }
            )
            raise ProviderError(f"Failed to fetch questions: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Trivia API returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ProviderError("Trivia API response must be a JSON object")

        response_code = payload.get('response_code', 0)
        if response_code != 0:
            message = RESPONSE_CODE_MESSAGES.get(response_code, f"Unknown response code {response_code}")
            logger.error(f"Trivia API returned response code {response_code}: {message}")
            raise ProviderError(message)

        results = payload.get('results')
        if not isinstance(results, list):
            raise ProviderError("Trivia API response has no 'results' array")

        raw_questions = [parse_raw_question(item) for item in results]

        logger.info(
            f"Fetched {len(raw_questions)} questions from trivia API in {time.time() - fetch_start_time:.3f}s",
            extra={
                'event_type': 'provider_fetch_complete',
                'question_count': len(raw_questions),
                'timestamp': time.time()
            }
        )
        return raw_questions

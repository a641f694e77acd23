"""
Test fixtures and sample data for Adaptive Trivia Quiz tests.
"""
import random
from typing import Dict, List
from unittest.mock import Mock, AsyncMock
import discord

from adaptive_quiz.models import Question, RawQuestion, Difficulty, QuizSession


class TestFixtures:
    """Centralized test fixtures for all test modules."""

    @staticmethod
    def make_question(prompt: str, correct: str = "A", difficulty: Difficulty = Difficulty.MEDIUM) -> Question:
        choices = ["A", "B", "C", "D"]
        if correct not in choices:
            choices[-1] = correct
        return Question(prompt, tuple(choices), correct, difficulty)

    @staticmethod
    def create_sample_questions() -> List[Question]:
        """Create sample questions for testing."""
        return [
            Question("What is 2+2?", ("3", "4", "5", "22"), "4", Difficulty.EASY),
            Question("What is the capital of France?", ("London", "Berlin", "Paris", "Madrid"), "Paris",
                     Difficulty.EASY),
            Question("What is the chemical symbol for gold?", ("Ag", "Au", "Gd", "Go"), "Au", Difficulty.MEDIUM),
            Question("In which year did the Berlin Wall fall?", ("1987", "1989", "1991", "1985"), "1989",
                     Difficulty.MEDIUM),
            Question("What is the largest moon of Saturn?", ("Titan", "Europa", "Io", "Rhea"), "Titan",
                     Difficulty.HARD),
        ]

    @staticmethod
    def create_mixed_batch(difficulties: List[Difficulty]) -> List[Question]:
        """One question per difficulty, correct answer always 'A'."""
        return [
            TestFixtures.make_question(f"Question {index} ({difficulty.value})", "A", difficulty)
            for index, difficulty in enumerate(difficulties)
        ]

    @staticmethod
    def create_raw_questions() -> List[RawQuestion]:
        return [
            RawQuestion("What does &quot;HTML&quot; stand for?", "HyperText Markup Language",
                        ["Home Tool Markup Language", "Hyperlinks and Text Markup Language", "High Text Machine Language"],
                        "easy"),
            RawQuestion("Which element has atomic number 79?", "Gold", ["Silver", "Platinum", "Mercury"], "hard"),
        ]

    @staticmethod
    def create_api_payload(response_code: int = 0) -> Dict:
        """Create a response body in the Open Trivia DB shape."""
        return {
            "response_code": response_code,
            "results": [
                {
                    "type": "multiple",
                    "difficulty": "easy",
                    "category": "Science: Computers",
                    "question": "What does &quot;CPU&quot; stand for?",
                    "correct_answer": "Central Processing Unit",
                    "incorrect_answers": [
                        "Central Process Unit",
                        "Computer Personal Unit",
                        "Central Processor Unit"
                    ]
                },
                {
                    "type": "multiple",
                    "difficulty": "hard",
                    "category": "History",
                    "question": "In which year was the Treaty of Westphalia signed?",
                    "correct_answer": "1648",
                    "incorrect_answers": ["1618", "1658", "1713"]
                }
            ]
        }

    @staticmethod
    def create_valid_bank_json() -> Dict:
        """Create a valid local question bank."""
        return {
            "questions": [
                {
                    "question": "What is the capital of Japan?",
                    "correct_answer": "Tokyo",
                    "incorrect_answers": ["Kyoto", "Osaka", "Nagoya"],
                    "difficulty": "easy"
                },
                {
                    "question": "What is 10 + 5?",
                    "correct_answer": "15",
                    "incorrect_answers": ["10", "20", "25"]
                },
                {
                    "question": "Which language is this quiz written in?",
                    "correct_answer": "Python",
                    "incorrect_answers": ["Ruby", "Go", "Rust"],
                    "difficulty": "hard"
                }
            ]
        }

    @staticmethod
    def create_mock_provider(raw_questions: List[RawQuestion] = None) -> Mock:
        provider = Mock()
        provider.fetch_batch.return_value = (
            raw_questions if raw_questions is not None else TestFixtures.create_raw_questions()
        )
        return provider

    @staticmethod
    def seeded_rng(seed: int = 42) -> random.Random:
        return random.Random(seed)


class MockDiscordObjects:
    """Mock Discord objects for testing bot functionality."""

    @staticmethod
    def create_mock_interaction(channel_id: int = 12345, user_id: int = 67890) -> Mock:
        """Create mock Discord interaction."""
        interaction = Mock(spec=discord.Interaction)
        interaction.channel_id = channel_id
        interaction.user = Mock()
        interaction.user.id = user_id
        interaction.response = Mock()
        interaction.response.is_done.return_value = False
        interaction.response.send_message = AsyncMock()
        interaction.response.edit_message = AsyncMock()
        interaction.response.defer = AsyncMock()
        interaction.followup = Mock()
        interaction.followup.send = AsyncMock()
        return interaction


class TestDataValidation:
    """Validation helpers for test assertions."""

    @staticmethod
    def validate_quiz_session(session: QuizSession) -> bool:
        """Check the session invariants: score <= position <= number of questions."""
        return (
            isinstance(session.questions, list) and
            isinstance(session.running, bool) and
            0 <= session.score <= session.position <= len(session.questions)
        )

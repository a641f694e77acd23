"""
Data manager for local JSON question banks.

A question bank is a JSON file in the Open Trivia result shape:

    {
        "questions": [
            {
                "question": str,
                "correct_answer": str,
                "incorrect_answers": [str, ...],
                "difficulty": "easy" | "medium" | "hard"   # Optional
            }
        ]
    }
"""
import json
import os
import logging
import random
import threading
from typing import Dict, List, Optional
from pathlib import Path

from .models import RawQuestion
from .trivia_provider import ProviderError, parse_raw_question

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

SAMPLE_BANK = {
    "questions": [
        {
            "question": "What is the capital of France?",
            "correct_answer": "Paris",
            "incorrect_answers": ["London", "Berlin", "Madrid"],
            "difficulty": "easy"
        },
        {
            "question": "Which planet is known as the Red Planet?",
            "correct_answer": "Mars",
            "incorrect_answers": ["Venus", "Jupiter", "Mercury"],
            "difficulty": "easy"
        },
        {
            "question": "What is the chemical symbol for gold?",
            "correct_answer": "Au",
            "incorrect_answers": ["Ag", "Gd", "Go"],
            "difficulty": "medium"
        },
        {
            "question": "In which year did the Berlin Wall fall?",
            "correct_answer": "1989",
            "incorrect_answers": ["1987", "1991", "1985"],
            "difficulty": "medium"
        },
        {
            "question": "What is the smallest prime number greater than 100?",
            "correct_answer": "101",
            "incorrect_answers": ["103", "107", "109"],
            "difficulty": "hard"
        },
        {
            "question": "Who wrote &quot;The Name of the Rose&quot;?",
            "correct_answer": "Umberto Eco",
            "incorrect_answers": ["Italo Calvino", "Primo Levi", "Dante Alighieri"],
            "difficulty": "hard"
        }
    ]
}


class DataManager:
    """Loads and validates local JSON question banks and serves batches from them."""

    def __init__(self, quiz_directory: str = "./questions/", amount: int = 10,
                 rng: Optional[random.Random] = None):
        """
        Initialize DataManager with question bank directory path.

        Args:
            quiz_directory: Path to directory containing JSON question banks
            amount: Maximum number of questions per batch
            rng: Random source used when sampling batches
        """
        self.quiz_directory = Path(quiz_directory)
        self.amount = amount
        self.loaded_banks: Dict[str, List[RawQuestion]] = {}
        self.logger = logging.getLogger(__name__)
        self.load_errors: List[str] = []
        self._rng = rng or random.Random()
        self._lock = threading.RLock()

    def load_question_files(self) -> Dict[str, List[RawQuestion]]:
        """
        Load all JSON question banks from the directory.

        Files that fail to load are skipped and reported in load_errors.
        A sample bank is written when the directory holds no JSON files.

        Returns:
            Dictionary mapping bank names to their question records
        """
        with self._lock:
            self.loaded_banks.clear()
            self.load_errors.clear()

            try:
                self.quiz_directory.mkdir(parents=True, exist_ok=True)
                json_files = sorted(self.quiz_directory.glob("*.json"))
            except OSError as e:
                self.logger.error(f"Cannot access question directory {self.quiz_directory}: {e}")
                self.load_errors.append(f"Cannot access {self.quiz_directory}: {e}")
                return self.loaded_banks

            if not json_files:
                self.logger.warning(f"No JSON files found in {self.quiz_directory}")
                self.load_errors.append(f"No question files found in {self.quiz_directory}")
                sample_file = self._create_sample_bank()
                json_files = [sample_file] if sample_file else []

            for json_file in json_files:
                error = self._load_bank_file(json_file)
                if error:
                    self.load_errors.append(f"{json_file.name}: {error}")

            self.logger.info(f"Loaded {len(self.loaded_banks)} question banks from {self.quiz_directory}")
            if self.load_errors:
                self.logger.warning(f"Encountered {len(self.load_errors)} loading errors")

            return self.loaded_banks

    def _load_bank_file(self, json_file: Path) -> Optional[str]:
        """
        Load a single question bank.

        Returns:
            Error message if the file could not be loaded, None on success
        """
        try:
            file_size = json_file.stat().st_size
            if file_size > MAX_FILE_SIZE:
                return f"File too large ({file_size / 1024 / 1024:.1f}MB)"

            if not os.access(json_file, os.R_OK):
                return "Permission denied: Cannot read file"

            with open(json_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self.logger.error(f"Invalid JSON in {json_file}: {e}")
            return f"Invalid JSON: {e}"
        except OSError as e:
            self.logger.error(f"Failed to read question file {json_file}: {e}")
            return f"System error: {e}"

        if not self.validate_bank_structure(data):
            return "Invalid question bank structure"

        questions = [parse_raw_question(item) for item in data["questions"]]
        self.loaded_banks[json_file.stem] = questions
        self.logger.info(f"Loaded question bank '{json_file.stem}' with {len(questions)} questions")
        return None

    def validate_bank_structure(self, data: dict) -> bool:
        """
        Validate that JSON data has the question bank structure.

        Args:
            data: Parsed JSON data to validate

        Returns:
            True if structure is valid, False otherwise
        """
        if not isinstance(data, dict):
            self.logger.error("Question bank must be a JSON object")
            return False

        questions = data.get("questions")
        if not isinstance(questions, list):
            self.logger.error("Question bank must contain a 'questions' array")
            return False

        if not questions:
            self.logger.error("Questions array cannot be empty")
            return False

        for i, item in enumerate(questions):
            if not isinstance(item, dict):
                self.logger.error(f"Question {i} must be an object")
                return False

            for key in ("question", "correct_answer"):
                if not isinstance(item.get(key), str):
                    self.logger.error(f"Question {i} '{key}' field must be a string")
                    return False

            incorrect = item.get("incorrect_answers")
            if not isinstance(incorrect, list) or not all(isinstance(choice, str) for choice in incorrect):
                self.logger.error(f"Question {i} 'incorrect_answers' field must be an array of strings")
                return False

            if "difficulty" in item and not isinstance(item["difficulty"], str):
                self.logger.error(f"Question {i} 'difficulty' field must be a string")
                return False

        return True

    def _create_sample_bank(self) -> Optional[Path]:
        """
        Write the sample question bank unless it already exists.

        Returns:
            Path of the sample bank, None if it could not be written
        """
        sample_file_path = self.quiz_directory / "sample_questions.json"
        if sample_file_path.exists():
            return sample_file_path

        try:
            with open(sample_file_path, 'w', encoding='utf-8') as f:
                json.dump(SAMPLE_BANK, f, indent=2, ensure_ascii=False)
        except OSError as e:
            self.logger.error(f"Failed to create sample question file {sample_file_path}: {e}")
            self.load_errors.append(f"{sample_file_path.name}: Cannot write sample bank: {e}")
            return None

        self.logger.info(f"Created sample question file: {sample_file_path}")
        return sample_file_path

    def get_available_banks(self) -> List[str]:
        return list(self.loaded_banks.keys())

    def get_question_count(self) -> int:
        """Total number of questions across all loaded banks."""
        return sum(len(questions) for questions in self.loaded_banks.values())

    def get_load_errors(self) -> List[str]:
        return self.load_errors.copy()

    def has_load_errors(self) -> bool:
        return len(self.load_errors) > 0

    def get_loading_summary(self) -> Dict[str, object]:
        """
        Get a summary of the last loading operation.

        Returns:
            Dictionary with loading statistics and status
        """
        return {
            'total_banks': len(self.loaded_banks),
            'total_questions': self.get_question_count(),
            'has_errors': self.has_load_errors(),
            'errors': self.get_load_errors(),
            'quiz_directory': str(self.quiz_directory),
            'available_banks': self.get_available_banks()
        }

    def fetch_batch(self) -> List[RawQuestion]:
        """
        Sample a batch of up to ``amount`` questions from all loaded banks.

        Banks are loaded on first use. Safe to call from several worker threads.

        Raises:
            ProviderError: If no questions are available
        """
        with self._lock:
            if not self.loaded_banks:
                self.load_question_files()
            pool = [question for questions in self.loaded_banks.values() for question in questions]

            if not pool:
                raise ProviderError(f"No questions available in {self.quiz_directory}")

            return self._rng.sample(pool, min(self.amount, len(pool)))

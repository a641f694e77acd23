"""
Configuration manager for Adaptive Trivia Quiz settings and parameters.
"""
import logging
from typing import Optional, Dict, Any
from pathlib import Path

from .models import QuizSettings


class ConfigManager:
    """Manages quiz configuration settings."""

    # Default configuration values
    DEFAULT_QUESTION_COUNT = 10
    DEFAULT_QUESTION_SOURCE = "opentdb"
    DEFAULT_REQUEST_TIMEOUT = 10
    DEFAULT_FINALIZE_DELAY = 1.2
    DEFAULT_QUIZ_DIRECTORY = "./questions/"
    DEFAULT_USERNAME = "Player"

    # Validation limits
    MIN_QUESTION_COUNT = 1
    MAX_QUESTION_COUNT = 50  # Open Trivia DB limit per request
    MIN_CATEGORY = 9
    MAX_CATEGORY = 32
    MIN_REQUEST_TIMEOUT = 1
    MAX_REQUEST_TIMEOUT = 60
    MAX_FINALIZE_DELAY = 10
    QUESTION_SOURCES = ("opentdb", "local")

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._global_settings = QuizSettings()
        self._quiz_directory = self.DEFAULT_QUIZ_DIRECTORY
        self._username = self.DEFAULT_USERNAME

    def get_quiz_settings(self) -> QuizSettings:
        """
        Get current quiz settings.

        Returns:
            Copy of the current QuizSettings
        """
        return QuizSettings(
            question_count=self._global_settings.question_count,
            category=self._global_settings.category,
            question_source=self._global_settings.question_source,
            request_timeout=self._global_settings.request_timeout,
            finalize_delay=self._global_settings.finalize_delay
        )

    def _failure(self, error_msg: str, user_message: str) -> Dict[str, Any]:
        self.logger.error(error_msg)
        return {
            'success': False,
            'error': error_msg,
            'user_message': user_message
        }

    def _success(self, message: str, user_message: str) -> Dict[str, Any]:
        self.logger.info(message)
        return {
            'success': True,
            'message': message,
            'user_message': user_message
        }

    def _check_int_range(self, name: str, value: Any, minimum: int, maximum: int) -> Optional[Dict[str, Any]]:
        """Return a failure result if value is not an int within [minimum, maximum]."""
        if not isinstance(value, int) or isinstance(value, bool):
            return self._failure(
                f"{name} must be an integer, got {type(value).__name__}",
                f"❌ Invalid input: Expected a number, got {type(value).__name__}"
            )
        if value < minimum:
            return self._failure(
                f"{name} must be at least {minimum}",
                f"❌ Too small: Minimum {name.lower()} is {minimum}"
            )
        if value > maximum:
            return self._failure(
                f"{name} cannot exceed {maximum}",
                f"❌ Too large: Maximum {name.lower()} is {maximum}"
            )
        return None

    def set_question_count(self, count: int) -> Dict[str, Any]:
        """
        Set the number of questions fetched for each quiz.

        Args:
            count: Number of questions per batch

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        failure = self._check_int_range("Question count", count, self.MIN_QUESTION_COUNT, self.MAX_QUESTION_COUNT)
        if failure:
            return failure

        self._global_settings.question_count = count
        return self._success(f"Question count set to {count}", f"✅ Question count set to {count}")

    def get_question_count(self) -> int:
        return self._global_settings.question_count

    def set_category(self, category: Optional[int]) -> Dict[str, Any]:
        """
        Set the Open Trivia category, or None for any category.

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if category is None:
            self._global_settings.category = None
            return self._success("Category set to any", "✅ Questions will come from any category")

        failure = self._check_int_range("Category", category, self.MIN_CATEGORY, self.MAX_CATEGORY)
        if failure:
            return failure

        self._global_settings.category = category
        return self._success(f"Category set to {category}", f"✅ Category set to {category}")

    def get_category(self) -> Optional[int]:
        return self._global_settings.category

    def set_question_source(self, source: str) -> Dict[str, Any]:
        """
        Choose where question batches come from.

        Args:
            source: "opentdb" for the Open Trivia Database, "local" for JSON files

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(source, str) or source.strip().lower() not in self.QUESTION_SOURCES:
            return self._failure(
                f"Question source must be one of {', '.join(self.QUESTION_SOURCES)}, got {source!r}",
                f"❌ Unknown question source: {source}"
            )

        source = source.strip().lower()
        self._global_settings.question_source = source
        return self._success(f"Question source set to {source}", f"✅ Questions will be loaded from {source}")

    def get_question_source(self) -> str:
        return self._global_settings.question_source

    def set_request_timeout(self, timeout: int) -> Dict[str, Any]:
        """Set the trivia API request timeout in seconds."""
        failure = self._check_int_range("Request timeout", timeout, self.MIN_REQUEST_TIMEOUT, self.MAX_REQUEST_TIMEOUT)
        if failure:
            return failure

        self._global_settings.request_timeout = timeout
        return self._success(f"Request timeout set to {timeout} seconds", f"✅ Request timeout set to {timeout}s")

    def get_request_timeout(self) -> int:
        return self._global_settings.request_timeout

    def set_finalize_delay(self, delay: float) -> Dict[str, Any]:
        """
        Set the pause before final results are shown.

        Args:
            delay: Delay in seconds, 0 to show results immediately

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(delay, (int, float)) or isinstance(delay, bool):
            return self._failure(
                f"Finalize delay must be a number, got {type(delay).__name__}",
                f"❌ Invalid input: Expected a number, got {type(delay).__name__}"
            )
        if delay < 0 or delay > self.MAX_FINALIZE_DELAY:
            return self._failure(
                f"Finalize delay must be between 0 and {self.MAX_FINALIZE_DELAY} seconds",
                f"❌ Delay must be between 0 and {self.MAX_FINALIZE_DELAY} seconds"
            )

        self._global_settings.finalize_delay = float(delay)
        return self._success(f"Finalize delay set to {delay} seconds", f"✅ Results will show after {delay}s")

    def get_finalize_delay(self) -> float:
        return self._global_settings.finalize_delay

    def set_quiz_directory(self, directory: str) -> Dict[str, Any]:
        """
        Set the directory holding local question banks.

        Args:
            directory: Path to question bank directory

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(directory, str):
            return self._failure(
                f"Quiz directory must be a string, got {type(directory).__name__}",
                f"❌ Invalid input: Expected a path string, got {type(directory).__name__}"
            )

        if not directory.strip():
            return self._failure("Quiz directory cannot be empty", "❌ Directory path cannot be empty")

        try:
            normalized_path = str(Path(directory).resolve())
        except (OSError, ValueError) as e:
            return self._failure(f"Invalid directory path format: {e}", f"❌ Invalid path format: {directory}")

        self._quiz_directory = normalized_path
        return self._success(f"Quiz directory set to {normalized_path}", f"✅ Quiz directory set to {normalized_path}")

    def get_quiz_directory(self) -> str:
        return self._quiz_directory

    def set_username(self, username: str) -> Dict[str, Any]:
        if not isinstance(username, str) or not username.strip():
            return self._failure("Username cannot be empty", "❌ Username cannot be empty")

        self._username = username.strip()
        return self._success(f"Username set to {self._username}", f"✅ Playing as {self._username}")

    def get_username(self) -> str:
        return self._username

    def apply_config(self, quiz_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply the 'quiz' section of a configuration file.

        Invalid values are logged and left at their current setting.

        Args:
            quiz_config: Mapping of setting names to values

        Returns:
            Dictionary with success status and the errors for rejected values
        """
        setters = {
            'question_count': self.set_question_count,
            'category': self.set_category,
            'question_source': self.set_question_source,
            'request_timeout': self.set_request_timeout,
            'finalize_delay': self.set_finalize_delay,
            'quiz_directory': self.set_quiz_directory,
            'username': self.set_username,
        }

        errors = []
        for key, value in quiz_config.items():
            setter = setters.get(key)
            if setter is None:
                self.logger.warning(f"Ignoring unknown quiz setting '{key}'")
                continue
            result = setter(value)
            if not result['success']:
                errors.append(result['error'])

        return {
            'success': not errors,
            'errors': errors
        }

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self._global_settings = QuizSettings(
            question_count=self.DEFAULT_QUESTION_COUNT,
            category=None,
            question_source=self.DEFAULT_QUESTION_SOURCE,
            request_timeout=self.DEFAULT_REQUEST_TIMEOUT,
            finalize_delay=self.DEFAULT_FINALIZE_DELAY
        )
        self._quiz_directory = self.DEFAULT_QUIZ_DIRECTORY
        self._username = self.DEFAULT_USERNAME
        self.logger.info("All settings reset to default values")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        settings = self._global_settings
        issues = []

        if (not isinstance(settings.question_count, int) or
                not self.MIN_QUESTION_COUNT <= settings.question_count <= self.MAX_QUESTION_COUNT):
            issues.append(f"Invalid question count: {settings.question_count}")

        if settings.category is not None and (
                not isinstance(settings.category, int) or
                not self.MIN_CATEGORY <= settings.category <= self.MAX_CATEGORY):
            issues.append(f"Invalid category: {settings.category}")

        if settings.question_source not in self.QUESTION_SOURCES:
            issues.append(f"Invalid question source: {settings.question_source}")

        if (not isinstance(settings.request_timeout, int) or
                not self.MIN_REQUEST_TIMEOUT <= settings.request_timeout <= self.MAX_REQUEST_TIMEOUT):
            issues.append(f"Invalid request timeout: {settings.request_timeout}")

        if (not isinstance(settings.finalize_delay, (int, float)) or
                not 0 <= settings.finalize_delay <= self.MAX_FINALIZE_DELAY):
            issues.append(f"Invalid finalize delay: {settings.finalize_delay}")

        if not isinstance(self._quiz_directory, str) or not self._quiz_directory.strip():
            issues.append(f"Invalid quiz directory: {self._quiz_directory}")

        return {
            "valid": not issues,
            "issues": issues
        }

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        settings = self._global_settings
        category_str = str(settings.category) if settings.category is not None else "any"

        return (
            f"Quiz Settings:\n"
            f"• Player: {self._username}\n"
            f"• Questions: {settings.question_count}\n"
            f"• Category: {category_str}\n"
            f"• Source: {settings.question_source}\n"
            f"• Request timeout: {settings.request_timeout} seconds\n"
            f"• Results delay: {settings.finalize_delay} seconds\n"
            f"• Question Directory: {self._quiz_directory}"
        )

"""
Unit tests for the QuizApp composition root.
"""
import shutil
import tempfile
import unittest
from unittest.mock import patch

from adaptive_quiz.app import QuizApp
from adaptive_quiz.config_manager import ConfigManager
from adaptive_quiz.data_manager import DataManager
from adaptive_quiz.models import Question
from adaptive_quiz.quiz_controller import SessionState
from adaptive_quiz.trivia_provider import OpenTriviaProvider, ProviderError
from tests.test_fixtures import TestFixtures


class TestQuizAppProviderSelection(unittest.TestCase):

    def test_default_provider_is_open_trivia(self):
        config_manager = ConfigManager()
        config_manager.set_question_count(7)
        config_manager.set_category(18)

        app = QuizApp(config_manager)

        self.assertIsInstance(app.provider, OpenTriviaProvider)
        self.assertEqual(app.provider.amount, 7)
        self.assertEqual(app.provider.category, 18)

    def test_local_provider(self):
        config_manager = ConfigManager()
        config_manager.set_question_source("local")

        app = QuizApp(config_manager)

        self.assertIsInstance(app.provider, DataManager)

    def test_player_uses_configured_username(self):
        config_manager = ConfigManager()
        config_manager.set_username("Ada")

        app = QuizApp(config_manager, provider=TestFixtures.create_mock_provider())

        self.assertEqual(app.player.username, "Ada")


class TestQuizAppFlow(unittest.IsolatedAsyncioTestCase):
    """Test cases for fetching batches and running quizzes through QuizApp."""

    def setUp(self):
        self.provider = TestFixtures.create_mock_provider()
        self.app = QuizApp(provider=self.provider, rng=TestFixtures.seeded_rng())

    async def test_load_batch_builds_questions(self):
        batch = await self.app.load_batch()

        self.assertEqual(len(batch), 2)
        self.assertTrue(all(isinstance(q, Question) for q in batch))
        self.assertEqual(batch[0].prompt, 'What does "HTML" stand for?')
        self.provider.fetch_batch.assert_called_once_with()

    async def test_start_new_quiz(self):
        result = await self.app.start_new_quiz()

        self.assertTrue(result['success'])
        self.assertEqual(result['session_info']['total_questions'], 2)
        self.assertEqual(self.app.controller.state, SessionState.IN_PROGRESS)

    async def test_provider_failure_reported_once(self):
        self.provider.fetch_batch.side_effect = ProviderError("offline")

        result = await self.app.start_new_quiz()

        self.assertFalse(result['success'])
        self.assertIn("couldn't load", result['message'])
        self.assertEqual(self.provider.fetch_batch.call_count, 1)
        self.assertEqual(self.app.controller.state, SessionState.IDLE)

    async def test_empty_batch_reported(self):
        self.provider.fetch_batch.return_value = []

        result = await self.app.start_new_quiz()

        self.assertFalse(result['success'])
        self.assertEqual(self.app.controller.state, SessionState.IDLE)

    async def test_failed_restart_keeps_running_quiz(self):
        await self.app.start_new_quiz()
        session = self.app.controller.session
        self.app.submit_answer(self.app.controller.current_question.correct_choice)

        self.provider.fetch_batch.side_effect = ProviderError("offline")
        result = await self.app.start_new_quiz()

        self.assertFalse(result['success'])
        self.assertIs(self.app.controller.session, session)
        self.assertEqual(session.score, 1)

    async def test_full_quiz_and_restart_keeps_history(self):
        await self.app.start_new_quiz()
        while self.app.controller.state is SessionState.IN_PROGRESS:
            self.app.submit_answer(self.app.controller.current_question.correct_choice)

        self.assertEqual(len(self.app.player_history()), 1)
        self.assertEqual(self.app.player_history()[0].percentage, 100)

        await self.app.start_new_quiz()

        self.assertEqual(self.app.controller.session.position, 0)
        self.assertEqual(len(self.app.player_history()), 1)

    async def test_stop_quiz(self):
        self.assertFalse(self.app.stop_quiz())

        await self.app.start_new_quiz()

        self.assertTrue(self.app.stop_quiz())
        self.assertEqual(self.app.controller.state, SessionState.IDLE)

    async def test_stop_after_completion_keeps_finished_session(self):
        await self.app.start_new_quiz()
        while self.app.controller.state is SessionState.IN_PROGRESS:
            self.app.submit_answer(self.app.controller.current_question.correct_choice)

        self.assertFalse(self.app.stop_quiz())
        self.assertEqual(self.app.controller.state, SessionState.COMPLETE)
        self.assertEqual(self.app.controller.get_session_progress()['score'], 2)

    async def test_unwritable_local_bank_reported_as_failed_start(self):
        temp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, temp_dir, True)
        config_manager = ConfigManager()
        config_manager.set_question_source("local")
        config_manager.set_quiz_directory(temp_dir)
        app = QuizApp(config_manager)

        with patch('adaptive_quiz.data_manager.open', side_effect=PermissionError("read-only"), create=True):
            result = await app.start_new_quiz()

        self.assertFalse(result['success'])
        self.assertIn("couldn't load", result['message'])
        self.assertEqual(app.controller.state, SessionState.IDLE)

    def test_close_closes_provider(self):
        self.app.close()

        self.provider.close.assert_called_once_with()

if __name__ == '__main__':
    unittest.main()

import discord
from discord.ext import commands
import logging
import asyncio
from functools import partial
from typing import Any, List, Optional, Sequence, Tuple
import os

from .app import QuizApp
from .config_manager import ConfigManager
from .models import Question, AttemptResult, AnswerScored, QuizCompletion
from .quiz_controller import QuizEvent, InvalidStateError

logger = logging.getLogger(__name__)

DIFFICULTY_COLORS = {
    "easy": 0x00ff00,
    "medium": 0xffaa00,
    "hard": 0xff0000,
}

MAX_BUTTON_LABEL = 80


def build_question_embed(question: Question, number: int, total: int, score: int) -> discord.Embed:
    """Render a question as an embed."""
    embed = discord.Embed(
        title=f"Question {number} of {total}",
        description=question.prompt,
        color=DIFFICULTY_COLORS.get(question.difficulty.value, 0x6699ff)
    )
    embed.add_field(name="Score", value=str(score), inline=True)
    embed.add_field(name="Difficulty", value=question.difficulty.value.capitalize(), inline=True)
    return embed


def build_feedback_embed(question: Question, scored: AnswerScored) -> discord.Embed:
    embed = discord.Embed(
        title="✅ Correct" if scored.was_correct else "❌ Incorrect",
        description=question.prompt,
        color=0x00ff00 if scored.was_correct else 0xff0000
    )
    embed.add_field(
        name="Feedback",
        value="Yep! That's right." if scored.was_correct else f"Nope. The answer was: {scored.correct_choice}",
        inline=False
    )
    return embed


def format_history(history: Sequence[AttemptResult]) -> str:
    """One line per attempt, oldest first."""
    return "\n".join(
        f"Quiz {index}: {attempt.score}/{attempt.total} ({attempt.percentage}%) "
        f"on {attempt.completed_at.strftime('%Y-%m-%d')}"
        for index, attempt in enumerate(history, start=1)
    )


class AnswerButton(discord.ui.Button):
    """One answer choice of a question."""

    def __init__(self, choice: str, style: discord.ButtonStyle = discord.ButtonStyle.primary,
                 disabled: bool = False):
        super().__init__(label=choice[:MAX_BUTTON_LABEL], style=style, disabled=disabled)
        self.choice = choice

    async def callback(self, interaction: discord.Interaction):
        await self.view.quiz_bot.handle_answer(interaction, self.view, self.choice)


class QuestionView(discord.ui.View):
    """Answer buttons for a single question."""

    def __init__(self, quiz_bot: "QuizBot", question: Question):
        super().__init__(timeout=None)
        self.quiz_bot = quiz_bot
        self.question = question
        for choice in question.choices:
            self.add_item(AnswerButton(choice))

    def reveal(self, chosen: str) -> "QuestionView":
        """Disable all buttons and mark the correct and the chosen answer."""
        for item in self.children:
            if not isinstance(item, AnswerButton):
                continue
            item.disabled = True
            if item.choice == self.question.correct_choice:
                item.style = discord.ButtonStyle.success
            elif item.choice == chosen:
                item.style = discord.ButtonStyle.danger
            else:
                item.style = discord.ButtonStyle.secondary
        self.stop()
        return self


class QuizBot(commands.Bot):
    """Discord front end for the adaptive quiz"""

    def __init__(self, config=None):
        intents = discord.Intents.none()
        intents.guilds = True  # Required for slash commands

        command_prefix = '!'
        if config and 'bot' in config:
            command_prefix = config['bot'].get('command_prefix', '!')

        super().__init__(
            command_prefix=command_prefix,
            intents=intents,
            help_command=None
        )

        self.app_config = config or {}
        self.config_manager: Optional[ConfigManager] = None
        self.quiz_app: Optional[QuizApp] = None

        self._pending_events: List[Tuple[QuizEvent, Any]] = []
        self._results_task: Optional[asyncio.Task] = None

    async def setup_hook(self):
        """Called when the bot is starting up"""
        try:
            logger.info("Setting up bot components...")

            self.config_manager = ConfigManager()
            quiz_config = self.app_config.get('quiz', {})
            if quiz_config:
                result = self.config_manager.apply_config(quiz_config)
                if not result['success']:
                    logger.warning(f"Some quiz settings were rejected: {result['errors']}")

            self.quiz_app = QuizApp(self.config_manager)
            self.attach_listeners()

            await self.setup_commands()

            logger.info("Bot setup completed successfully")

        except Exception as e:
            logger.error(f"Error during bot setup: {e}")
            raise

    def attach_listeners(self) -> None:
        """Collect controller events so they can be rendered after each command."""
        for event in QuizEvent:
            self.quiz_app.controller.add_listener(event, partial(self._record_event, event))

    def _record_event(self, event: QuizEvent, payload: Any) -> None:
        self._pending_events.append((event, payload))

    def drain_events(self) -> List[Tuple[QuizEvent, Any]]:
        events, self._pending_events = self._pending_events, []
        return events

    async def setup_commands(self):
        """Register all slash commands"""
        @self.tree.command(name="help", description="Display available commands and current settings")
        async def help_command(interaction: discord.Interaction):
            await self.handle_help(interaction)

        @self.tree.command(name="start", description="Start a new quiz with fresh questions")
        async def start_command(interaction: discord.Interaction):
            await self.handle_start(interaction)

        @self.tree.command(name="stop", description="Abandon the current quiz")
        async def stop_command(interaction: discord.Interaction):
            await self.handle_stop(interaction)

        @self.tree.command(name="status", description="Show quiz progress and difficulty target")
        async def status_command(interaction: discord.Interaction):
            await self.handle_status(interaction)

        @self.tree.command(name="history", description="Show your past quiz scores")
        async def history_command(interaction: discord.Interaction):
            await self.handle_history(interaction)

        logger.info("Slash commands registered successfully")

    async def on_ready(self):
        """Called when the bot has successfully connected to Discord"""
        logger.info(f"Bot is ready! Logged in as {self.user}")
        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} slash commands")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync slash commands: {e}")

    async def close(self):
        """Release the question provider, then disconnect."""
        self.cancel_pending_results()
        if self.quiz_app is not None:
            self.quiz_app.close()
        await super().close()

    async def on_error(self, event, *args, **kwargs):
        """Handle general bot errors"""
        logger.error(f"An error occurred in event {event}", exc_info=True)

    def cancel_pending_results(self) -> bool:
        """Cancel a scheduled results message, if any."""
        if self._results_task and not self._results_task.done():
            self._results_task.cancel()
            logger.debug("Cancelled pending results message")
            return True
        return False

    async def render_events(self, interaction: discord.Interaction, events: List[Tuple[QuizEvent, Any]],
                            answered: Optional[QuestionView] = None, chosen: Optional[str] = None):
        """Send the messages for controller events, in emission order."""
        for event, payload in events:
            if event is QuizEvent.ANSWER_SCORED and answered is not None:
                await interaction.response.edit_message(
                    embed=build_feedback_embed(answered.question, payload),
                    view=answered.reveal(chosen)
                )
            elif event is QuizEvent.QUESTION_READY:
                progress = self.quiz_app.controller.get_session_progress()
                embed = build_question_embed(
                    payload,
                    progress['current_question'],
                    progress['total_questions'],
                    progress['score']
                )
                await interaction.followup.send(embed=embed, view=QuestionView(self, payload))
            elif event is QuizEvent.QUIZ_COMPLETE:
                self.cancel_pending_results()
                self._results_task = asyncio.create_task(self.send_results(interaction, payload))

    async def send_results(self, interaction: discord.Interaction, completion: QuizCompletion):
        """Show the final score and history after the configured delay."""
        await asyncio.sleep(self.config_manager.get_finalize_delay())

        history = self.quiz_app.player_history()
        percentage = history[-1].percentage if history else 0
        embed = discord.Embed(
            title="🏁 Quiz Complete",
            description=f"You got {completion.score} out of {completion.total} correct ({percentage}%)",
            color=0x6699ff
        )
        if history:
            embed.add_field(name="Your past quizzes", value=format_history(history)[-1024:], inline=False)
        embed.set_footer(text="Use /start to play again")

        try:
            await interaction.followup.send(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"Failed to send quiz results: {e}")

    async def handle_start(self, interaction: discord.Interaction):
        """Handle /start command"""
        try:
            await interaction.response.defer(thinking=True)
            self.cancel_pending_results()
            self.drain_events()

            result = await self.quiz_app.start_new_quiz()
            events = self.drain_events()

            if not result['success']:
                await self.send_error_response(interaction, result['message'], "❌ Quiz Start Failed")
                return

            await self.render_events(interaction, events)

        except Exception as e:
            logger.error(f"Error in start command: {e}", exc_info=True)
            await self.send_error_response(interaction, "Failed to start quiz", "❌ Quiz Start Error")

    async def handle_answer(self, interaction: discord.Interaction, view: QuestionView, choice: str):
        """Handle an answer button press"""
        try:
            try:
                current = self.quiz_app.controller.current_question
            except InvalidStateError:
                current = None

            if current is not view.question:
                await interaction.response.send_message("That question has already been answered.", ephemeral=True)
                return

            self.drain_events()
            if not self.quiz_app.submit_answer(choice):
                await interaction.response.send_message("This quiz is no longer running.", ephemeral=True)
                return

            await self.render_events(interaction, self.drain_events(), answered=view, chosen=choice)

        except Exception as e:
            logger.error(f"Error handling answer: {e}", exc_info=True)
            await self.send_error_response(interaction, "Failed to record your answer", "❌ Answer Error")

    async def handle_stop(self, interaction: discord.Interaction):
        """Handle /stop command"""
        try:
            if self.quiz_app.stop_quiz():
                self.cancel_pending_results()
                await interaction.response.send_message("🛑 Quiz stopped. Use `/start` to play again.")
            else:
                await self.send_info_response(interaction, "There is no quiz to stop.", "ℹ️ No Active Quiz")
        except Exception as e:
            logger.error(f"Error in stop command: {e}")
            await self.send_error_response(interaction, "Failed to stop quiz", "❌ Quiz Control Error")

    async def handle_status(self, interaction: discord.Interaction):
        """Handle /status command"""
        try:
            progress = self.quiz_app.controller.get_session_progress()
            if progress is None:
                await self.send_info_response(
                    interaction, "There is no quiz yet. Use `/start` to begin.", "ℹ️ No Active Quiz"
                )
                return

            embed = discord.Embed(
                title=f"📊 Quiz Status - {progress['state'].replace('_', ' ').title()}",
                color=0x6699ff
            )
            embed.add_field(
                name="Progress",
                value=f"Answered: {progress['answered']}/{progress['total_questions']}",
                inline=True
            )
            embed.add_field(name="Score", value=str(progress['score']), inline=True)
            embed.add_field(
                name="Performance",
                value=f"{progress['performance_ratio'] * 100:.0f}% → targeting {progress['target_difficulty']}",
                inline=False
            )
            await interaction.response.send_message(embed=embed, ephemeral=True)

        except Exception as e:
            logger.error(f"Error in status command: {e}")
            await self.send_error_response(interaction, "Failed to get quiz status", "❌ Status Error")

    async def handle_history(self, interaction: discord.Interaction):
        """Handle /history command"""
        try:
            player = self.quiz_app.player
            if not player.history:
                await self.send_info_response(interaction, "No completed quizzes yet.", "ℹ️ No History")
                return

            embed = discord.Embed(
                title=f"📚 {player.username}'s past quizzes",
                description=format_history(player.history)[-4096:],
                color=0x6699ff
            )
            best = player.best_attempt()
            embed.add_field(name="Best", value=f"{best.score}/{best.total} ({best.percentage}%)", inline=True)
            embed.add_field(name="Average", value=f"{player.average_percentage():.0f}%", inline=True)
            await interaction.response.send_message(embed=embed, ephemeral=True)

        except Exception as e:
            logger.error(f"Error in history command: {e}")
            await self.send_error_response(interaction, "Failed to show history", "❌ History Error")

    async def handle_help(self, interaction: discord.Interaction):
        """Handle /help command"""
        try:
            embed = discord.Embed(
                title="🎯 Adaptive Trivia Quiz",
                description="Questions adapt to how well you are doing: answer well and harder ones come first.",
                color=0x00ff00
            )
            embed.add_field(
                name="🎮 Commands",
                value=(
                    "`/start` - Start a new quiz with fresh questions\n"
                    "`/stop` - Abandon the current quiz\n"
                    "`/status` - Show progress and the current difficulty target\n"
                    "`/history` - Show your past quiz scores\n"
                    "`/help` - Show this message"
                ),
                inline=False
            )
            embed.add_field(
                name="⚙️ Current Settings",
                value=f"```\n{self.config_manager.get_settings_summary()}\n```",
                inline=False
            )
            await interaction.response.send_message(embed=embed, ephemeral=True)

        except Exception as e:
            logger.error(f"Error in help command: {e}")
            await self.send_error_response(interaction, "Failed to display help", "❌ Help Error")

    async def send_error_response(self, interaction: discord.Interaction, message: str, title: str = "❌ Error"):
        """Send formatted error response to user"""
        try:
            embed = discord.Embed(
                title=title,
                description=message,
                color=0xff0000
            )
            embed.set_footer(text="If this error persists, try using /help for available commands")

            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.error("Failed to send error response to user")

    async def send_info_response(self, interaction: discord.Interaction, message: str, title: str = "ℹ️ Information"):
        """Send formatted info response to user"""
        try:
            embed = discord.Embed(
                title=title,
                description=message,
                color=0x6699ff
            )

            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.error("Failed to send info response to user")


async def run_bot(token=None, config=None):
    """Run the bot with proper error handling"""
    if not token:
        token = os.getenv('DISCORD_BOT_TOKEN')

    if not token:
        logger.error("No Discord bot token provided")
        return

    bot = QuizBot(config)

    try:
        logger.info("Starting Adaptive Trivia Quiz bot...")
        await bot.start(token)
    except discord.LoginFailure:
        logger.error("Invalid bot token provided")
    except discord.HTTPException as e:
        logger.error(f"HTTP error occurred: {e}")
    finally:
        if not bot.is_closed():
            await bot.close()

from flask import Flask, current_app
import click
import redis
from config import Config
from trivia.services.directory import UserDirectory
from trivia.services.questions import QuestionSource
from trivia.services.game.commands import TriviaBot
from trivia.services.game.leaderboard import Leaderboard
from trivia.services.game.rounds import RoundManager
from trivia.services.game.scoring import ScoreLedger
from trivia.services.game.settings import GameSettings


def get_bot(flask_app=None) -> TriviaBot:
    target = flask_app or current_app
    return target.extensions['trivia']


def create_app(config_class=Config, store=None, questions=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    if store is None:
        store = redis.Redis.from_url(flask_app.config['REDIS_URL'], decode_responses=True)
    timeout = int(flask_app.config.get('HTTP_TIMEOUT_SEC', 10))
    if questions is None:
        questions = QuestionSource(
            flask_app.config['QUESTION_API_URL'],
            timeout=timeout,
            max_attempts=flask_app.config.get('QUESTION_FETCH_ATTEMPTS', 5),
            logger=flask_app.logger,
        )

    # Build the game services once; they share the store and the immutable settings
    settings = GameSettings.from_config(flask_app.config)
    directory = UserDirectory(store, flask_app.config.get('SLACK_API_TOKEN'), timeout=timeout, logger=flask_app.logger)
    ledger = ScoreLedger(store)
    leaderboard = Leaderboard(store, ledger, directory, logger=flask_app.logger)
    rounds = RoundManager(store, questions, ledger, directory, settings, logger=flask_app.logger)
    flask_app.extensions['trivia'] = TriviaBot(settings, rounds, ledger, leaderboard, directory, logger=flask_app.logger)
    flask_app.extensions['redis'] = store

    # Import and register blueprints here
    from trivia.routes import main
    flask_app.register_blueprint(main)

    from trivia.api.webhook import webhook
    flask_app.register_blueprint(webhook)

    @click.command('trivia-reset')
    @click.option('--channel', 'channel_id', required=True, help='Channel id whose round state is cleared.')
    def trivia_reset_command(channel_id):
        """Clears a channel's round, every score and the cached boards."""
        with flask_app.app_context():
            get_bot(flask_app).rounds.reset_channel(channel_id)
            click.echo(f'Channel {channel_id} has been reset!')

    flask_app.cli.add_command(trivia_reset_command)

    return flask_app

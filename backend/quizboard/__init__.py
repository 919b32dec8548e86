import atexit
import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')), logging.INFO))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Process-wide collaborators, created once and reached through the app
    from quizboard.services.broadcast import GameBroadcaster
    from quizboard.services.stats import StatsService
    broadcaster = GameBroadcaster(socketio)
    flask_app.extensions['broadcaster'] = broadcaster
    flask_app.extensions['stats'] = StatsService()
    atexit.register(broadcaster.shutdown)

    from quizboard.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Import and register blueprints here
    from quizboard.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from quizboard.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from quizboard.api.teams import teams
    flask_app.register_blueprint(teams, url_prefix='/api/teams')

    from quizboard.api.templates import templates
    flask_app.register_blueprint(templates, url_prefix='/api/templates')

    from quizboard.api.public import public
    flask_app.register_blueprint(public, url_prefix='/api/public')

    # Register Socket.IO event handlers
    from quizboard.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from quizboard.auth import init_auth
    init_auth(flask_app)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from quizboard.seed import seed_demo
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_demo()
            print('Database has been reset and seeded!')

    @click.command('verify-totals')
    @click.option('--limit', default=5, show_default=True, help='Number of recent games to print.')
    def verify_totals_command(limit):
        """Prints team totals of recent games and checks the ranking sums."""
        from quizboard.seed import verify_totals
        with flask_app.app_context():
            ok = verify_totals(limit, echo=click.echo)
        if not ok:
            raise click.ClickException('Global ranking totals do not match per-game totals')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(verify_totals_command)

    return flask_app

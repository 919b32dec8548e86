import os
import sys
import pytest

# Ensure the backend root (containing the `quizboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quizboard import create_app, db, socketio
from quizboard.models import Game, GameParticipant, GameTemplate, RoundScore, Team, TemplateRound

ADMIN_PASSWORD = 'quiz-master'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    ADMIN_PASSWORD = ADMIN_PASSWORD
    ADMIN_TOKEN_MAX_AGE_SEC = 3600
    CORS_ORIGINS = []
    RECENT_GAMES_LIMIT = 10
    RANKING_DEFAULT_LIMIT = 20
    RANKING_MAX_LIMIT = 100
    LEADERS_LIMIT = 10
    FORM_WINDOW = 5
    LOG_LEVEL = 'WARNING'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def admin_client(flask_app):
    test_client = flask_app.test_client()
    res = test_client.post('/api/auth/login', json={'password': ADMIN_PASSWORD})
    assert res.status_code == 200
    return test_client


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_team(flask_app):
    def _make(name):
        team = Team(name=name)
        db.session.add(team)
        db.session.commit()
        return team
    return _make


@pytest.fixture()
def make_template(flask_app):
    def _make(max_scores=(10, 10), name='Classic quiz'):
        template = GameTemplate(name=name)
        for number, max_score in enumerate(max_scores, start=1):
            template.rounds.append(TemplateRound(round_number=number, name=f'Round {number}', max_score=max_score))
        db.session.add(template)
        db.session.commit()
        return template
    return _make


@pytest.fixture()
def make_game(flask_app, make_template):
    """Build a game whose participants are ``teams``; ``scores`` maps a
    team to its per-round scores in round order."""
    def _make(teams, scores=None, template=None, name='Quiz night', labels=None, event_date=None):
        template = template or make_template()
        game = Game(name=name, template=template, event_date=event_date)
        for index, team in enumerate(teams):
            label = labels[index] if labels else None
            game.participants.append(GameParticipant(team=team, table_number=label))
        for team, per_round in (scores or {}).items():
            for number, score in enumerate(per_round, start=1):
                game.scores.append(RoundScore(team=team, round_number=number, score=score))
        db.session.add(game)
        db.session.commit()
        return game
    return _make

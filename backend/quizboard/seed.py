"""Demo data and consistency checks behind the ``flask db-reset`` and
``flask verify-totals`` commands."""

from datetime import datetime, timedelta

from quizboard import db
from quizboard.models import Game, GameParticipant, GameTemplate, RoundScore, Team, TemplateRound
from quizboard.services.ranking import EPSILON, normalize_score
from quizboard.services.stats.history import load_history
from quizboard.services.stats.leaderboard import global_ranking

DEMO_TEAMS = ['Quizzly Bears', 'Les Quizerables', 'Know It Owls', 'Trivia Newton John', 'The Smarty Pints']

DEMO_ROUNDS = [
    (1, 'Warm-up', 10),
    (2, 'Music', 10),
    (3, 'Pictures', 12),
    (4, 'Movies', 10),
    (5, 'Blitz', None),
]

# team index -> scores per round, one row per demo game
DEMO_SCORES = [
    [[8, 7, 10, 6.5, 3], [9, 6, 11, 7, 2], [5, 8, 9, 8, 4], [7, 7, 8, 5.5, 1], [6, 9, 12, 9, 2]],
    [[9, 8, 11, 7, 4], [6, 6, 10, 9, 3], [8, 8, 9, 6, 5], [7, 9, 12, 8, 2]],
]


def seed_demo():
    template = GameTemplate(name='Classic quiz', description='Five rounds, a picture round and a blitz')
    for round_number, name, max_score in DEMO_ROUNDS:
        template.rounds.append(TemplateRound(round_number=round_number, name=name, max_score=max_score))
    db.session.add(template)

    teams = [Team(name=name) for name in DEMO_TEAMS]
    db.session.add_all(teams)
    db.session.flush()

    now = datetime.utcnow()
    for index, rows in enumerate(DEMO_SCORES):
        game = Game(
            name=f'Quiz night #{index + 1}',
            template=template,
            status='finished',
            current_round=len(DEMO_ROUNDS),
            event_date=now - timedelta(days=7 * (len(DEMO_SCORES) - index)),
        )
        db.session.add(game)
        for table, (team, per_round) in enumerate(zip(teams, rows), start=1):
            game.participants.append(GameParticipant(team=team, table_number=str(table)))
            for round_number, score in enumerate(per_round, start=1):
                game.scores.append(RoundScore(team=team, round_number=round_number, score=score))

    live = Game(name='Quiz night (live)', template=template, status='active', current_round=1, event_date=now)
    for table, team in enumerate(teams, start=1):
        live.participants.append(GameParticipant(team=team, table_number=str(table)))
    db.session.add(live)

    db.session.commit()


def verify_totals(limit=5, echo=print):
    """Print per-team totals of the most recent played games and check that
    every team's global total equals the sum of its per-game totals."""
    history = load_history()

    for game in history.played_games[:limit]:
        echo(f"Game {game.id} ({game.name})")
        for standing in game.standings:
            echo(f"  {standing.rank:>3}. {history.team_name(standing.team_id)}: {standing.total:g}")

    expected = {}
    for game in history.played_games:
        for standing in game.standings:
            expected[standing.team_id] = expected.get(standing.team_id, 0.0) + standing.total

    ok = True
    for entry in global_ranking(history):
        want = normalize_score(expected.get(entry['team_id'], 0.0))
        if abs(entry['total_points'] - want) > EPSILON:
            echo(f"MISMATCH team={entry['team_id']} ranking={entry['total_points']:g} games={want:g}")
            ok = False

    echo('Totals consistent' if ok else 'Totals inconsistent')
    return ok

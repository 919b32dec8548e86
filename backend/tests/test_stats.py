from datetime import datetime

import pytest

from quizboard.errors import NotFoundError, ValidationError
from quizboard.services.stats.history import GameRecord, History, TeamRecord
from quizboard.services.stats.leaderboard import global_ranking, paginate, public_stats, results_by_team, sort_ranking
from quizboard.services.stats.profile import team_profile
from quizboard.services.stats.ranks import current_tier, next_tier, progress_percent, rank_block
from quizboard.services.stats.trends import badges, form_delta, monthly, percentile, streaks

A, B, C = 1, 2, 3


def _game(game_id, scores, month, labels=None):
    return GameRecord(
        id=game_id,
        name=f'Quiz {game_id}',
        created_at=datetime(2026, month, 1, 20, 0),
        template_rounds=[1, 2],
        participants={team_id: (labels or {}).get(team_id) for team_id in scores},
        scores={team_id: dict(enumerate(per_round, start=1)) for team_id, per_round in scores.items()},
    )


@pytest.fixture()
def history():
    games = [
        # Newest first; game 4 has participants but no scores yet
        GameRecord(id=4, name='Quiz 4', created_at=datetime(2026, 4, 1), template_rounds=[1, 2],
                   participants={A: None, B: None}),
        _game(3, {A: [9, 9], B: [1, 1], C: [2, 2]}, 3, labels={A: '1', B: '2', C: '3'}),
        _game(2, {A: [8, 2], B: [5, 5]}, 2, labels={A: '2', B: '1'}),
        _game(1, {A: [5, 5], B: [3, 4], C: [6, 6]}, 1, labels={A: '1', B: '2', C: '3'}),
    ]
    teams = {
        A: TeamRecord(A, 'Alpacas'),
        B: TeamRecord(B, 'Badgers'),
        C: TeamRecord(C, 'Cobras'),
        4: TeamRecord(4, 'Dingoes'),
    }
    return History(teams=teams, games=games)


def _by_team(entries):
    return {e['team_id']: e for e in entries}


# ---- global ranking ----

def test_unscored_games_are_not_counted(history):
    assert [g.id for g in history.played_games] == [3, 2, 1]
    entries = _by_team(global_ranking(history))
    assert set(entries) == {A, B, C}
    assert entries[A]['games'] == 3


def test_global_totals_equal_sum_of_game_totals(history):
    entries = global_ranking(history)
    per_game = sum(s.total for g in history.played_games for s in g.standings)
    assert sum(e['total_points'] for e in entries) == pytest.approx(per_game)
    assert per_game == pytest.approx(73)


def test_summary_counts_places(history):
    a = _by_team(global_ranking(history))[A]
    assert (a['total_points'], a['avg_points'], a['avg_place']) == (38.0, 12.67, 1.67)
    assert (a['first'], a['second'], a['third']) == (1, 2, 0)
    b = _by_team(global_ranking(history))[B]
    assert (b['first'], b['second'], b['third']) == (1, 0, 2)


def test_sort_ranking_defaults_and_positions(history):
    by_total = sort_ranking(global_ranking(history))
    assert [e['team_id'] for e in by_total] == [A, B, C]
    assert [e['position'] for e in by_total] == [1, 2, 3]

    by_place = sort_ranking(global_ranking(history), 'avg_place')
    assert [e['team_id'] for e in by_place] == [C, A, B]

    by_place_desc = sort_ranking(global_ranking(history), 'avg_place', 'desc')
    assert [e['team_id'] for e in by_place_desc] == [B, A, C]

    with pytest.raises(ValidationError):
        sort_ranking(global_ranking(history), 'name')


def test_paginate():
    items = [{'n': i} for i in range(5)]
    page = paginate(items, page=2, limit=2)
    assert page['items'] == [{'n': 2}, {'n': 3}]
    assert (page['total'], page['pages']) == (5, 3)
    assert paginate([], page=1, limit=20)['pages'] == 1


def test_public_stats_leaders(history):
    stats = public_stats(history)
    assert stats['total_games'] == 4
    assert stats['total_points'] == 73.0
    assert {row['team_id'] for row in stats['leaders_wins']} == {A, B, C}
    assert stats['leaders_avg'][0]['team_id'] == A
    assert stats['leaders_places'][0] == {
        'team_id': A, 'team_name': 'Alpacas', 'first_places': 1, 'second_places': 2, 'third_places': 0,
    }


# ---- trends, streaks, benchmarks ----

def test_percentile_bounds():
    values = [1.0, 2.0, 3.0, 4.0]
    assert percentile(values, 0.5) == 0.0
    assert percentile(values, 2.0) == 0.5
    assert percentile(values, 99) == 1.0
    assert percentile([], 5) == 0.0


def test_monthly_and_form(history):
    results = results_by_team(history)[A]
    months = monthly(results)
    assert [m['month'] for m in months] == ['2026-01', '2026-02', '2026-03']
    assert months[2] == {'month': '2026-03', 'avg_total': 18.0, 'median_place': 1, 'games': 1}
    # Latest game (18) against the one before it (10)
    assert form_delta(results, window=1) == 8.0
    assert form_delta(results, window=5) == 0.0


def test_streaks_count_back_from_latest(history):
    results = results_by_team(history)[A]
    streak = streaks(results, avg_points=12.67, window=5)
    assert streak['wins'] == 1
    assert streak['podiums'] == 3
    assert streak['form_ratio'] == 1.0


def test_badges_are_ordered_by_tone():
    summary = {'first': 5, 'games': 30}
    earned = badges(summary, {'wins': 2, 'podiums': 4}, {'avg_points_pct': 1.0, 'total_points_pct': 0.5})
    assert [b['tone'] for b in earned] == ['elite', 'achievement', 'achievement', 'streak', 'streak', 'veteran']


# ---- rank ladder ----

def test_crossing_a_rank_threshold():
    assert current_tier(90) is None
    assert next_tier(90).title == 'Sergeant'
    assert progress_percent(90) == 90.0

    block = rank_block(110)
    assert block['global_rank']['title'] == 'Sergeant'
    assert block['next_rank']['title'] == 'Lieutenant'
    # 10 of the 200 points between Sergeant and Lieutenant
    assert block['progress_percent'] == 5.0


def test_top_tier_is_complete():
    block = rank_block(25000)
    assert block['global_rank']['title'] == 'Legend'
    assert block['next_rank'] is None
    assert block['progress_percent'] == 100.0


# ---- team profile ----

def test_profile_for_team_without_games(history):
    ranking = global_ranking(history)
    profile = team_profile(history, 4, ranking)
    assert profile['games_played'] == 0
    assert profile['total_points'] == 0
    assert profile['avg_points'] == 0
    assert profile['recent_games'] == []
    assert profile['h2h'] == []
    assert profile['badges'] == []
    assert profile['ranking']['global_rank'] is None


def test_profile_unknown_team(history):
    with pytest.raises(NotFoundError):
        team_profile(history, 99, [])


def test_profile_breakdowns(history):
    results = results_by_team(history)
    profile = team_profile(history, A, global_ranking(history, results), results[A])

    assert profile['placements'] == {'first': 1, 'second': 2, 'third': 0}
    assert [g['game_id'] for g in profile['recent_games']] == [3, 2, 1]

    h2h = {rec['opponent_id']: rec for rec in profile['h2h']}
    assert (h2h[B]['games'], h2h[B]['wins'], h2h[B]['losses']) == (3, 2, 1)
    assert (h2h[C]['games'], h2h[C]['wins'], h2h[C]['losses']) == (2, 1, 1)

    averages = {r['round_number']: r['avg_score'] for r in profile['round_averages']}
    assert averages == {1: round((5 + 8 + 9) / 3, 2), 2: round((5 + 2 + 9) / 3, 2)}

    tables = {t['table_number']: t for t in profile['table_stats']}
    assert tables['1']['games'] == 2
    assert tables['2']['avg_place'] == 2.0


# ---- endpoints ----

def test_public_endpoints_need_no_login(client, make_team, make_game):
    a, b = make_team('A'), make_team('B')
    make_game([a, b], {a: [4, 6], b: [5, 5]})

    ranking = client.get('/api/public/ranking').get_json()
    assert [e['team_name'] for e in ranking['items']] == ['A', 'B']
    assert (ranking['sort'], ranking['order'], ranking['total']) == ('total_points', 'desc', 2)

    res = client.get('/api/public/ranking?sort=wins')
    assert res.status_code == 400

    stats = client.get('/api/public/stats').get_json()
    assert stats['total_games'] == 1
    assert stats['leaders_wins'][0]['team_name'] == 'A'

    last = client.get('/api/public/last-game').get_json()
    assert [s['team_name'] for s in last['standings']] == ['A', 'B']

    profile = client.get(f'/api/public/teams/{b.id}').get_json()
    assert profile['games_played'] == 1
    assert profile['placements']['second'] == 1

    assert client.get('/api/public/teams/999').status_code == 404


def test_last_game_is_empty_without_games(client):
    res = client.get('/api/public/last-game')
    assert res.status_code == 200
    assert res.get_json() is None


def test_ranking_limit_is_capped(client, flask_app):
    flask_app.config['RANKING_MAX_LIMIT'] = 5
    res = client.get('/api/public/ranking?limit=50&page=1')
    assert res.get_json()['limit'] == 5


def test_cli_reset_and_verify(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['db-reset'])
    assert result.exit_code == 0, result.output

    result = runner.invoke(args=['verify-totals', '--limit', '1'])
    assert result.exit_code == 0, result.output
    assert 'Totals consistent' in result.output


def test_public_team_list_is_paginated(client, make_team, make_game):
    make_team('A')
    b, c = make_team('B'), make_team('C')
    make_game([b, c])
    make_game([b], name='Second quiz')

    page = client.get('/api/public/teams?page=1&limit=2').get_json()
    assert (page['total'], page['pages'], page['limit']) == (3, 2, 2)
    assert [(t['name'], t['games_count']) for t in page['items']] == [('B', 2), ('C', 1)]

    rest = client.get('/api/public/teams?page=2&limit=2').get_json()
    assert [t['name'] for t in rest['items']] == ['A']

    assert client.get('/api/public/teams?page=0').status_code == 400

def _names(events):
    return [e['name'] for e in events]


def _events(sio_client, name):
    return [e['args'][0] for e in sio_client.get_received('/ws') if e['name'] == name]


def test_socket_connect_and_join(flask_app, sio_client):
    assert sio_client.is_connected('/ws')
    assert 'connected' in _names(sio_client.get_received('/ws'))

    sio_client.emit('join_game', {'game_id': 7}, namespace='/ws')
    joined = _events(sio_client, 'joined')
    assert joined == [{'room': 'game:7', 'game_id': 7}]
    assert len(flask_app.extensions['broadcaster'].members(7)) == 1


def test_join_and_leave_are_idempotent(flask_app, sio_client):
    broadcaster = flask_app.extensions['broadcaster']
    sio_client.emit('join_game', {'game_id': 3}, namespace='/ws')
    sio_client.emit('join_game', {'game_id': 3}, namespace='/ws')
    assert len(broadcaster.members(3)) == 1

    sio_client.emit('leave_game', {'game_id': 3}, namespace='/ws')
    sio_client.emit('leave_game', {'game_id': 3}, namespace='/ws')
    assert broadcaster.members(3) == frozenset()
    assert _names(sio_client.get_received('/ws')).count('left') == 2


def test_invalid_game_id_gets_error(sio_client):
    sio_client.get_received('/ws')
    for payload in ({}, {'game_id': 'abc'}, {'game_id': 0}, {'game_id': True}):
        sio_client.emit('join_game', payload, namespace='/ws')
    errors = _events(sio_client, 'error')
    assert len(errors) == 4


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'t': 1}, namespace='/ws')
    assert _events(sio_client, 'pong') == [{'t': 1}]


def test_disconnect_drops_membership(flask_app, sio_client):
    broadcaster = flask_app.extensions['broadcaster']
    sio_client.emit('join_game', {'game_id': 4}, namespace='/ws')
    sio_client.disconnect(namespace='/ws')
    assert broadcaster.members(4) == frozenset()


def test_score_submission_reaches_only_that_game(flask_app, admin_client, make_team, make_game):
    from quizboard import socketio as _sio
    a = make_team('A')
    game = make_game([a])
    other = make_game([a], name='Other quiz')

    viewer = _sio.test_client(flask_app, namespace='/ws')
    bystander = _sio.test_client(flask_app, namespace='/ws')
    viewer.emit('join_game', {'game_id': game.id}, namespace='/ws')
    bystander.emit('join_game', {'game_id': other.id}, namespace='/ws')
    viewer.get_received('/ws')
    bystander.get_received('/ws')

    res = admin_client.post(f'/api/games/{game.id}/scores', json={'team_id': a.id, 'round_number': 1, 'score': 6})
    assert res.status_code == 201

    updates = _events(viewer, 'scores_updated')
    assert len(updates) == 1
    assert updates[0]['game_id'] == game.id
    assert [(s['team_id'], s['round_number'], s['score']) for s in updates[0]['scores']] == [(a.id, 1, 6.0)]
    assert _events(bystander, 'scores_updated') == []

    viewer.disconnect(namespace='/ws')
    bystander.disconnect(namespace='/ws')


def test_rejected_score_is_not_broadcast(flask_app, admin_client, sio_client, make_team, make_game):
    a = make_team('A')
    game = make_game([a])
    sio_client.emit('join_game', {'game_id': game.id}, namespace='/ws')
    sio_client.get_received('/ws')

    res = admin_client.post(f'/api/games/{game.id}/scores', json={'team_id': a.id, 'round_number': 1, 'score': 50})
    assert res.status_code == 400
    assert _events(sio_client, 'scores_updated') == []


def test_round_and_status_changes_are_broadcast(admin_client, sio_client, make_team, make_game):
    game = make_game([make_team('A')])
    sio_client.emit('join_game', {'game_id': game.id}, namespace='/ws')
    sio_client.get_received('/ws')

    admin_client.put(f'/api/games/{game.id}/round', json={'current_round': 2})
    admin_client.put(f'/api/games/{game.id}/status', json={'status': 'active'})

    received = sio_client.get_received('/ws')
    by_name = {e['name']: e['args'][0] for e in received}
    assert by_name['round_changed'] == {'game_id': game.id, 'current_round': 2}
    assert by_name['status_changed'] == {'game_id': game.id, 'status': 'active'}


def test_publish_failure_does_not_fail_the_write(flask_app, admin_client, make_team, make_game, monkeypatch):
    from quizboard import socketio as _sio
    a = make_team('A')
    game = make_game([a])

    def boom(*args, **kwargs):
        raise RuntimeError('channel down')

    monkeypatch.setattr(_sio, 'emit', boom)
    res = admin_client.post(f'/api/games/{game.id}/scores', json={'team_id': a.id, 'round_number': 1, 'score': 4})
    assert res.status_code == 201
    assert admin_client.get(f'/api/games/{game.id}/scores').get_json()[0]['score'] == 4.0


def test_broadcast_failure_is_logged_on_the_app_logger(flask_app, admin_client, make_team, make_game, monkeypatch, caplog):
    from quizboard import socketio as _sio
    game = make_game([make_team('A')])

    def boom(*args, **kwargs):
        raise RuntimeError('channel down')

    monkeypatch.setattr(_sio, 'emit', boom)
    res = admin_client.put(f'/api/games/{game.id}/round', json={'current_round': 1})
    assert res.status_code == 200
    failed = [r for r in caplog.records if '[broadcast-failed] event=round_changed' in r.getMessage()]
    assert failed and failed[0].name == flask_app.logger.name


def test_score_reread_failure_keeps_the_stored_score(admin_client, make_team, make_game, monkeypatch):
    from quizboard.models import RoundScore
    from quizboard.services.games import scoring
    a = make_team('A')
    game = make_game([a])

    def broken_read(game_id):
        raise RuntimeError('read failed')

    monkeypatch.setattr(scoring, 'score_rows', broken_read)
    res = admin_client.post(f'/api/games/{game.id}/scores', json={'team_id': a.id, 'round_number': 1, 'score': 3})
    assert res.status_code == 201
    assert res.get_json()['score'] == 3.0
    assert [r.score for r in RoundScore.query.filter_by(game_id=game.id)] == [3.0]

from flask import current_app, request
from flask_socketio import emit

from quizboard import socketio
from quizboard.services.broadcast import NAMESPACE


def _broadcaster():
    return current_app.extensions['broadcaster']


def _game_id(data):
    """Pull a positive integer game id out of an event payload, or None."""
    game_id = (data or {}).get('game_id') if isinstance(data, dict) else None
    if isinstance(game_id, bool) or not isinstance(game_id, int) or game_id <= 0:
        return None
    return game_id


def handle_connect():
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(*args):
    left = _broadcaster().drop(request.sid)
    if left:
        current_app.logger.info(f"[ws-disconnect] sid={request.sid} games={left}")


def handle_join_game(data):
    game_id = _game_id(data)
    if game_id is None:
        emit('error', {'message': 'game_id must be a positive integer'})
        return
    broadcaster = _broadcaster()
    broadcaster.join(request.sid, game_id)
    emit('joined', {'room': broadcaster.room_for(game_id), 'game_id': game_id})


def handle_leave_game(data):
    game_id = _game_id(data)
    if game_id is None:
        emit('error', {'message': 'game_id must be a positive integer'})
        return
    broadcaster = _broadcaster()
    broadcaster.leave(request.sid, game_id)
    emit('left', {'room': broadcaster.room_for(game_id), 'game_id': game_id})


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the viewer namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('join_game', handle_join_game, namespace=NAMESPACE)
    socketio.on_event('leave_game', handle_leave_game, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)

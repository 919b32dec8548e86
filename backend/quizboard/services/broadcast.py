"""Per-game fan-out of live scoreboard changes over Socket.IO.

One ``GameBroadcaster`` is created by the app factory and stored in
``app.extensions['broadcaster']``. Socket handlers register viewers with
``join``/``leave``; routes publish after their database commit. Every
member of a game's group receives the same payload. Missed messages are
not kept: a late viewer fetches current state over HTTP.
"""

import threading
from typing import Callable, Dict, Iterable, List, Set, Union

from flask import current_app
from flask_socketio import join_room, leave_room


NAMESPACE = '/ws'

SCORES_UPDATED = 'scores_updated'
ROUND_CHANGED = 'round_changed'
STATUS_CHANGED = 'status_changed'


class GameBroadcaster:

    def __init__(self, socketio, namespace: str = NAMESPACE):
        self.socketio = socketio
        self.namespace = namespace
        self._groups: Dict[int, Set[str]] = {}
        self._lock = threading.Lock()
        self._closed = False

    @staticmethod
    def room_for(game_id: int) -> str:
        return f"game:{game_id}"

    # ---- membership ----

    def join(self, sid: str, game_id: int) -> bool:
        """Add ``sid`` to the game's group. Returns False if it was already there."""
        join_room(self.room_for(game_id), sid=sid, namespace=self.namespace)
        with self._lock:
            members = self._groups.setdefault(game_id, set())
            if sid in members:
                return False
            members.add(sid)
        current_app.logger.info(f"[group-join] game={game_id} sid={sid}")
        return True

    def leave(self, sid: str, game_id: int) -> bool:
        """Remove ``sid`` from the group. Leaving a group it never joined is a no-op."""
        leave_room(self.room_for(game_id), sid=sid, namespace=self.namespace)
        with self._lock:
            members = self._groups.get(game_id)
            if not members or sid not in members:
                return False
            members.discard(sid)
            if not members:
                self._groups.pop(game_id, None)
        current_app.logger.info(f"[group-leave] game={game_id} sid={sid}")
        return True

    def drop(self, sid: str) -> List[int]:
        """Forget a disconnected socket; the Socket.IO server clears its rooms itself."""
        left = []
        with self._lock:
            for game_id, members in list(self._groups.items()):
                if sid in members:
                    members.discard(sid)
                    left.append(game_id)
                    if not members:
                        self._groups.pop(game_id, None)
        return left

    def members(self, game_id: int) -> frozenset:
        with self._lock:
            return frozenset(self._groups.get(game_id, ()))

    def groups(self) -> Dict[int, int]:
        with self._lock:
            return {game_id: len(members) for game_id, members in self._groups.items()}

    # ---- publication ----

    def publish_scores(self, game_id: int, scores: Union[Iterable[dict], Callable[[], Iterable[dict]]]) -> bool:
        """Send the game's full score list. ``scores`` may be a callable that
        reads the rows; it then runs under the same best-effort guard."""
        def payload():
            rows = scores() if callable(scores) else scores
            return {'game_id': game_id, 'scores': list(rows)}
        return self._publish(SCORES_UPDATED, game_id, payload)

    def publish_round(self, game_id: int, current_round: int) -> bool:
        return self._publish(ROUND_CHANGED, game_id, lambda: {'game_id': game_id, 'current_round': current_round})

    def publish_status(self, game_id: int, status: str) -> bool:
        return self._publish(STATUS_CHANGED, game_id, lambda: {'game_id': game_id, 'status': status})

    def _publish(self, event: str, game_id: int, build_payload: Callable[[], dict]) -> bool:
        # Delivery is best effort; the committed write stays the source of truth.
        if self._closed:
            current_app.logger.warning(f"[broadcast-skip] event={event} game={game_id} broadcaster closed")
            return False
        try:
            payload = build_payload()
            self.socketio.emit(event, payload, to=self.room_for(game_id), namespace=self.namespace)
        except Exception:
            current_app.logger.exception(f"[broadcast-failed] event={event} game={game_id}")
            return False
        current_app.logger.debug(f"[broadcast] event={event} game={game_id}")
        return True

    def shutdown(self) -> None:
        # Runs at interpreter exit, outside any app context
        with self._lock:
            self._groups.clear()
            self._closed = True

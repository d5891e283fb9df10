"""In-memory registry of running games with human and automated seats."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from .actions import Action, parse_action
from .events import Event
from .game import Game, Listener
from .policy import HeuristicPolicy, PlayerPolicy, play_automated_turn
from .state import MAX_PLAYERS, GameConfig, PlayerView

__all__ = ["SessionError", "Session", "SessionRegistry"]

logger = logging.getLogger(__name__)

PolicyFactory = Callable[[int], PlayerPolicy]


class SessionError(RuntimeError):
    """Raised for unknown sessions, bad seat tokens and full tables."""


@dataclass(slots=True)
class Session:
    """One hosted game plus the bookkeeping of who sits where.

    Automated seats take the lowest indices; human seats are handed out in
    join order after them.
    """

    session_id: str
    game: Game
    policies: Dict[int, PlayerPolicy]
    human_players: int
    tokens: Dict[str, int] = field(default_factory=dict)
    started: bool = False
    created_at: float = field(default_factory=time.monotonic)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def open_seats(self) -> int:
        return self.human_players - len(self.tokens)

    def seat_for(self, token: str) -> int:
        try:
            return self.tokens[token]
        except KeyError:
            raise SessionError(f"invalid seat token for session {self.session_id}") from None


class SessionRegistry:
    """Create, join and drive sessions; safe to share across threads.

    ``max_automated_turns`` bounds how many consecutive automated turns one
    call may play, which keeps all-automated games from running unbounded.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        *,
        policy_factory: PolicyFactory | None = None,
        max_automated_turns: int = 500,
    ) -> None:
        if max_automated_turns <= 0:
            raise ValueError("max_automated_turns must be positive")
        self.config = config or GameConfig()
        self.policy_factory: PolicyFactory = policy_factory or (lambda seat: HeuristicPolicy())
        self.max_automated_turns = max_automated_turns
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # lookup

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def session_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._sessions)

    def get_session(self, session_id: str) -> Session:
        with self._lock:
            try:
                return self._sessions[session_id.lower()]
            except KeyError:
                raise SessionError(f"unknown session {session_id}") from None

    # ------------------------------------------------------------------
    # lifecycle

    def _new_game_config(self, seed: int | None) -> GameConfig:
        return GameConfig(
            num_players=self.config.num_players,
            deal_size=self.config.deal_size,
            blank_copies=self.config.blank_copies,
            seed=self.config.seed if seed is None else seed,
        )

    def _register(self, session_id: str | None, human_players: int, seed: int | None) -> Session:
        num_players = self.config.num_players
        automated = num_players - human_players
        game = Game(self._new_game_config(seed), start=False)
        policies = {seat: self.policy_factory(seat) for seat in range(automated)}
        with self._lock:
            if session_id is None:
                session_id = f"{secrets.randbits(64):016x}"
                while session_id in self._sessions:
                    session_id = f"{secrets.randbits(64):016x}"
            else:
                session_id = session_id.lower()
                if session_id in self._sessions:
                    raise SessionError(f"session {session_id} already exists")
            session = Session(
                session_id=session_id,
                game=game,
                policies=policies,
                human_players=human_players,
            )
            self._sessions[session_id] = session
        logger.info(
            "created session %s with %d human and %d automated seat(s)",
            session_id,
            human_players,
            automated,
        )
        return session

    def create_session(self, human_players: int, *, seed: int | None = None) -> str:
        """Create a session waiting for ``human_players`` people; returns its hex id."""

        if not 1 <= human_players <= min(MAX_PLAYERS, self.config.num_players):
            raise SessionError(f"human_players must be between 1 and {self.config.num_players}")
        return self._register(None, human_players, seed).session_id

    def add_test_game(self, session_id: str | None = None, *, seed: int | None = None) -> str:
        """Register a fully automated game and play it until the turn cap or the end."""

        session = self._register(session_id, 0, seed)
        with session.lock:
            self._start(session)
        return session.session_id

    def join_session(self, session_id: str) -> str:
        """Claim the next human seat and return its token."""

        session = self.get_session(session_id)
        with session.lock:
            if session.open_seats <= 0:
                raise SessionError(f"session {session_id} is full")
            seat = len(session.policies) + len(session.tokens)
            token = f"{seat}:{secrets.token_hex(8)}"
            session.tokens[token] = seat
            logger.info("seat P%d joined session %s", seat, session.session_id)
            if session.open_seats == 0:
                self._start(session)
        return token

    def _start(self, session: Session) -> None:
        if session.started:
            return
        session.started = True
        session.game.start()
        logger.info("session %s started", session.session_id)
        self._run_automated(session)

    def _run_automated(self, session: Session) -> list[Event]:
        game = session.game
        events: list[Event] = []
        for _ in range(self.max_automated_turns):
            if game.is_over:
                break
            policy = session.policies.get(game.active_player)
            if policy is None:
                break
            events.extend(play_automated_turn(game, policy))
        else:
            logger.warning(
                "session %s paused after %d automated turn(s)",
                session.session_id,
                self.max_automated_turns,
            )
        return events

    # ------------------------------------------------------------------
    # play

    def submit(self, session_id: str, token: str, action: Action | str) -> list[Event]:
        """Apply a human seat's action, then let automated seats catch up.

        ``action`` may be an ``Action`` or its text code. Rule violations
        propagate unchanged from the game.
        """

        session = self.get_session(session_id)
        if isinstance(action, str):
            action = parse_action(action)
        with session.lock:
            if not session.started:
                raise SessionError(f"session {session_id} is still waiting for players")
            seat = session.seat_for(token)
            events = session.game.submit(seat, action)
            events.extend(self._run_automated(session))
        return events

    def advance(self, session_id: str) -> list[Event]:
        """Resume automated seats of a paused session."""

        session = self.get_session(session_id)
        with session.lock:
            if not session.started:
                return []
            return self._run_automated(session)

    def view(self, session_id: str, token: str) -> PlayerView:
        session = self.get_session(session_id)
        with session.lock:
            return session.game.view_for(session.seat_for(token))

    def subscribe(self, session_id: str, listener: Listener) -> Callable[[], None]:
        session = self.get_session(session_id)
        with session.lock:
            return session.game.subscribe(listener)

    def remove_session(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id.lower(), None) is None:
                raise SessionError(f"unknown session {session_id}")

    def prune_sessions(self, max_age: float, *, now: float | None = None) -> List[str]:
        """Drop sessions created more than ``max_age`` seconds ago; returns their ids."""

        if max_age < 0:
            raise ValueError("max_age must be non-negative")
        cutoff = (time.monotonic() if now is None else now) - max_age
        with self._lock:
            expired = [sid for sid, session in self._sessions.items() if session.created_at < cutoff]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info("pruned %d abandoned session(s)", len(expired))
        return sorted(expired)

"""
Lobby Session - the round state machine for one lobby.

Owns the roster, the current round, turn order, the discussion countdown and
scoring. Every public method takes the session lock for its whole duration,
validates before mutating, and emits its outbound events while still holding
the lock so recipients see them in the order actions were applied.

    waiting -> role-assignment -> submission -> discussion -> voting -> results
    results -> role-assignment (next round)
"""

import random
import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional, Any

from .errors import (
    LobbyNotFound, UnknownPlayer, NotYourTurn, WrongPhase,
    InsufficientPlayers, NotHost, InvalidVote
)
from .models import (
    Phase, Player, RoundState, RoundResult, GameRules,
    ROUND_START_PHASES, ACTIVE_PHASES, roster_dicts
)
from .scoring import score_round, is_faker_caught
from .timer import DiscussionTimer
from .topics import TopicProvider
from utils.constants import EVENTS, ROLES, ABORT_REASONS, CLOSE_REASONS

logger = logging.getLogger(__name__)

# sink(event, payload) delivers one message to one connection
Sink = Callable[[str, Dict[str, Any]], None]

class LobbySession:
    """State machine for a single lobby."""

    def __init__(self, code: str, host_id: str, scheduler,
                 host_sink: Optional[Sink] = None,
                 rules: Optional[GameRules] = None,
                 topic_provider: Optional[TopicProvider] = None,
                 rng: Optional[random.Random] = None):
        """
        Args:
            code: Lobby code this session is registered under
            host_id: Connection id of the host (owns start and teardown)
            scheduler: Background task runner used by the discussion countdown
            host_sink: Outbound sink for the host connection
            rules: Scoring and timing constants
            topic_provider: Source of topics and faker decoys
            rng: Random source for faker selection
        """
        self.code = code
        self.host_id = host_id
        self.host_sink = host_sink
        self.scheduler = scheduler
        self.rules = rules or GameRules()
        self.topic_provider = topic_provider or TopicProvider()
        self.rng = rng or random.Random()

        self.players: List[Player] = []
        self.sinks: Dict[str, Sink] = {}  # player id -> sink
        self.phase = Phase.WAITING
        self.round_number = 0
        self.round = RoundState()
        self.last_result: Optional[RoundResult] = None

        self.created_at = datetime.now()
        self.empty_since: Optional[datetime] = self.created_at
        self.closed = False
        self.lock = threading.RLock()  # green once app.main() has monkey-patched eventlet
        self._timer: Optional[DiscussionTimer] = None

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def topic(self) -> Optional[str]:
        return self.round.topic

    @property
    def faker_id(self) -> Optional[str]:
        return self.round.faker_id

    @property
    def turn_index(self) -> int:
        return self.round.turn_index

    @property
    def submitted_words(self) -> Dict[str, str]:
        return self.round.submitted_words

    @property
    def votes(self) -> Dict[str, str]:
        return self.round.votes

    @property
    def player_ids(self) -> List[str]:
        return [p.id for p in self.players]

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and self._timer.is_live

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def has_player(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None

    def current_turn_player(self) -> Optional[Player]:
        if self.phase != Phase.SUBMISSION or self.turn_index >= len(self.players):
            return None
        return self.players[self.turn_index]

    def public_state(self) -> Dict[str, Any]:
        """Externally visible state. Never includes the topic or the faker."""
        turn_player = self.current_turn_player()
        return {
            'code': self.code,
            'host_id': self.host_id,
            'phase': self.phase.value,
            'round': self.round_number,
            'players': roster_dicts(self.players),
            'turn_player_id': turn_player.id if turn_player else None
        }

    def snapshot(self) -> Dict[str, Any]:
        with self.lock:
            self._ensure_open()
            state = self.public_state()
            state['created_at'] = self.created_at.isoformat()
            state['player_count'] = len(self.players)
            return state

    def is_idle(self, now: datetime, max_idle) -> bool:
        """True when the roster has been empty for longer than ``max_idle``."""
        with self.lock:
            return (not self.closed and not self.players
                    and self.empty_since is not None
                    and now - self.empty_since > max_idle)

    def check_invariants(self):
        """Raise AssertionError if the session state is inconsistent."""
        ids = set(self.player_ids)
        assert len(ids) == len(self.players), "duplicate player ids"
        if self.round.faker_id is not None:
            assert self.round.faker_id in ids, "faker not on roster"
        assert set(self.round.submitted_words) <= ids, "word from departed player"
        assert set(self.round.votes) <= ids, "vote from departed player"
        if self.phase == Phase.SUBMISSION:
            assert self.turn_index == len(self.round.submitted_words)
            assert self.turn_index < len(self.players)
        if self.phase in ACTIVE_PHASES:
            assert self.round.faker_id is not None
        else:
            assert self._timer is None or not self._timer.is_live

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add_player(self, player_id: str, name: str, sink: Optional[Sink] = None) -> Player:
        """
        Append a player to the roster (join order is turn order).

        Joining is only possible between rounds.

        Raises:
            LobbyNotFound: session already closed
            WrongPhase: a round is in progress
        """
        with self.lock:
            self._ensure_open()
            existing = self.get_player(player_id)
            if existing:
                if sink:
                    self.sinks[player_id] = sink
                self._send(player_id, EVENTS['JOINED_LOBBY'], {'code': self.code, 'player': existing.to_dict()})
                return existing

            if self.phase not in ROUND_START_PHASES:
                raise WrongPhase("Cannot join while a round is in progress")

            player = Player(id=player_id, name=name)
            self.players.append(player)
            if sink:
                self.sinks[player_id] = sink
            self.empty_since = None

            logger.info(f"Player {name} ({player_id}) joined lobby {self.code}")
            self._send(player_id, EVENTS['JOINED_LOBBY'], {'code': self.code, 'player': player.to_dict()})
            self._broadcast_state()
            return player

    def remove_player(self, player_id: str) -> Player:
        """
        Remove a departing player.

        Mid-round the player leaves the turn order, their word and vote are
        dropped, votes cast against them are discarded, and completion is
        re-checked against the smaller roster. If the faker leaves, or nobody
        is left, the round is aborted back to waiting.

        Raises:
            LobbyNotFound: session already closed
            UnknownPlayer: player not on the roster
        """
        with self.lock:
            self._ensure_open()
            player = self.get_player(player_id)
            if not player:
                raise UnknownPlayer()

            index = self.players.index(player)
            self.players.remove(player)
            self.sinks.pop(player_id, None)
            if not self.players:
                self.empty_since = datetime.now()
            logger.info(f"Player {player.name} ({player_id}) left lobby {self.code} during {self.phase.value}")

            if self.phase in ACTIVE_PHASES:
                self._handle_departure(player_id, index)
            else:
                self.round.submitted_words.pop(player_id, None)
                self.round.votes.pop(player_id, None)

            self._broadcast_state()
            return player

    def close(self, reason: str = CLOSE_REASONS['SHUTDOWN']) -> bool:
        """
        Tear the lobby down: cancel the countdown and notify everyone.

        Returns:
            False if the session was already closed
        """
        with self.lock:
            if self.closed:
                return False
            self._cancel_timer()
            self._broadcast(EVENTS['LOBBY_CLOSED'], {'code': self.code, 'reason': reason})
            self.closed = True
            self.players = []
            self.sinks = {}
            self.round.clear()
            logger.info(f"Closed lobby {self.code} ({reason})")
            return True

    # ------------------------------------------------------------------
    # Round actions
    # ------------------------------------------------------------------

    def start_round(self, caller_id: str, topic: Optional[str] = None) -> int:
        """
        Start a round from ``waiting`` or ``results``.

        Returns:
            The new round number

        Raises:
            NotHost, WrongPhase, InsufficientPlayers
        """
        with self.lock:
            self._ensure_open()
            self._ensure_host(caller_id)
            if self.phase not in ROUND_START_PHASES:
                raise WrongPhase(f"Cannot start a round during {self.phase.value}")
            self._ensure_enough_players()
            return self._begin_round(topic)

    def next_round(self, caller_id: str, topic: Optional[str] = None) -> int:
        """Start the following round; only valid from ``results``."""
        with self.lock:
            self._ensure_open()
            self._ensure_host(caller_id)
            if self.phase != Phase.RESULTS:
                raise WrongPhase("Next round is only available after results")
            self._ensure_enough_players()
            return self._begin_round(topic)

    def submit_word(self, player_id: str, word: str) -> None:
        """
        Record the word of the player whose turn it is.

        Raises:
            UnknownPlayer, WrongPhase, NotYourTurn
        """
        with self.lock:
            self._ensure_open()
            player = self._require_player(player_id)
            if self.phase != Phase.SUBMISSION:
                raise WrongPhase("Words can only be submitted during submission")
            if self.players[self.turn_index].id != player_id:
                raise NotYourTurn()
            if not isinstance(word, str) or not word.strip():
                raise ValueError("word must be a non-empty string")
            word = word[:self.rules.max_word_length]

            self.round.submitted_words[player_id] = word
            self.round.turn_index += 1
            logger.info(f"Lobby {self.code} round {self.round_number}: {player.name} submitted a word "
                        f"({self.turn_index}/{len(self.players)})")

            self._broadcast(EVENTS['WORD_SUBMITTED'], {
                'round': self.round_number,
                'player_id': player_id,
                'name': player.name,
                'word': word
            })

            if self.turn_index >= len(self.players):
                self._enter_discussion()
            else:
                self._announce_turn()

    def submit_vote(self, voter_id: str, target_id: str) -> Optional[RoundResult]:
        """
        Record (or overwrite) a vote. The last vote from a voter wins.

        Returns:
            The round result if this vote completed the voting phase

        Raises:
            UnknownPlayer, WrongPhase, InvalidVote
        """
        with self.lock:
            self._ensure_open()
            self._require_player(voter_id)
            if self.phase != Phase.VOTING:
                raise WrongPhase("Votes can only be cast during voting")
            if not self.has_player(target_id):
                raise UnknownPlayer("Vote target not in this lobby")
            if voter_id == target_id:
                raise InvalidVote()

            changed = voter_id in self.round.votes
            self.round.votes[voter_id] = target_id
            logger.info(f"Lobby {self.code} round {self.round_number}: vote {'changed' if changed else 'cast'} "
                        f"by {voter_id} ({len(self.votes)}/{len(self.players)})")

            self._broadcast(EVENTS['VOTE_CAST'], {
                'round': self.round_number,
                'voter_id': voter_id,
                'votes_cast': len(self.round.votes),
                'votes_needed': len(self.players)
            })

            if self._voting_complete():
                return self._reveal_round()
            return None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _begin_round(self, topic: Optional[str]) -> int:
        self._cancel_timer()
        topic = topic or self.topic_provider.pick_topic()

        self.round_number += 1
        self.round = RoundState(topic=topic, faker_id=self.rng.choice(self.player_ids))
        self.phase = Phase.ROLE_ASSIGNMENT
        assert self.has_player(self.round.faker_id)

        decoys = self.topic_provider.decoys(topic, self.rules.decoy_count)
        for player in self.players:
            if player.id == self.round.faker_id:
                self._send(player.id, EVENTS['ROLE_ASSIGNMENT'], {
                    'round': self.round_number,
                    'role': ROLES['FAKER'],
                    'topic': None,
                    'decoys': list(decoys)
                })
            else:
                self._send(player.id, EVENTS['ROLE_ASSIGNMENT'], {
                    'round': self.round_number,
                    'role': ROLES['TRUTH'],
                    'topic': topic
                })

        self.phase = Phase.SUBMISSION
        logger.info(f"Lobby {self.code} started round {self.round_number} with {len(self.players)} players")
        self._broadcast(EVENTS['ROUND_STARTED'], {
            'round': self.round_number,
            'turn_player_id': self.players[0].id,
            'turn_order': self.player_ids
        })
        self._broadcast_state()
        return self.round_number

    def _announce_turn(self):
        self._broadcast(EVENTS['NEXT_TURN'], {
            'round': self.round_number,
            'turn_player_id': self.players[self.turn_index].id
        })

    def _enter_discussion(self):
        self.phase = Phase.DISCUSSION
        words = [
            {'player_id': p.id, 'name': p.name, 'word': self.round.submitted_words[p.id]}
            for p in self.players if p.id in self.round.submitted_words
        ]
        logger.info(f"Lobby {self.code} round {self.round_number}: discussion for {self.rules.discussion_seconds}s")
        self._broadcast(EVENTS['DISCUSSION_START'], {
            'round': self.round_number,
            'words': words,
            'duration_remaining': self.rules.discussion_seconds
        })
        self._broadcast_state()

        timer = DiscussionTimer(
            self.scheduler,
            self.rules.discussion_seconds,
            on_tick=self._on_discussion_tick,
            on_expire=self._on_discussion_expired,
            label=f"lobby={self.code} round={self.round_number}",
            round_number=self.round_number
        )
        self._timer = timer
        timer.start()

    def _is_current_timer(self, timer: DiscussionTimer) -> bool:
        return (not self.closed
                and timer is self._timer
                and not timer.cancelled
                and self.phase == Phase.DISCUSSION
                and timer.round_number == self.round_number)

    def _on_discussion_tick(self, timer: DiscussionTimer, time_left: int):
        with self.lock:
            if not self._is_current_timer(timer):
                return
            logger.debug(f"Lobby {self.code} discussion: {time_left}s left")
            self._broadcast(EVENTS['DISCUSSION_TICK'], {'round': self.round_number, 'time_left': time_left})

    def _on_discussion_expired(self, timer: DiscussionTimer):
        with self.lock:
            if not self._is_current_timer(timer):
                logger.info(f"[timer-abort] lobby={self.code} stale countdown ignored")
                return
            self._timer = None
            self._broadcast(EVENTS['DISCUSSION_TICK'], {'round': self.round_number, 'time_left': 0})
            self._open_voting()

    def _open_voting(self):
        self.phase = Phase.VOTING
        logger.info(f"Lobby {self.code} round {self.round_number}: voting opened")
        self._broadcast(EVENTS['START_VOTING'], {
            'round': self.round_number,
            'players': roster_dicts(self.players)
        })
        self._broadcast_state()
        if self._voting_complete():
            self._reveal_round()

    def _voting_complete(self) -> bool:
        # A lone player has nobody to vote for
        return len(self.players) < 2 or len(self.round.votes) == len(self.players)

    def _reveal_round(self) -> RoundResult:
        faker_id = self.round.faker_id
        assert self.phase == Phase.VOTING
        assert self.has_player(faker_id)

        votes = dict(self.round.votes)
        deltas = score_round(
            faker_id, votes, self.player_ids,
            self.rules.faker_escape_points, self.rules.catch_points
        )
        for player in self.players:
            player.score += deltas.get(player.id, 0)

        result = RoundResult(
            round_number=self.round_number,
            faker_id=faker_id,
            topic=self.round.topic,
            caught=is_faker_caught(votes, faker_id),
            votes=votes,
            deltas=deltas,
            scores={p.id: p.score for p in self.players}
        )
        self.last_result = result
        self.phase = Phase.RESULTS
        # Secret round data lives on in last_result only
        self.round.topic = None
        self.round.faker_id = None

        logger.info(f"Lobby {self.code} round {self.round_number} results: faker={faker_id} caught={result.caught}")
        self._broadcast(EVENTS['ROUND_RESULTS'], result.to_dict())
        self._broadcast_state()
        return result

    def _abort_round(self, reason: str):
        self._cancel_timer()
        self.round.clear()
        self.phase = Phase.WAITING
        logger.info(f"Lobby {self.code} round {self.round_number} aborted ({reason})")
        self._broadcast(EVENTS['ROUND_ABORTED'], {'round': self.round_number, 'reason': reason})

    def _handle_departure(self, player_id: str, index: int):
        if not self.players:
            self._abort_round(ABORT_REASONS['EMPTY'])
            return
        if player_id == self.round.faker_id:
            self._abort_round(ABORT_REASONS['FAKER_LEFT'])
            return

        self.round.submitted_words.pop(player_id, None)
        self.round.votes.pop(player_id, None)

        if self.phase == Phase.SUBMISSION:
            was_their_turn = index == self.turn_index
            if index < self.turn_index:
                self.round.turn_index -= 1
            if self.turn_index >= len(self.players):
                self._enter_discussion()
            elif was_their_turn:
                self._announce_turn()
        elif self.phase == Phase.VOTING:
            stale = [voter for voter, target in self.round.votes.items() if target == player_id]
            for voter in stale:
                del self.round.votes[voter]
            if stale:
                logger.info(f"Lobby {self.code}: discarded {len(stale)} vote(s) against departed {player_id}")
            if self._voting_complete():
                self._reveal_round()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _ensure_open(self):
        if self.closed:
            raise LobbyNotFound()

    def _ensure_host(self, caller_id: str):
        if caller_id != self.host_id:
            raise NotHost()

    def _ensure_enough_players(self):
        if len(self.players) < max(1, self.rules.min_players):
            raise InsufficientPlayers(
                f"Need at least {max(1, self.rules.min_players)} player(s) to start"
            )

    def _require_player(self, player_id: str) -> Player:
        player = self.get_player(player_id)
        if not player:
            raise UnknownPlayer()
        return player

    def _deliver(self, sink: Sink, recipient: str, event: str, payload: Dict[str, Any]):
        try:
            sink(event, payload)
        except Exception as e:
            logger.error(f"Failed to deliver {event} to {recipient} in lobby {self.code}: {e}")

    def _send(self, player_id: str, event: str, payload: Dict[str, Any]):
        sink = self.sinks.get(player_id)
        if sink:
            self._deliver(sink, player_id, event, payload)

    def _broadcast(self, event: str, payload: Dict[str, Any]):
        if self.host_sink and self.host_id not in self.sinks:
            self._deliver(self.host_sink, self.host_id, event, payload)
        for player in self.players:
            self._send(player.id, event, payload)

    def _broadcast_state(self):
        self._broadcast(EVENTS['LOBBY_UPDATE'], self.public_state())

"""
Phase Scheduler for Who Lies Tonight.

Drives every room through lobby -> night -> day -> vote -> night ... -> ended.

Each phase entry issues a new PhaseTicket and schedules exactly one timer
carrying that ticket's serial. Resolving a phase (on expiry or early) marks
the ticket resolved and cancels the timer, so a stale timer that still fires
finds a resolved or superseded ticket and does nothing. A phase is never
resolved twice.

All public methods expect the caller to hold the room lock; timer callbacks
acquire it themselves through the registry.
"""

import logging
import time
from typing import Callable, Dict, Optional
from rooms.broadcaster import Broadcaster
from rooms.models import Room
from rooms.registry import RoomRegistry
from utils.constants import ELIMINATION_CAUSES, GAME_CONFIG, PHASES
from utils.helpers import start_timer
from .models import GameResult, NightResult, PlayerResult, VoteResults, Winner, timestamp_to_datetime
from .narrator import get_narrator_text
from .night import NightResolver
from .voting import VoteResolver
from .win import check_win

logger = logging.getLogger(__name__)

class PhaseScheduler:
    """Owns phase transitions, phase timers and game-end handling."""

    def __init__(self,
                 registry: RoomRegistry,
                 broadcaster: Broadcaster,
                 night_resolver: Optional[NightResolver] = None,
                 vote_resolver: Optional[VoteResolver] = None,
                 timer_factory: Callable = start_timer,
                 clock: Callable[[], float] = time.time,
                 result_recorder: Optional[Callable[[GameResult], None]] = None,
                 narrator: Callable[..., str] = get_narrator_text,
                 config: Optional[Dict[str, int]] = None):
        """
        Initialize the phase scheduler.

        Args:
            registry: Room registry used to re-acquire rooms from timer callbacks
            broadcaster: Outbound event sink
            night_resolver: Resolver for night actions
            vote_resolver: Resolver for day votes
            timer_factory: timer_factory(delay, callback, *args) -> handle with cancel()
            clock: Returns the current time in seconds
            result_recorder: Receives a GameResult whenever a game ends
            narrator: narrator(outcome, victim_name) -> display text
            config: Overrides for GAME_CONFIG durations
        """
        self.registry = registry
        self.broadcaster = broadcaster
        self.night_resolver = night_resolver or NightResolver()
        self.vote_resolver = vote_resolver or VoteResolver()
        self.timer_factory = timer_factory
        self.clock = clock
        self.result_recorder = result_recorder
        self.narrator = narrator
        self.config = dict(GAME_CONFIG, **(config or {}))

        self.durations = {
            PHASES['NIGHT']: self.config['NIGHT_DURATION'],
            PHASES['DAY']: self.config['DAY_DURATION'],
            PHASES['VOTE']: self.config['VOTE_DURATION']
        }

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _schedule(self, room: Room, delay: float) -> None:
        """
        Replace the room's timer with one bound to the current ticket.

        The timer also remembers whether it was set for the phase itself or
        for the interlude after it, so a phase timer that fires after an
        early resolution cannot cut the interlude short.
        """
        room.cancel_timer()
        room.timer = self.timer_factory(
            delay, self._on_timer, room.code, room.ticket.serial, room.ticket.resolved
        )

    def _on_timer(self, room_code: str, serial: int, for_interlude: bool = False) -> None:
        """Timer callback: act only if the ticket it was issued for is still current."""
        try:
            with self.registry.locked(room_code) as room:
                if room is None:
                    return

                ticket = room.ticket
                if ticket is None or ticket.serial != serial or ticket.resolved != for_interlude:
                    logger.debug(f"[{room_code}] Ignoring stale timer (ticket {serial})")
                    return

                room.timer = None

                if ticket.resolved:
                    self._advance_after_interlude(room, ticket.phase)
                elif ticket.phase == PHASES['NIGHT']:
                    self.resolve_night(room)
                elif ticket.phase == PHASES['DAY']:
                    self.start_vote(room)
                elif ticket.phase == PHASES['VOTE']:
                    self.resolve_vote(room)

        except Exception as e:
            logger.error(f"[{room_code}] Error handling phase timer: {e}")

    def _advance_after_interlude(self, room: Room, resolved_phase: str) -> None:
        if resolved_phase == PHASES['LOBBY']:
            self.start_night(room)
        elif resolved_phase == PHASES['NIGHT']:
            self.start_day(room)
        elif resolved_phase == PHASES['VOTE']:
            self.start_night(room)

    def _close_ticket(self, room: Room) -> None:
        """Mark the current phase as resolved and cancel its timer."""
        room.cancel_timer()
        if room.ticket is not None:
            room.ticket.resolved = True

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def begin_game(self, room: Room) -> None:
        """Start the countdown from the lobby into the first night."""
        room.cancel_timer()
        room.issue_ticket(PHASES['LOBBY']).resolved = True
        self._schedule(room, self.config['START_COUNTDOWN'])

    def _enter_phase(self, room: Room, phase: str) -> None:
        room.cancel_timer()
        room.phase = phase
        room.issue_ticket(phase)
        self.registry.touch(room)

        duration = self.durations[phase]
        self._schedule(room, duration)

        self.broadcaster.to_room(room.code, 'phase_changed', {
            'phase': phase,
            'round': room.round,
            'timer': duration
        })
        logger.info(f"[{room.code}] Phase: {phase} (round {room.round})")

    def start_night(self, room: Room) -> None:
        room.clear_night_state()
        room.round += 1
        self._enter_phase(room, PHASES['NIGHT'])
        self.broadcaster.system_message(room, f"Night {room.round} begins. The city goes dark...")

    def start_day(self, room: Room) -> None:
        room.clear_day_votes()
        self._enter_phase(room, PHASES['DAY'])
        self.broadcaster.system_message(room, "Dawn breaks. Discuss and find the traitors among you.")

    def start_vote(self, room: Room) -> None:
        self._enter_phase(room, PHASES['VOTE'])
        self.broadcaster.system_message(room, "Vote now! The player with the most votes will be eliminated.")
        self.broadcaster.to_room(room.code, 'vote_updated', room.vote_snapshot())

    def skip_discussion(self, room: Room) -> None:
        """Cut the day short and open voting immediately."""
        room.cancel_timer()
        self.broadcaster.system_message(room, "Host skipped discussion - voting begins now!")
        self.start_vote(room)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_night(self, room: Room) -> Optional[NightResult]:
        """Resolve the current night once; later calls are no-ops."""
        if not room.is_accepting(PHASES['NIGHT']):
            return None

        self._close_ticket(room)
        result = self.night_resolver.resolve_room(room)
        target = room.get_player(result.target_id)

        if result.killed_player_id and target:
            self._announce_elimination(room, target.player_id, target.name, ELIMINATION_CAUSES['NIGHT_KILL'])

        self.broadcaster.to_room(room.code, 'night_result', {
            'outcome': result.outcome,
            'victimId': target.player_id if target else None,
            'victimName': target.name if target else None,
            'victimAvatar': target.avatar if target else None,
            'saved': result.saved,
            'variant': result.cutscene_variant
        })
        self.broadcaster.to_room(room.code, 'narrate', {
            'text': self.narrator(result.outcome, target.name if target else None),
            'outcome': result.outcome
        })
        self.broadcaster.room_update(room)

        if self.end_if_won(room):
            return result

        delay = self.config['CUTSCENE_DELAY'] if result.cutscene_variant else self.config['NIGHT_REVEAL_DELAY']
        self._schedule(room, delay)
        return result

    def resolve_vote(self, room: Room) -> Optional[VoteResults]:
        """Resolve the current vote once; later calls are no-ops."""
        if not room.is_accepting(PHASES['VOTE']):
            return None

        self._close_ticket(room)
        results = self.vote_resolver.resolve_room(room)
        lynched = room.get_player(results.lynched_player_id)

        if lynched:
            self._announce_elimination(room, lynched.player_id, lynched.name, ELIMINATION_CAUSES['LYNCH'])
            self.broadcaster.system_message(room, f"{lynched.name} has been eliminated by vote.")
        else:
            self.broadcaster.system_message(room, "No majority reached. No one is eliminated today.")

        self.broadcaster.room_update(room)

        if self.end_if_won(room):
            return results

        self._schedule(room, self.config['VOTE_REVEAL_DELAY'])
        return results

    def check_early_resolution(self, room: Room) -> bool:
        """
        Resolve the current phase early if everyone required has acted.

        Returns:
            True if a phase was resolved
        """
        if room.is_accepting(PHASES['NIGHT']) and self.night_resolver.all_actions_submitted(room):
            logger.info(f"[{room.code}] All night actions submitted early")
            return self.resolve_night(room) is not None

        if room.is_accepting(PHASES['VOTE']) and self.vote_resolver.all_votes_in(room):
            logger.info(f"[{room.code}] All votes in early")
            return self.resolve_vote(room) is not None

        return False

    def _announce_elimination(self, room: Room, player_id: str, name: str, cause: str) -> None:
        self.broadcaster.to_room(room.code, 'player_eliminated', {
            'playerId': player_id,
            'playerName': name,
            'cause': cause
        })

    # ------------------------------------------------------------------
    # Game end
    # ------------------------------------------------------------------

    def end_if_won(self, room: Room) -> bool:
        """Run the win check and end the game if it is decided."""
        winner = check_win(room)
        if not winner.is_decided:
            return False
        self.end_game(room, winner)
        return True

    def end_game(self, room: Room, winner: Winner) -> None:
        """Enter the terminal phase, reveal all roles and hand off the result."""
        room.cancel_timer()
        room.phase = PHASES['ENDED']
        room.issue_ticket(PHASES['ENDED']).resolved = True
        self.registry.touch(room)

        self.broadcaster.to_room(room.code, 'game_ended', {
            'winner': winner.value,
            'roles': [p.to_reveal() for p in room.players.values()]
        })
        self.broadcaster.system_message(
            room,
            "The syndicate wins! The city falls to the mob." if winner is Winner.MAFIA
            else "The townspeople win! Justice prevails... for now."
        )
        logger.info(f"[{room.code}] Game ended after round {room.round}: {winner.value} wins")

        self._record_result(room, winner)

    def build_result(self, room: Room, winner: Winner) -> GameResult:
        players = [
            PlayerResult(
                session_id=p.session_id,
                name=p.name,
                role=p.role,
                won=(p.is_mafia == (winner is Winner.MAFIA))
            )
            for p in room.players.values()
        ]
        return GameResult(
            room_code=room.code,
            winner=winner.value,
            rounds=room.round,
            player_count=room.player_count,
            started_at=timestamp_to_datetime(room.started_at),
            ended_at=timestamp_to_datetime(self.clock()),
            players=players
        )

    def _record_result(self, room: Room, winner: Winner) -> None:
        if not self.result_recorder:
            return
        try:
            self.result_recorder(self.build_result(room, winner))
        except Exception as e:
            logger.error(f"[{room.code}] Failed to record game result: {e}")

    def reset(self, room: Room) -> None:
        """Return an ended room to the lobby for another game."""
        room.cancel_timer()
        room.phase = PHASES['LOBBY']
        room.round = 0
        room.started = False
        room.started_at = None
        room.ticket = None
        room.clear_night_state()
        room.clear_day_votes()

        now = self.clock()
        for player in room.players.values():
            player.reset_for_new_game(now)

        self.registry.touch(room)
        logger.info(f"[{room.code}] Play again - back to lobby")

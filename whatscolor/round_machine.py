"""
One round of play: secret, attempts, the guess being entered, and the clock.

RoundStateMachine is the only thing that mutates a RoundState. Callers get
copies through snapshot(). The clock is a plain counter: whoever owns the
real timer calls on_tick() about once per second while the round is timed.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Literal, Optional

from .config import DIFFICULTY_PRESETS, MAX_LEVEL, MAX_TIME_LIMIT, MIN_TIME_LIMIT
from .engine import generate_secret, is_solved, is_valid_code, score_guess
from .types import (
    CODE_LENGTH,
    PALETTE,
    Code,
    Color,
    Difficulty,
    Direction,
    FeedbackKind,
    FeedbackMode,
    RoundStatus,
    Slots,
)

logger = logging.getLogger(__name__)

# Player-facing status text
MSG_READY = "READY"
MSG_SOLVED = "SOLVED"
MSG_TRY_AGAIN = "TRY AGAIN"
MSG_FAILED = "FAILED"
MSG_TIMES_UP = "TIME'S UP"
MSG_FILL_ALL_SLOTS = "FILL ALL SLOTS"
MSG_UNIQUE_COLORS = "USE UNIQUE COLORS"
MSG_ALL_COMPLETE = "ALL MISSIONS COMPLETE"

SubmitOutcome = Literal["accepted", "incomplete_guess", "duplicate_colors", "round_over", "not_started"]


def _empty_slots() -> Slots:
    return [None] * CODE_LENGTH


@dataclass(frozen=True)
class Attempt:
    row_number: int
    colors: Code
    feedback: List[FeedbackKind]


@dataclass
class RoundState:
    secret_code: Code = field(default_factory=list)
    attempts: List[Attempt] = field(default_factory=list)
    current_guess: Slots = field(default_factory=_empty_slots)
    active_index: int = 0
    mode: FeedbackMode = "aggregate"
    difficulty: Difficulty = "normal"
    max_attempts: int = 7
    status: RoundStatus = "setup"
    is_over: bool = False
    level: int = 1
    message: str = MSG_READY
    time_remaining: int = 0
    timer_active: bool = False

    @property
    def attempts_left(self) -> int:
        return max(0, self.max_attempts - len(self.attempts))


@dataclass(frozen=True)
class SubmitResult:
    outcome: SubmitOutcome
    feedback: Optional[List[FeedbackKind]] = None
    won: bool = False
    lost: bool = False
    # the win cleared the last level and the campaign starts over
    campaign_complete: bool = False
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.outcome == "accepted"


class RoundStateMachine:
    def __init__(
        self,
        mode: FeedbackMode = "aggregate",
        difficulty: Difficulty = "normal",
        level: int = 1,
        level_progression: bool = True,
        randbelow: Optional[Callable[[int], int]] = None,
    ) -> None:
        self._state = RoundState(
            mode=mode,
            difficulty=difficulty,
            max_attempts=DIFFICULTY_PRESETS[difficulty].max_attempts,
            level=level,
            time_remaining=DIFFICULTY_PRESETS[difficulty].base_time,
        )
        # Dual play keeps the level where it is
        self.level_progression = level_progression
        # Only rounds started after the setup flow carry a running clock
        self.game_started = False
        self._randbelow = randbelow

    # --- Queries ---

    @property
    def state(self) -> RoundState:
        """Live state. Treat as read-only; use snapshot() to hand it out."""
        return self._state

    def snapshot(self) -> RoundState:
        return copy.deepcopy(self._state)

    @property
    def is_over(self) -> bool:
        return self._state.is_over

    @property
    def accepts_input(self) -> bool:
        """Guess entry only happens while a round is running."""
        return self._state.status == "in_progress" and not self._state.is_over

    @property
    def level(self) -> int:
        return self._state.level

    @level.setter
    def level(self, value: int) -> None:
        if value < 1:
            raise ValueError("Level starts at 1.")
        self._state.level = value

    # --- Round lifecycle ---

    def start_round(
        self,
        secret_code: Optional[Code] = None,
        mode: Optional[FeedbackMode] = None,
        difficulty: Optional[Difficulty] = None,
    ) -> RoundState:
        if secret_code is not None:
            if not is_valid_code(secret_code):
                raise ValueError(f"Secret must be {CODE_LENGTH} distinct palette colors.")
            secret = list(secret_code)
        elif self._randbelow is not None:
            secret = generate_secret(self._randbelow)
        else:
            secret = generate_secret()

        state = self._state
        if mode is not None:
            state.mode = mode
        if difficulty is not None:
            state.difficulty = difficulty
        state.max_attempts = DIFFICULTY_PRESETS[state.difficulty].max_attempts

        state.secret_code = secret
        state.attempts = []
        state.current_guess = _empty_slots()
        state.active_index = 0
        state.is_over = False
        state.status = "in_progress"
        state.message = MSG_READY

        if self.game_started and state.time_remaining > 0:
            self.start_timer()

        logger.info(
            "round started: level=%d difficulty=%s mode=%s timed=%s",
            state.level, state.difficulty, state.mode, state.timer_active,
        )
        return self.snapshot()

    def reset_to_setup(self) -> RoundState:
        """Drop the current round entirely; nothing can be entered until start_round()."""
        self.stop_timer()
        state = self._state
        state.secret_code = []
        state.attempts = []
        state.current_guess = _empty_slots()
        state.active_index = 0
        state.is_over = False
        state.status = "setup"
        state.message = MSG_READY
        return self.snapshot()

    # --- Guess entry ---

    def _check_index(self, index: int) -> int:
        if index < 0 or index >= CODE_LENGTH:
            raise ValueError(f"Slot index must be between 0 and {CODE_LENGTH - 1}.")
        return index

    def place_color(self, color: Color, index: Optional[int] = None) -> None:
        if color not in PALETTE:
            raise ValueError(f"Unknown color: {color!r}")
        if index is None:
            index = self._state.active_index
        self._check_index(index)
        if not self.accepts_input:
            return
        self._state.current_guess[index] = color
        # No auto-advance: the slot keeps focus so it can be overwritten
        self._state.active_index = index

    def select_slot(self, index: int) -> None:
        self._check_index(index)
        if not self.accepts_input:
            return
        self._state.active_index = index

    def swap_slots(self, source: int, target: int) -> None:
        """Exchange two slots of the current guess (a dragged peg dropped on another slot)."""
        self._check_index(source)
        self._check_index(target)
        if not self.accepts_input or source == target:
            return
        guess = self._state.current_guess
        guess[source], guess[target] = guess[target], guess[source]
        self._state.active_index = target

    def move_active(self, direction: Direction) -> int:
        """Clamped to the row; no wraparound."""
        if not self.accepts_input:
            return self._state.active_index
        if direction == "forward":
            if self._state.active_index < CODE_LENGTH - 1:
                self._state.active_index += 1
        elif direction == "backward":
            if self._state.active_index > 0:
                self._state.active_index -= 1
        else:
            raise ValueError(f"Unknown direction: {direction!r}")
        return self._state.active_index

    def cycle_slot_color(self, index: Optional[int] = None, forward: bool = True) -> Optional[Color]:
        if index is None:
            index = self._state.active_index
        self._check_index(index)
        if not self.accepts_input:
            return self._state.current_guess[index]

        current = self._state.current_guess[index]
        # An empty slot counts as sitting on the first palette entry
        position = PALETTE.index(current) if current is not None else 0
        step = 1 if forward else -1
        color = PALETTE[(position + step) % len(PALETTE)]
        self.place_color(color, index)
        return color

    # --- Submission ---

    def submit_guess(self) -> SubmitResult:
        state = self._state
        if state.is_over:
            return SubmitResult(outcome="round_over", message=state.message)
        if state.status != "in_progress":
            return SubmitResult(outcome="not_started", message=state.message)

        # 1. Every slot filled
        if any(color is None for color in state.current_guess):
            state.message = MSG_FILL_ALL_SLOTS
            logger.debug("guess rejected: incomplete %s", state.current_guess)
            return SubmitResult(outcome="incomplete_guess", message=MSG_FILL_ALL_SLOTS)

        colors: Code = list(state.current_guess)

        # 2. No repeated colors
        if len(set(colors)) != len(colors):
            state.message = MSG_UNIQUE_COLORS
            logger.debug("guess rejected: duplicate colors %s", colors)
            return SubmitResult(outcome="duplicate_colors", message=MSG_UNIQUE_COLORS)

        # 3. Score and record
        feedback = score_guess(state.secret_code, colors, state.mode)
        state.attempts.append(
            Attempt(row_number=len(state.attempts) + 1, colors=colors, feedback=feedback)
        )
        state.current_guess = _empty_slots()
        state.active_index = 0

        return self._evaluate(feedback)

    def _evaluate(self, feedback: List[FeedbackKind]) -> SubmitResult:
        state = self._state

        if is_solved(feedback):
            self.stop_timer()
            state.is_over = True
            state.status = "won"
            state.message = MSG_SOLVED
            campaign_complete = False
            if self.level_progression:
                state.level += 1
                if state.level > MAX_LEVEL:
                    state.level = 1
                    state.message = MSG_ALL_COMPLETE
                    campaign_complete = True
            logger.info("round won in %d attempt(s); level now %d", len(state.attempts), state.level)
            return SubmitResult(
                outcome="accepted",
                feedback=feedback,
                won=True,
                campaign_complete=campaign_complete,
                message=state.message,
            )

        if len(state.attempts) >= state.max_attempts:
            self.stop_timer()
            state.is_over = True
            state.status = "lost"
            state.message = MSG_FAILED
            logger.info("round lost after %d attempt(s)", len(state.attempts))
            return SubmitResult(outcome="accepted", feedback=feedback, lost=True, message=MSG_FAILED)

        state.message = MSG_TRY_AGAIN
        return SubmitResult(outcome="accepted", feedback=feedback, message=MSG_TRY_AGAIN)

    # --- Clock ---

    def set_time_limit(self, seconds: int) -> int:
        self._state.time_remaining = max(MIN_TIME_LIMIT, min(MAX_TIME_LIMIT, seconds))
        return self._state.time_remaining

    def start_timer(self) -> None:
        if self._state.time_remaining > 0:
            self._state.timer_active = True

    def stop_timer(self) -> None:
        self._state.timer_active = False

    def on_tick(self) -> int:
        """One second elapsed. Returns the seconds left."""
        state = self._state
        if not state.timer_active or state.status != "in_progress":
            return state.time_remaining

        if state.time_remaining > 0:
            state.time_remaining -= 1
        if state.time_remaining == 0:
            self.stop_timer()
            state.is_over = True
            state.status = "timed_out"
            state.message = MSG_TIMES_UP
            logger.info("round timed out after %d attempt(s)", len(state.attempts))
        return state.time_remaining

"""
Session flow around a RoundStateMachine.

solo: pick difficulty, start() and play level after level; a win persists
      the new level and the next round begins on the following tick.
dual: one player sets the time limit and authors the secret, the other
      guesses it; the round simply stops on a win.
"""

import logging
from typing import Callable, List, Optional, Protocol

from .config import DIFFICULTY_PRESETS, RESTART_TIME_LIMIT
from .engine import is_valid_code
from .round_machine import RoundState, RoundStateMachine, SubmitResult
from .types import CODE_LENGTH, PALETTE, Color, Difficulty, Direction, FeedbackMode, Variant

logger = logging.getLogger(__name__)


class LevelStore(Protocol):
    def get_level(self, difficulty: Difficulty) -> int: ...

    def save_level(self, difficulty: Difficulty, level: int) -> None: ...


class SessionController:
    def __init__(
        self,
        variant: Variant = "solo",
        difficulty: Difficulty = "normal",
        mode: FeedbackMode = "aggregate",
        auto_advance_on_win: Optional[bool] = None,
        level_store: Optional[LevelStore] = None,
        randbelow: Optional[Callable[[int], int]] = None,
    ) -> None:
        self.variant = variant
        self.auto_advance_on_win = (variant == "solo") if auto_advance_on_win is None else auto_advance_on_win
        self.level_store = level_store
        self.started = False
        self.advance_pending = False
        self.secret_draft: List[Color] = []

        level = level_store.get_level(difficulty) if level_store is not None else 1
        self.machine = RoundStateMachine(
            mode=mode,
            difficulty=difficulty,
            level=level,
            level_progression=(variant == "solo"),
            randbelow=randbelow,
        )

    @property
    def state(self) -> RoundState:
        return self.machine.state

    @property
    def difficulty(self) -> Difficulty:
        return self.machine.state.difficulty

    @property
    def mode(self) -> FeedbackMode:
        return self.machine.state.mode

    # --- Setup ---

    def start(self) -> RoundState:
        """Leave the setup screens. Solo starts right away with a random code and the difficulty's clock."""
        self.started = True
        self.machine.game_started = True
        if self.variant == "solo":
            self.secret_draft = []
            self._reset_clock()
            return self.machine.start_round()
        return self.machine.snapshot()

    def set_time_limit(self, seconds: int) -> int:
        return self.machine.set_time_limit(seconds)

    def append_secret_color(self, color: Color) -> bool:
        if color not in PALETTE:
            raise ValueError(f"Unknown color: {color!r}")
        if len(self.secret_draft) >= CODE_LENGTH:
            return False
        self.secret_draft.append(color)
        return True

    def truncate_secret_from(self, index: int) -> None:
        if index < 0:
            raise ValueError("Index must be non-negative.")
        # Past the end there is nothing to drop
        del self.secret_draft[index:]

    @property
    def is_secret_complete(self) -> bool:
        return len(self.secret_draft) == CODE_LENGTH

    def finalize(self) -> RoundState:
        """Hand the authored code to a fresh round."""
        if not self.is_secret_complete:
            raise ValueError(f"Secret needs {CODE_LENGTH} colors, has {len(self.secret_draft)}.")
        if not is_valid_code(self.secret_draft):
            raise ValueError("Secret colors must all be different.")
        self._begin()
        return self.machine.start_round(secret_code=list(self.secret_draft))

    def abandon_secret(self) -> RoundState:
        """Authoring given up: play against a generated code instead."""
        self.secret_draft = []
        self._begin()
        return self.machine.start_round()

    def _begin(self) -> None:
        self.started = True
        self.machine.game_started = True
        self.advance_pending = False

    def _reset_clock(self) -> None:
        self.machine.state.time_remaining = DIFFICULTY_PRESETS[self.difficulty].base_time

    # --- Gameplay ---

    def place_color(self, color: Color, index: Optional[int] = None) -> None:
        self.machine.place_color(color, index)

    def select_slot(self, index: int) -> None:
        self.machine.select_slot(index)

    def swap_slots(self, source: int, target: int) -> None:
        self.machine.swap_slots(source, target)

    def move_active(self, direction: Direction) -> int:
        return self.machine.move_active(direction)

    def cycle_slot_color(self, index: Optional[int] = None, forward: bool = True) -> Optional[Color]:
        return self.machine.cycle_slot_color(index, forward)

    def submit_guess(self) -> SubmitResult:
        result = self.machine.submit_guess()
        if result.won:
            self._on_win(result)
        return result

    def _on_win(self, result: SubmitResult) -> None:
        if self.variant != "solo":
            return
        if self.level_store is not None:
            self.level_store.save_level(self.difficulty, self.machine.level)
            logger.info("level %d saved for %s", self.machine.level, self.difficulty)
        # The campaign is over after the last level; nothing follows it
        if self.auto_advance_on_win and not result.campaign_complete:
            self.advance_pending = True

    def next_round(self) -> RoundState:
        self.advance_pending = False
        self._reset_clock()
        return self.machine.start_round()

    def on_tick(self) -> int:
        """Scheduler entry point. A pending level advance takes the tick instead of the clock."""
        if self.advance_pending:
            self.next_round()
            return self.machine.state.time_remaining
        return self.machine.on_tick()

    # --- Settings & pause ---

    def change_difficulty(self, difficulty: Difficulty) -> RoundState:
        if self.level_store is not None:
            self.machine.level = self.level_store.get_level(difficulty)
        self.machine.state.difficulty = difficulty
        self._reset_clock()
        self.advance_pending = False
        return self.machine.start_round(difficulty=difficulty)

    def change_mode(self, mode: FeedbackMode) -> RoundState:
        self.advance_pending = False
        return self.machine.start_round(mode=mode)

    def pause(self) -> None:
        self.machine.stop_timer()

    def resume(self) -> None:
        if not self.machine.is_over:
            self.machine.start_timer()

    def restart(self) -> RoundState:
        """Back to the start screen: level 1, default clock, nothing authored."""
        self.started = False
        self.machine.game_started = False
        self.advance_pending = False
        self.secret_draft = []
        self.machine.level = 1
        self.machine.state.time_remaining = RESTART_TIME_LIMIT
        return self.machine.reset_to_setup()

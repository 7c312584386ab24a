"""
Explicit validation & Pydantic models
- Request bodies only accept palette colors and slot indices 0..3
- Responses are snapshots of the round; the secret is only filled in once the round is over
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .round_machine import RoundState, SubmitOutcome
from .session import SessionController
from .types import Color, Difficulty, Direction, FeedbackKind, FeedbackMode, RoundStatus, Variant


# 1. Starting a session
class NewSessionRequest(BaseModel):
    variant: Variant = Field("solo", description="solo: levels vs. random codes; dual: one player sets the code")
    difficulty: Difficulty = Field("normal", description="Sets the attempt cap and the default time budget")
    mode: FeedbackMode = Field("aggregate", description="positional = per-slot hints, aggregate = peg counts")
    auto_advance_on_win: Optional[bool] = Field(
        None, description="Start the next level automatically after a win (defaults to true for solo)"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"variant": "solo", "difficulty": "normal", "mode": "aggregate"},
                {"variant": "dual", "difficulty": "easy", "mode": "positional"},
            ]
        }
    }


# 2. Inputs for slot / secret editing
class ColorRequest(BaseModel):
    color: Color = Field(..., description="One of the 7 palette colors")


class SwapRequest(BaseModel):
    source: int = Field(..., ge=0, le=3, description="Slot the peg is dragged from")
    target: int = Field(..., ge=0, le=3, description="Slot the peg is dropped on")


class MoveRequest(BaseModel):
    direction: Direction = Field(..., description="forward or backward; stops at the row ends")


class TimeLimitRequest(BaseModel):
    seconds: int = Field(..., description="Round clock in seconds; clamped to 10..300")


class SettingsRequest(BaseModel):
    difficulty: Optional[Difficulty] = Field(None, description="New difficulty (starts a fresh round)")
    mode: Optional[FeedbackMode] = Field(None, description="New feedback mode (starts a fresh round)")


# 3. One submitted row
class AttemptOut(BaseModel):
    row_number: int = Field(..., description="1-based row on the board")
    colors: List[Color] = Field(..., description="The guessed colors")
    feedback: List[FeedbackKind] = Field(..., description="Hint pegs for this row")


# 4. Everything the presentation layer needs to draw the board
class SessionState(BaseModel):
    session_id: str = Field(..., description="Unique ID for the session")
    variant: Variant
    started: bool = Field(..., description="Whether the setup flow is finished")
    difficulty: Difficulty
    mode: FeedbackMode
    status: RoundStatus = Field(..., description="Round phase")
    message: str = Field(..., description="Status text for the player")
    is_over: bool
    level: int
    max_attempts: int
    attempts_left: int
    attempts: List[AttemptOut] = Field(..., description="Rows submitted so far, in order")
    current_guess: List[Optional[Color]] = Field(..., description="Slots being filled, null = empty")
    active_index: int = Field(..., description="Slot that receives the next color")
    time_remaining: int = Field(..., description="Seconds left on the round clock")
    timer_active: bool
    secret_draft: List[Color] = Field(..., description="Code authored so far (dual setup)")
    advance_pending: bool = Field(..., description="Next level starts on the next tick")
    secret: Optional[List[Color]] = Field(None, description="Revealed only when the round is over")


# 5. Result of a guess
class GuessResponse(BaseModel):
    outcome: SubmitOutcome
    feedback: Optional[List[FeedbackKind]] = Field(None, description="Hint pegs of the accepted guess")
    won: bool
    lost: bool
    message: str
    state: SessionState


class TickResponse(BaseModel):
    time_remaining: int
    is_over: bool
    status: RoundStatus
    message: str


class LevelsOut(BaseModel):
    levels: Dict[Difficulty, int] = Field(..., description="Level reached per difficulty")


class SecretDraftOut(BaseModel):
    accepted: bool = Field(..., description="False once 4 colors are already held")
    secret_draft: List[Color]
    complete: bool


def to_session_state(session_id: str, controller: SessionController) -> SessionState:
    state: RoundState = controller.state
    return SessionState(
        session_id=session_id,
        variant=controller.variant,
        started=controller.started,
        difficulty=state.difficulty,
        mode=state.mode,
        status=state.status,
        message=state.message,
        is_over=state.is_over,
        level=state.level,
        max_attempts=state.max_attempts,
        attempts_left=state.attempts_left,
        attempts=[
            AttemptOut(row_number=a.row_number, colors=list(a.colors), feedback=list(a.feedback))
            for a in state.attempts
        ],
        current_guess=list(state.current_guess),
        active_index=state.active_index,
        time_remaining=state.time_remaining,
        timer_active=state.timer_active,
        secret_draft=list(controller.secret_draft),
        advance_pending=controller.advance_pending,
        secret=list(state.secret_code) if state.is_over else None,
    )

'''
WhatsColor API

The game itself runs in memory (SessionStore); only the level reached per
difficulty goes to the database. A client drives a session by forwarding
the player's moves and calling /tick once per second while a round is timed.

Endpoints:
POST   /sessions                             -> new session (solo | dual)
GET    /sessions/{id}                        -> board snapshot
POST   /sessions/{id}/start                  -> leave setup (solo starts a round)
PUT    /sessions/{id}/time-limit             -> dual: round clock
POST   /sessions/{id}/secret                 -> dual: append a secret color
DELETE /sessions/{id}/secret/{index}         -> dual: drop secret colors from index on
POST   /sessions/{id}/secret/finalize        -> dual: play against the authored code
POST   /sessions/{id}/secret/abandon         -> dual: play against a random code
PUT    /sessions/{id}/slots/{index}          -> place a color
POST   /sessions/{id}/slots/{index}/cycle    -> next/previous palette color
POST   /sessions/{id}/slots/swap             -> swap two slots
POST   /sessions/{id}/active                 -> move the active slot
POST   /sessions/{id}/guess                  -> submit the current row
POST   /sessions/{id}/tick                   -> one second elapsed
POST   /sessions/{id}/pause | resume | restart | next
PUT    /sessions/{id}/settings               -> change difficulty / mode
DELETE /sessions/{id}                        -> discard

Extras:
GET  /levels        -> saved level per difficulty
POST /levels/reset  -> forget saved levels
'''

import logging

from fastapi import Depends, FastAPI, HTTPException, Path
from fastapi.middleware.cors import CORSMiddleware

from .bootstrap_db import create_all    # dev-only: create tables
from .config import APP_ENV, configure_logging
from .db import SessionLocal
from .repository import DBLevelStore
from .schemas import (
    ColorRequest,
    GuessResponse,
    LevelsOut,
    MoveRequest,
    NewSessionRequest,
    SecretDraftOut,
    SessionState,
    SettingsRequest,
    SwapRequest,
    TickResponse,
    TimeLimitRequest,
    to_session_state,
)
from .session import SessionController
from .store import SessionStore

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="WhatsColor API", version="1.0.0")

# Allow everything in dev so the docs and front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: auto-create tables locally ---
if APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()

_sessions = SessionStore()


def get_sessions() -> SessionStore:
    return _sessions


def get_level_store() -> DBLevelStore:
    return DBLevelStore(SessionLocal)


def _get_controller(session_id: str, sessions: SessionStore) -> SessionController:
    controller = sessions.get(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return controller


# ---------------- Routes ----------------

@app.post("/sessions", response_model=SessionState, summary="Create a game session")
def create_session(
    payload: NewSessionRequest,
    sessions: SessionStore = Depends(get_sessions),
    levels: DBLevelStore = Depends(get_level_store),
) -> SessionState:
    controller = SessionController(
        variant=payload.variant,
        difficulty=payload.difficulty,
        mode=payload.mode,
        auto_advance_on_win=payload.auto_advance_on_win,
        level_store=levels,
    )
    with sessions.lock:
        session_id = sessions.add(controller)
        state = to_session_state(session_id, controller)
    logger.info("session %s created (%s, %s, %s)", session_id, payload.variant, payload.difficulty, payload.mode)
    return state


@app.get("/sessions/{session_id}", response_model=SessionState, summary="Get the board")
def get_session(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        return to_session_state(session_id, controller)


@app.delete("/sessions/{session_id}", summary="Discard a session")
def delete_session(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> dict:
    if not sessions.remove(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"message": "Session discarded."}


@app.post("/sessions/{session_id}/start", response_model=SessionState, summary="Finish setup")
def start_session(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.start()
        return to_session_state(session_id, controller)


# ---- Dual setup ----

@app.put("/sessions/{session_id}/time-limit", response_model=SessionState, summary="Set the round clock")
def set_time_limit(
    session_id: str,
    payload: TimeLimitRequest,
    sessions: SessionStore = Depends(get_sessions),
) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.set_time_limit(payload.seconds)
        return to_session_state(session_id, controller)


@app.post("/sessions/{session_id}/secret", response_model=SecretDraftOut, summary="Append a secret color")
def append_secret_color(
    session_id: str,
    payload: ColorRequest,
    sessions: SessionStore = Depends(get_sessions),
) -> SecretDraftOut:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        accepted = controller.append_secret_color(payload.color)
        return SecretDraftOut(
            accepted=accepted,
            secret_draft=list(controller.secret_draft),
            complete=controller.is_secret_complete,
        )


@app.delete("/sessions/{session_id}/secret/{index}", response_model=SecretDraftOut, summary="Edit the secret")
def truncate_secret(
    session_id: str,
    index: int = Path(..., ge=0, le=3),
    sessions: SessionStore = Depends(get_sessions),
) -> SecretDraftOut:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.truncate_secret_from(index)
        return SecretDraftOut(
            accepted=True,
            secret_draft=list(controller.secret_draft),
            complete=controller.is_secret_complete,
        )


@app.post("/sessions/{session_id}/secret/finalize", response_model=SessionState, summary="Play the authored code")
def finalize_secret(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        try:
            controller.finalize()
        except ValueError as ve:
            raise HTTPException(status_code=409, detail=str(ve))
        return to_session_state(session_id, controller)


@app.post("/sessions/{session_id}/secret/abandon", response_model=SessionState, summary="Play a random code")
def abandon_secret(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.abandon_secret()
        return to_session_state(session_id, controller)


# ---- Guess entry ----

@app.put("/sessions/{session_id}/slots/{index}", response_model=SessionState, summary="Place a color")
def place_color(
    session_id: str,
    payload: ColorRequest,
    index: int = Path(..., ge=0, le=3),
    sessions: SessionStore = Depends(get_sessions),
) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.place_color(payload.color, index)
        return to_session_state(session_id, controller)


@app.post("/sessions/{session_id}/slots/swap", response_model=SessionState, summary="Swap two slots")
def swap_slots(
    session_id: str,
    payload: SwapRequest,
    sessions: SessionStore = Depends(get_sessions),
) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.swap_slots(payload.source, payload.target)
        return to_session_state(session_id, controller)


@app.post("/sessions/{session_id}/slots/{index}/cycle", response_model=SessionState, summary="Cycle a slot color")
def cycle_slot_color(
    session_id: str,
    index: int = Path(..., ge=0, le=3),
    forward: bool = True,
    sessions: SessionStore = Depends(get_sessions),
) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.cycle_slot_color(index, forward)
        return to_session_state(session_id, controller)


@app.post("/sessions/{session_id}/active", response_model=SessionState, summary="Move the active slot")
def move_active(
    session_id: str,
    payload: MoveRequest,
    sessions: SessionStore = Depends(get_sessions),
) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.move_active(payload.direction)
        return to_session_state(session_id, controller)


@app.post("/sessions/{session_id}/guess", response_model=GuessResponse, summary="Submit the current row")
def submit_guess(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> GuessResponse:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        result = controller.submit_guess()

        # Incomplete / duplicate rows are the player's to fix; nothing was recorded
        if result.outcome in ("incomplete_guess", "duplicate_colors"):
            raise HTTPException(status_code=400, detail=result.message)

        return GuessResponse(
            outcome=result.outcome,
            feedback=result.feedback,
            won=result.won,
            lost=result.lost,
            message=result.message,
            state=to_session_state(session_id, controller),
        )


# ---- Clock & lifecycle ----

@app.post("/sessions/{session_id}/tick", response_model=TickResponse, summary="One second elapsed")
def tick(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> TickResponse:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        remaining = controller.on_tick()
        state = controller.state
        return TickResponse(
            time_remaining=remaining,
            is_over=state.is_over,
            status=state.status,
            message=state.message,
        )


@app.post("/sessions/{session_id}/pause", response_model=SessionState, summary="Stop the clock")
def pause(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.pause()
        return to_session_state(session_id, controller)


@app.post("/sessions/{session_id}/resume", response_model=SessionState, summary="Restart the clock")
def resume(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.resume()
        return to_session_state(session_id, controller)


@app.post("/sessions/{session_id}/restart", response_model=SessionState, summary="Back to the start screen")
def restart(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.restart()
        return to_session_state(session_id, controller)


@app.post("/sessions/{session_id}/next", response_model=SessionState, summary="Start the next round")
def next_round(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        controller.next_round()
        return to_session_state(session_id, controller)


@app.put("/sessions/{session_id}/settings", response_model=SessionState, summary="Change difficulty or mode")
def change_settings(
    session_id: str,
    payload: SettingsRequest,
    sessions: SessionStore = Depends(get_sessions),
) -> SessionState:
    controller = _get_controller(session_id, sessions)
    with sessions.lock:
        if payload.difficulty is not None:
            controller.change_difficulty(payload.difficulty)
        if payload.mode is not None:
            controller.change_mode(payload.mode)
        return to_session_state(session_id, controller)


# ---- Levels ----

@app.get("/levels", response_model=LevelsOut, summary="Saved level per difficulty")
def get_levels(levels: DBLevelStore = Depends(get_level_store)) -> LevelsOut:
    return LevelsOut(levels=levels.all_levels())


@app.post("/levels/reset", summary="Forget saved levels")
def reset_levels(levels: DBLevelStore = Depends(get_level_store)) -> dict:
    levels.reset()
    return {"message": "Levels reset."}
